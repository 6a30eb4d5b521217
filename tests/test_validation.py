"""
Validator, sanitizer, diff and query coercion unit tests.
"""

from datetime import datetime, timezone

import pytest

from taskdesk.engine import clean_field, coerce_positive_int, diff_task, sanitize_input, validate_task
from taskdesk.engine.core import MAX_PAGE
from taskdesk.models import Task


def _task(title="Buy milk", description="2%"):
    now = datetime.now(timezone.utc)
    return Task(id="1", title=title, description=description, created_at=now, updated_at=now)


def test_valid_pair_has_no_errors():
    assert validate_task("Buy milk", "2%") == []


def test_all_violations_are_collected():
    """Missing title and overlong description are both reported in one pass."""
    errors = validate_task(None, "x" * 501)

    assert errors == [
        "Title is required",
        "Description must be less than 500 characters",
    ]


def test_whitespace_only_counts_as_missing():
    assert validate_task("   ", "\t\n") == ["Title is required", "Description is required"]


def test_length_limits_are_inclusive():
    assert validate_task("t" * 100, "d" * 500) == []
    assert validate_task("t" * 101, "d" * 500) == ["Title must be less than 100 characters"]


def test_sanitizer_strips_script_blocks_case_insensitively():
    text = 'Hello <SCRIPT type="text/javascript">alert("x")</script>world'
    assert sanitize_input(text) == "Hello world"


def test_sanitizer_strips_nested_tags_inside_script():
    text = "a<script><b>bold</b>steal()</script>b"
    assert sanitize_input(text) == "ab"


def test_sanitizer_leaves_other_markup_alone():
    """Narrow denylist: only complete <script> blocks are removed."""
    assert sanitize_input("<b>bold</b>") == "<b>bold</b>"
    assert sanitize_input("<script>never closed") == "<script>never closed"
    assert sanitize_input('<img src=x onerror="alert(1)">') == '<img src=x onerror="alert(1)">'


def test_sanitizer_passes_non_text_through():
    assert sanitize_input(42) == 42
    assert sanitize_input(None) is None


def test_clean_field_trims_before_sanitizing():
    assert clean_field("  <script>x</script>  ") == ""
    assert clean_field("  keep  ") == "keep"
    assert clean_field(None) is None


def test_diff_identical_values_is_empty():
    assert diff_task(_task(), {"title": "Buy milk", "description": "2%"}) == {}


def test_diff_reports_only_changed_fields():
    assert diff_task(_task(), {"title": "Buy milk", "description": "Whole"}) == {
        "description": "Whole"
    }
    assert diff_task(_task(), {"title": "Buy oat milk", "description": "2%"}) == {
        "title": "Buy oat milk"
    }


def test_diff_is_exact_string_comparison():
    assert diff_task(_task(), {"title": "buy milk", "description": "2%"}) == {"title": "buy milk"}


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, 5),
        ("", 5),
        ("abc", 5),
        ("0", 5),
        ("-3", 5),
        ("2", 2),
        (" 7 ", 7),
        (3, 3),
        ("1000", 100),
        ("5.5", 5),
        ("10abc", 10),
        ("+4", 4),
        ("abc10", 5),
        ("99999999999999999999", 100),
    ],
)
def test_coerce_positive_int(raw, expected):
    assert coerce_positive_int(raw, default=5, maximum=100) == expected


def test_page_numbers_are_capped():
    assert coerce_positive_int("9" * 40, default=1, maximum=MAX_PAGE) == MAX_PAGE
