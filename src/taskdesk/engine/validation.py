"""Input validation and sanitization for task fields."""

import re
from typing import Any, Optional

from taskdesk.models import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH

# Narrow denylist: only well-formed <script>...</script> blocks are removed.
# Anything that does not match this exact shape passes through untouched.
_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)


def validate_task(title: Optional[str], description: Optional[str]) -> list[str]:
    """Return every validation message for a title/description pair.

    Rules are evaluated independently, so a single call reports all problems.
    An empty list means the pair is valid.
    """
    errors: list[str] = []

    if not title or not title.strip():
        errors.append("Title is required")
    if not description or not description.strip():
        errors.append("Description is required")
    if title and len(title) > TITLE_MAX_LENGTH:
        errors.append(f"Title must be less than {TITLE_MAX_LENGTH} characters")
    if description and len(description) > DESCRIPTION_MAX_LENGTH:
        errors.append(f"Description must be less than {DESCRIPTION_MAX_LENGTH} characters")

    return errors


def sanitize_input(value: Any) -> Any:
    """Strip <script> blocks from text. Non-text values are returned unchanged."""
    if not isinstance(value, str):
        return value
    return _SCRIPT_BLOCK.sub("", value)


def clean_field(value: Optional[str]) -> Optional[str]:
    """Trim then sanitize a free-text field, keeping None as None."""
    if value is None:
        return None
    return sanitize_input(value.strip())
