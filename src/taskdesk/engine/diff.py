"""Field-level diff between a stored task and a proposed update."""

from typing import Any

from taskdesk.models import CONTENT_FIELDS, Task


def diff_task(original: Task, proposed: dict[str, Any]) -> dict[str, Any]:
    """Return the proposed values that differ from the original, keyed by field."""
    changes: dict[str, Any] = {}
    for field in CONTENT_FIELDS:
        if field in proposed and proposed[field] != getattr(original, field):
            changes[field] = proposed[field]
    return changes
