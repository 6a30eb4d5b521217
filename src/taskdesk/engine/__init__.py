"""TaskDesk engine - validation, diffing, auditing and task orchestration."""

from taskdesk.engine.audit import AuditRecorder
from taskdesk.engine.core import TaskDeskEngine, coerce_positive_int
from taskdesk.engine.diff import diff_task
from taskdesk.engine.validation import clean_field, sanitize_input, validate_task

__all__ = [
    "AuditRecorder",
    "TaskDeskEngine",
    "clean_field",
    "coerce_positive_int",
    "diff_task",
    "sanitize_input",
    "validate_task",
]
