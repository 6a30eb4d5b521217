"""TaskDesk enumerations."""

from enum import Enum


class AuditAction(str, Enum):
    """Mutations recorded in the audit trail."""

    CREATE_TASK = "Create Task"
    UPDATE_TASK = "Update Task"
    DELETE_TASK = "Delete Task"

    @classmethod
    def _missing_(cls, value):
        # Accept "CreateTask", "create_task", "create task" alongside the wire value
        if isinstance(value, str):
            wanted = value.replace(" ", "").replace("_", "").lower()
            for member in cls:
                if member.value.replace(" ", "").lower() == wanted:
                    return member
        return None


class AuditSortField(str, Enum):
    """Fields the audit trail can be ordered by."""

    TIMESTAMP = "timestamp"
    ACTION = "action"
    TASK_ID = "taskId"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
