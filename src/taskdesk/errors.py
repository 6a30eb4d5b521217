"""TaskDesk errors."""


class TaskDeskError(Exception):
    """Base error for TaskDesk operations."""

    def __init__(self, message: str, code: str = "TASKDESK_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationFailed(TaskDeskError):
    """Client-correctable input problem; carries every collected message."""

    def __init__(self, errors: list[str], message: str = "Validation failed"):
        super().__init__(message, "VALIDATION_FAILED")
        self.errors = list(errors)


class TaskNotFound(TaskDeskError):
    """Task does not exist."""

    def __init__(self, task_id: str):
        super().__init__("Task not found", "TASK_NOT_FOUND")
        self.task_id = task_id


class UnauthorizedError(TaskDeskError):
    """Missing or incorrect credentials."""

    def __init__(self, message: str = "Unauthorized access. Please provide valid credentials."):
        super().__init__(message, "UNAUTHORIZED")


class StoreFault(TaskDeskError):
    """Persistence-layer failure. Not retried."""

    def __init__(self, operation: str, detail: str):
        super().__init__(f"Store operation failed: {operation}", "STORE_FAULT")
        self.operation = operation
        self.detail = detail
