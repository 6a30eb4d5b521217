"""TaskDesk - task management REST service with an audit trail."""

__version__ = "0.1.0"
