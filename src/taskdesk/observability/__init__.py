"""Observability helpers for TaskDesk."""

from taskdesk.observability.metrics import metrics

__all__ = ["metrics"]
