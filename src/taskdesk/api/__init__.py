"""TaskDesk REST API."""

from taskdesk.api.router import public_router, router

__all__ = ["public_router", "router"]
