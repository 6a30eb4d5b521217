"""Exception handlers mapping TaskDesk errors onto JSON responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskdesk.config import Environment, settings
from taskdesk.errors import (
    StoreFault,
    TaskDeskError,
    TaskNotFound,
    UnauthorizedError,
    ValidationFailed,
)

logger = logging.getLogger("taskdesk.api")


def _error_body(error: str, **extra) -> dict:
    body = {"error": error}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


async def handle_validation_failed(request: Request, exc: ValidationFailed) -> JSONResponse:
    return JSONResponse(status_code=400, content=_error_body(exc.message, errors=exc.errors))


async def handle_task_not_found(request: Request, exc: TaskNotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content=_error_body(exc.message))


async def handle_unauthorized(request: Request, exc: UnauthorizedError) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content=_error_body(exc.message),
        headers={"WWW-Authenticate": 'Basic realm="TaskDesk"'},
    )


async def handle_store_fault(request: Request, exc: StoreFault) -> JSONResponse:
    logger.error(f"{exc.message} ({request.method} {request.url.path}): {exc.detail}")
    return JSONResponse(status_code=500, content=_error_body(exc.message, details=exc.detail))


async def handle_taskdesk_error(request: Request, exc: TaskDeskError) -> JSONResponse:
    logger.error(f"Unmapped TaskDesk error {exc.code}: {exc.message}")
    return JSONResponse(status_code=500, content=_error_body(exc.message))


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        f"{'.'.join(str(p) for p in error['loc'] if p != 'body')}: {error['msg']}"
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content=_error_body("Invalid request", errors=errors))


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    details = str(exc) if settings.env == Environment.DEVELOPMENT else None
    return JSONResponse(status_code=500, content=_error_body("Internal server error", details=details))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on the application."""
    app.add_exception_handler(ValidationFailed, handle_validation_failed)
    app.add_exception_handler(TaskNotFound, handle_task_not_found)
    app.add_exception_handler(UnauthorizedError, handle_unauthorized)
    app.add_exception_handler(StoreFault, handle_store_fault)
    app.add_exception_handler(TaskDeskError, handle_taskdesk_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)
