"""API dependencies."""

import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from taskdesk.config import DEFAULT_PASSWORD, Environment, settings
from taskdesk.errors import UnauthorizedError
from taskdesk.observability.metrics import metrics
from taskdesk.store.base import TaskStore

logger = logging.getLogger("taskdesk.api")


class OptionalHTTPBasic(HTTPBasic):
    """HTTPBasic that reports a malformed Authorization header as no credentials."""

    async def __call__(self, request: Request) -> Optional[HTTPBasicCredentials]:
        try:
            return await super().__call__(request)
        except HTTPException:
            logger.warning("Malformed Basic Authorization header")
            return None


basic_auth = OptionalHTTPBasic(auto_error=False, realm="TaskDesk")


def get_store(request: Request) -> TaskStore:
    """Return the store opened by the application lifespan."""
    return request.app.state.store


async def verify_basic_auth(
    credentials: Optional[HTTPBasicCredentials] = Depends(basic_auth),
) -> str:
    """
    Verify HTTP Basic credentials against the single configured pair.

    Returns the authenticated username. Raises UnauthorizedError on missing
    or incorrect credentials. Comparison is constant-time for both parts.
    """
    # Insecure dev mode bypass (must be explicitly enabled)
    if settings.allow_insecure_dev and settings.env == Environment.DEVELOPMENT:
        return "insecure_dev"

    if credentials is None:
        metrics.inc_counter("auth.rejected")
        raise UnauthorizedError()

    username_ok = secrets.compare_digest(
        credentials.username.encode("utf-8"), settings.auth_username.encode("utf-8")
    )
    password_ok = secrets.compare_digest(
        credentials.password.encode("utf-8"), settings.auth_password.encode("utf-8")
    )
    if not (username_ok and password_ok):
        metrics.inc_counter("auth.rejected")
        logger.warning(f"Rejected credentials for user {credentials.username!r}")
        raise UnauthorizedError()

    return credentials.username


def validate_auth_config() -> None:
    """
    Validate authentication configuration at startup.

    Raises:
        RuntimeError: If configuration is insecure for the current environment
    """
    # Insecure dev mode is only allowed in development
    if settings.allow_insecure_dev and settings.env != Environment.DEVELOPMENT:
        raise RuntimeError(
            f"SECURITY ERROR: allow_insecure_dev=true is only permitted in development. "
            f"Current environment: {settings.env.value}. "
            f"Set TASKDESK_ALLOW_INSECURE_DEV=false for {settings.env.value}."
        )

    if settings.env != Environment.DEVELOPMENT and settings.auth_password == DEFAULT_PASSWORD:
        raise RuntimeError(
            f"SECURITY ERROR: the default password cannot be used in {settings.env.value}. "
            f"Set TASKDESK_AUTH_PASSWORD."
        )

    if settings.allow_insecure_dev:
        logger.warning(
            "=" * 80 + "\n"
            "WARNING: Running in INSECURE DEV MODE\n"
            "  - Authentication is DISABLED\n"
            "  - All API requests will be accepted without verification\n"
            "  - Set TASKDESK_ALLOW_INSECURE_DEV=false for any deployment\n"
            + "=" * 80
        )
    else:
        logger.info(
            f"Authentication enabled: HTTP Basic for user {settings.auth_username!r} "
            f"({settings.env.value})"
        )
