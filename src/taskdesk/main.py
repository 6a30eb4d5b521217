"""TaskDesk main application."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskdesk import __version__
from taskdesk.api import public_router, router
from taskdesk.api.deps import validate_auth_config
from taskdesk.api.errors import register_exception_handlers
from taskdesk.config import settings
from taskdesk.observability.metrics import metrics
from taskdesk.store import build_store

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("taskdesk")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager: owns the store for the process lifetime."""
    logger.info("Starting TaskDesk server...")
    logger.info(f"Environment: {settings.env.value}")

    # Validate authentication configuration (fail fast if insecure)
    validate_auth_config()

    store = build_store(settings)
    await store.connect()
    app.state.store = store
    metrics.set_gauge("store.connected", 1)
    logger.info(f"Store initialized: {store.name}")

    yield

    # Cleanup
    logger.info("Shutting down TaskDesk server...")
    await store.close()
    metrics.set_gauge("store.connected", 0)
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="TaskDesk",
    description="Task management API with an audit trail of every mutation",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware (explicit allowlist, no wildcards with credentials)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allowed_methods,
    allow_headers=settings.cors_allowed_headers,
)

register_exception_handlers(app)

# Health is public; everything else requires Basic credentials
app.include_router(public_router)
app.include_router(router)


def main():
    """Entry point for the application."""
    uvicorn.run(
        "taskdesk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
