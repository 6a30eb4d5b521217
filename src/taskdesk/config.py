"""TaskDesk configuration management."""

from enum import Enum
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PASSWORD = "password123"


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class StoreBackend(str, Enum):
    """Persistence backend."""

    SQL = "sql"
    REDIS = "redis"


class Settings(BaseSettings):
    """TaskDesk configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="TASKDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # General
    env: Environment = Environment.DEVELOPMENT
    log_level: str = "INFO"
    debug: bool = False

    # Persistence
    store_backend: StoreBackend = StoreBackend.SQL
    database_url: str = "sqlite+aiosqlite:///./taskdesk.db"
    redis_url: Optional[str] = None
    redis_key_prefix: str = Field(default="taskdesk", description="Namespace for redis keys")

    # Security (single hardcoded credential pair)
    auth_username: str = "admin"
    auth_password: str = DEFAULT_PASSWORD
    allow_insecure_dev: bool = Field(default=False, description="Allow unauthenticated in dev")

    # CORS configuration (explicit allowlist)
    cors_allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = True
    cors_allowed_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    )
    cors_allowed_headers: list[str] = Field(
        default=["Authorization", "Content-Type"],
    )

    # Pagination
    default_task_page_size: int = Field(default=5, ge=1, description="Default tasks per page")
    default_log_page_size: int = Field(default=10, ge=1, description="Default audit logs per page")
    max_page_size: int = Field(default=100, ge=1, description="Upper bound for any page size")

    # Server
    host: str = "0.0.0.0"
    port: int = 5000

    # Validators
    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate the database URL names an async driver we ship."""
        if not v.startswith(("sqlite+aiosqlite://", "postgresql://", "postgresql+asyncpg://")):
            raise ValueError(
                "database_url must be sqlite+aiosqlite://, postgresql:// or postgresql+asyncpg://"
            )
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate redis URL scheme."""
        if v and not v.startswith(("redis://", "rediss://")):
            raise ValueError(f"redis_url must start with redis:// or rediss://, got {v}")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port number range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {v}")
        return v

    @field_validator("auth_username")
    @classmethod
    def validate_auth_username(cls, v: str) -> str:
        """Basic credentials split on the first colon, so usernames cannot hold one."""
        if not v or ":" in v:
            raise ValueError("auth_username must be non-empty and must not contain ':'")
        return v

    @model_validator(mode="after")
    def validate_backend_requirements(self) -> "Settings":
        """Validate that the selected store backend is fully configured."""
        if self.store_backend == StoreBackend.REDIS and not self.redis_url:
            raise ValueError("redis_url is required when store_backend=redis")
        if not self.auth_password:
            raise ValueError("auth_password must not be empty")
        return self


settings = Settings()
