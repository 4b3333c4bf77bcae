from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, List

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = Field(default="Linkhub API", env="APP_NAME", description="Human readable service name")
    environment: str = Field(default="development", env="ENVIRONMENT", description="Deployment environment name")
    debug: bool = Field(default=False, env="DEBUG", description="Enable debug mode")

    cors_origins: Annotated[List[AnyHttpUrl], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        env="CORS_ORIGINS",
        description="List of allowed CORS origins",
    )

    database_url: str = Field(
        default="sqlite+pysqlite:///./linkhub.db",
        env="DATABASE_URL",
        description="SQLAlchemy database URL",
    )
    database_pool_size: int = Field(default=10, env="DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(default=20, env="DATABASE_MAX_OVERFLOW")
    database_connect_timeout_seconds: int = Field(
        default=10,
        env="DATABASE_CONNECT_TIMEOUT_SECONDS",
        description="Upper bound for establishing a database connection.",
    )

    s3_endpoint_url: str | None = Field(
        default=None,
        env="S3_ENDPOINT_URL",
        description="Base endpoint of an S3 compatible object store (empty for AWS).",
    )
    s3_region: str = Field(default="auto", env="S3_REGION")
    s3_access_key_id: str | None = Field(default=None, env="S3_ACCESS_KEY_ID")
    s3_secret_access_key: str | None = Field(default=None, env="S3_SECRET_ACCESS_KEY")
    s3_bucket_name: str = Field(default="linkhub", env="S3_BUCKET_NAME")
    s3_connect_timeout_seconds: int = Field(default=5, env="S3_CONNECT_TIMEOUT_SECONDS")
    s3_read_timeout_seconds: int = Field(default=30, env="S3_READ_TIMEOUT_SECONDS")
    s3_max_attempts: int = Field(default=3, env="S3_MAX_ATTEMPTS")

    presign_ttl_minutes: int = Field(
        default=30,
        env="PRESIGN_TTL_MINUTES",
        description="Lifetime of every pre-signed upload or download URL.",
    )
    upload_part_size: int = Field(
        default=50 * 1024 * 1024,
        env="UPLOAD_PART_SIZE",
        description="Single upload threshold and per-part size of multipart uploads, in bytes.",
    )

    password_schemes: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["pbkdf2_sha256"],
        env="PASSWORD_SCHEMES",
        description="passlib schemes used for resource passwords; the first one hashes new passwords.",
    )

    list_default_limit: int = Field(default=20, env="LIST_DEFAULT_LIMIT")
    list_max_limit: int = Field(default=100, env="LIST_MAX_LIMIT")

    pending_upload_ttl_minutes: int = Field(
        default=0,
        env="PENDING_UPLOAD_TTL_MINUTES",
        description="Delete file resources still pending after this many minutes (0 disables the sweep).",
    )
    pending_sweep_interval_seconds: int = Field(
        default=3600,
        env="PENDING_SWEEP_INTERVAL_SECONDS",
        description="Delay between two runs of the pending upload sweep.",
    )

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("cors_origins", "password_schemes", mode="before")
    @classmethod
    def split_comma_separated(cls, v: Any):  # type: ignore[override]
        if v in (None, "", Ellipsis):
            return v
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        if isinstance(v, (list, tuple, set)):
            return list(v)
        return v

    @field_validator("upload_part_size")
    @classmethod
    def ensure_part_size(cls, value: int) -> int:
        # S3 rejects non-final parts below 5 MiB.
        if value < 5 * 1024 * 1024:
            raise ValueError("upload_part_size must be at least 5 MiB")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
