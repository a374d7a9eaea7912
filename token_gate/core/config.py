"""
Application configuration models and helpers.

Settings are frozen once loaded so every component receives an immutable
configuration value at construction time instead of reading process state.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Literal, Optional

import os

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


def _split_csv(value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
    if isinstance(value, (tuple, list)):
        items = value
    else:
        items = value.split(",")
    return tuple(item.strip().rstrip("/") for item in items if item and item.strip())


_FROZEN = SettingsConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class StoreSettings(BaseSettings):
    """Connection target for the partitioned token table."""

    model_config = _FROZEN

    backend: Literal["dynamodb", "sqlite"] = Field(
        "sqlite", validation_alias="STORE_BACKEND"
    )
    table_name: str = Field("accesstokens", validation_alias="TOKEN_TABLE_NAME")
    region_name: str = Field("us-east-1", validation_alias="AWS_REGION")
    endpoint_url: Optional[str] = Field(
        None,
        validation_alias="DYNAMODB_ENDPOINT_URL",
        description="Optional endpoint override, e.g. DynamoDB Local.",
    )
    sqlite_path: str = Field(
        "data/accesstokens.db", validation_alias="TOKEN_DB_PATH"
    )
    timeout_seconds: float = Field(
        3.0,
        gt=0,
        validation_alias="STORE_TIMEOUT_SECONDS",
        description="Upper bound for a single store call.",
    )


class SecuritySettings(BaseSettings):
    """Settings for authenticating revocation callers."""

    model_config = _FROZEN

    caller_credential_secret: Optional[str] = Field(
        None,
        validation_alias="CALLER_CREDENTIAL_SECRET",
        description="Secret used to derive the key that signs caller credentials.",
    )
    caller_credential_ttl_seconds: int = Field(
        3600, gt=0, validation_alias="CALLER_CREDENTIAL_TTL"
    )


class GateSettings(BaseSettings):
    """Origins and destinations the verification gate redirects between."""

    model_config = _FROZEN

    allowed_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        ("https://app.example.com",),
        validation_alias="ALLOWED_ORIGINS",
        description="Origins trusted for CORS echo and as redirect destinations.",
    )
    local_dev_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        (),
        validation_alias="LOCAL_DEV_ORIGINS",
        description="Extra origins echoed for CORS only, never redirect targets.",
    )
    fallback_url: Optional[str] = Field(None, validation_alias="FALLBACK_URL")
    failed_token_url: Optional[str] = Field(None, validation_alias="FAILED_TOKEN_URL")
    legacy_token_scan: bool = Field(
        False,
        validation_alias="LEGACY_TOKEN_SCAN",
        description="Deprecated: allow token-only scans when the owner is absent.",
    )
    proxy_target_content: bool = Field(False, validation_alias="PROXY_TARGET_CONTENT")
    proxy_timeout_seconds: float = Field(
        5.0, gt=0, validation_alias="PROXY_TIMEOUT_SECONDS"
    )

    @field_validator("allowed_origins", "local_dev_origins", mode="before")
    @classmethod
    def _split_origins(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing origins as a comma-separated string."""
        return _split_csv(value)

    @model_validator(mode="after")
    def _require_origin(self) -> "GateSettings":
        if not self.allowed_origins:
            raise ValueError("At least one allowed origin must be configured.")
        return self

    @property
    def primary_origin(self) -> str:
        return self.allowed_origins[0]

    @property
    def safe_fallback_url(self) -> str:
        return self.fallback_url or f"{self.primary_origin}/dashboard"

    @property
    def failure_url(self) -> str:
        return self.failed_token_url or f"{self.primary_origin}/access-denied"


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    gate: GateSettings = Field(default_factory=GateSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "GateSettings",
    "SecuritySettings",
    "StoreSettings",
    "get_settings",
]
