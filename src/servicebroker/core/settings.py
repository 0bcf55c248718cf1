"""Broker settings powered by :mod:`pydantic_settings`."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic.functional_validators import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ANY_API_VERSION = "*"


class Settings(BaseSettings):
    """Centralized configuration for the service broker."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    api_version: str | None = Field(
        default=None,
        alias="OSB_API_VERSION",
        description="Broker API version expected in the X-Broker-API-Version header; unset accepts any.",
    )
    api_version_check_enabled: bool = Field(
        default=True,
        alias="OSB_API_VERSION_CHECK_ENABLED",
        description="Toggle for the X-Broker-API-Version validation middleware.",
    )
    catalog_file: Path | None = Field(
        default=None,
        alias="OSB_CATALOG_FILE",
        description="YAML file holding the static service catalog.",
    )
    validate_parameters: bool = Field(
        default=False,
        alias="OSB_VALIDATE_PARAMETERS",
        description="Validate request parameters against the plan JSON schemas.",
    )
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging verbosity for the service.",
    )
    server_host: str = Field(
        default="0.0.0.0",
        alias="SERVER_HOST",
        description="Interface the broker binds to when served by uvicorn.",
    )
    server_port: int = Field(
        default=8080,
        alias="SERVER_PORT",
        ge=1,
        le=65535,
        description="Port used by the broker API server.",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("api_version", mode="before")
    @classmethod
    def _blank_api_version(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("catalog_file", mode="before")
    @classmethod
    def _coerce_catalog_file(cls, value: str | Path | None) -> Path | None:
        if value is None or value == "":
            return None
        return Path(value)

    @property
    def any_api_version(self) -> bool:
        return self.api_version is None or self.api_version == ANY_API_VERSION


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()


__all__ = ["ANY_API_VERSION", "Settings", "get_settings"]
