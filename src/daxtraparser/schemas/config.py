"""Pydantic configuration schema for the client and proxy service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SERVICE_TIMEOUT_MS = 45_000
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class ClientSettings(BaseModel):
    """Connection settings for the remote parser."""

    base_url: str
    account: str
    jwt_secret: str = Field(repr=False)
    turbo: bool = False
    timeout_ms: int = Field(default=DEFAULT_SERVICE_TIMEOUT_MS, gt=0)
    token_ttl_seconds: int = Field(default=120, gt=0)

    model_config = ConfigDict(extra="forbid")

    @field_validator("base_url", "account", "jwt_secret")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class ServiceSettings(BaseModel):
    """HTTP proxy service settings."""

    host: str = "0.0.0.0"
    port: int = 3000
    max_upload_bytes: int = Field(default=DEFAULT_MAX_UPLOAD_BYTES, gt=0)
    log_level: str = "INFO"

    model_config = ConfigDict(extra="forbid")


class AppConfig(BaseModel):
    daxtra: ClientSettings
    service: ServiceSettings = Field(default_factory=ServiceSettings)

    model_config = ConfigDict(extra="forbid")
