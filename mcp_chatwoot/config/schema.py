"""Pydantic models for the gateway configuration."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from mcp_chatwoot.constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    SESSION_SWEEP_INTERVAL,
    SESSION_TIMEOUT,
)


class ChatwootSettings(BaseModel):
    """Primary backend: base URL, account API token and default account."""

    base_url: str = Field(min_length=1)
    api_token: str = Field(min_length=1)
    account_id: Optional[int] = Field(
        default=None,
        gt=0,
        description="Default account. Tools may override it per call via account_id.",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slashes(cls, v: str) -> str:
        stripped = v.strip().rstrip("/")
        if not stripped:
            raise ValueError("base_url must not be empty")
        return stripped

    @field_validator("account_id", mode="before")
    @classmethod
    def _blank_account_is_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class PlatformSettings(BaseModel):
    """Platform API credential (super-admin, cross-tenant)."""

    api_token: Optional[str] = None

    @field_validator("api_token", mode="before")
    @classmethod
    def _blank_token_is_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class BucketSettings(BaseModel):
    """Enable flags for the optional tool buckets. Core is always on."""

    public_api: bool = False
    platform_api: bool = False
    enterprise: bool = False
    help_center: bool = False


class SafetySettings(BaseModel):
    """Safe-mode gates.

    The two flags have opposite default polarity: the general gate is
    permissive unless enabled, the platform gate is restrictive unless
    disabled.
    """

    safe_mode: bool = False
    platform_safe_mode: bool = True


class ServerSettings(BaseModel):
    """Transport front settings (mode, listen address, auth, sessions)."""

    mode: Literal["stdio", "http"] = "stdio"
    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    auth_token: Optional[str] = Field(
        default=None,
        description="Bearer token required on /mcp when set.",
    )
    log_level: str = "info"
    session_timeout: float = Field(default=SESSION_TIMEOUT, gt=0)
    sweep_interval: float = Field(default=SESSION_SWEEP_INTERVAL, gt=0)
    json_response: bool = False

    @field_validator("mode", mode="before")
    @classmethod
    def _normalise_mode(cls, v: str) -> str:
        """Accept 'streamable-http' as an alias for 'http'."""
        if isinstance(v, str):
            v = v.strip().lower()
            if v == "streamable-http":
                return "http"
        return v

    @field_validator("auth_token", mode="before")
    @classmethod
    def _blank_token_is_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class GatewayConfig(BaseModel):
    """Root configuration model."""

    chatwoot: ChatwootSettings
    platform: PlatformSettings = Field(default_factory=PlatformSettings)
    buckets: BucketSettings = Field(default_factory=BucketSettings)
    safety: SafetySettings = Field(default_factory=SafetySettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
