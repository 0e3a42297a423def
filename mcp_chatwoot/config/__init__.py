"""Configuration loading and validation for the Chatwoot MCP gateway."""

from mcp_chatwoot.config.loader import expand_env_vars, load_gateway_config
from mcp_chatwoot.config.schema import (
    BucketSettings,
    ChatwootSettings,
    GatewayConfig,
    PlatformSettings,
    SafetySettings,
    ServerSettings,
)

__all__ = [
    "BucketSettings",
    "ChatwootSettings",
    "GatewayConfig",
    "PlatformSettings",
    "SafetySettings",
    "ServerSettings",
    "expand_env_vars",
    "load_gateway_config",
]
