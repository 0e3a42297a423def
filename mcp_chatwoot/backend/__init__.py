"""Backend REST clients, one per credential scope."""

from mcp_chatwoot.backend.account import ChatwootClient
from mcp_chatwoot.backend.http import ApiScope, RestClient, extract_error_message, normalize_error
from mcp_chatwoot.backend.platform import PlatformClient
from mcp_chatwoot.backend.public import PublicClient

__all__ = [
    "ApiScope",
    "ChatwootClient",
    "PlatformClient",
    "PublicClient",
    "RestClient",
    "extract_error_message",
    "normalize_error",
]
