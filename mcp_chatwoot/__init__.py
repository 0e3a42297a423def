"""
mcp-chatwoot - an MCP gateway for the Chatwoot customer-support REST API.

Exposes Chatwoot operations (contacts, conversations, messages, reports,
help center, platform administration, ...) as MCP tools, grouped into
independently enabled buckets, over stdio or streamable HTTP.
"""

from mcp_chatwoot.constants import SERVER_NAME, SERVER_VERSION

__version__ = SERVER_VERSION
__app_name__ = SERVER_NAME

__all__ = [
    "SERVER_NAME",
    "SERVER_VERSION",
    "__version__",
    "__app_name__",
]
