"""Tool catalogs and dispatchers, one module per bucket."""

from mcp_chatwoot.tools import core, enterprise, helpcenter, platform, public
from mcp_chatwoot.tools.base import BucketDispatcher, ToolSpec, TextReply

__all__ = [
    "BucketDispatcher",
    "TextReply",
    "ToolSpec",
    "core",
    "enterprise",
    "helpcenter",
    "platform",
    "public",
]
