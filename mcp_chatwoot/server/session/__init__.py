"""Per-client MCP sessions for the streamable HTTP front."""

from mcp_chatwoot.server.session.manager import SessionRegistry
from mcp_chatwoot.server.session.models import GatewaySession

__all__ = ["GatewaySession", "SessionRegistry"]
