"""Middleware chain for tool calls."""

from mcp_chatwoot.bridge.middleware.audit import AuditMiddleware
from mcp_chatwoot.bridge.middleware.chain import RequestContext, build_chain
from mcp_chatwoot.bridge.middleware.recovery import RecoveryMiddleware
from mcp_chatwoot.bridge.middleware.routing import RoutingMiddleware

__all__ = [
    "AuditMiddleware",
    "RecoveryMiddleware",
    "RequestContext",
    "RoutingMiddleware",
    "build_chain",
]
