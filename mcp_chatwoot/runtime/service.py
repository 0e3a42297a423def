"""Gateway runtime service: the composition root.

GatewayService owns the backend clients, the buckets, the tool router and
the middleware chain.  Transport fronts ask it for protocol server
instances; it does not know which front is running.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mcp import types as mcp_types
from mcp.server import Server as McpServer

from mcp_chatwoot.bridge.buckets import BackendClients, build_buckets, create_clients
from mcp_chatwoot.bridge.middleware import (
    AuditMiddleware,
    RecoveryMiddleware,
    RoutingMiddleware,
    build_chain,
)
from mcp_chatwoot.bridge.router import ToolRouter
from mcp_chatwoot.config.schema import GatewayConfig
from mcp_chatwoot.constants import SERVER_NAME, SERVER_VERSION
from mcp_chatwoot.display.logging_config import secret_redaction_filter
from mcp_chatwoot.server.handlers import dispatch, register_handlers

logger = logging.getLogger(__name__)


class GatewayService:
    """Wire configuration into clients, buckets, router and chain.

    Parameters
    ----------
    config:
        Validated gateway configuration.
    clients:
        Pre-built backend clients (tests inject ones with mock
        transports).  Built from *config* when omitted.
    """

    def __init__(self, config: GatewayConfig, clients: Optional[BackendClients] = None) -> None:
        for secret in (
            config.chatwoot.api_token,
            config.platform.api_token,
            config.server.auth_token,
        ):
            secret_redaction_filter.register(secret)

        self._clients = clients if clients is not None else create_clients(config)
        self._buckets = build_buckets(config, self._clients)
        self._router = ToolRouter(self._buckets)
        self._chain = build_chain(
            [RecoveryMiddleware(), AuditMiddleware()],
            RoutingMiddleware(self._router),
        )
        logger.info(
            "GatewayService ready: %d tools, safe_mode=%s, platform_safe_mode=%s",
            self._router.tool_count,
            config.safety.safe_mode,
            config.safety.platform_safe_mode,
        )

    # ── Properties ───────────────────────────────────────────────────

    @property
    def tool_count(self) -> int:
        return self._router.tool_count

    # ── Operations ───────────────────────────────────────────────────

    def create_server(self) -> McpServer:
        """Return a fresh protocol server with the tool handlers registered."""
        mcp_server: McpServer = McpServer(name=SERVER_NAME, version=SERVER_VERSION)
        register_handlers(mcp_server, self._router, self._chain)
        return mcp_server

    async def call_tool(
        self, name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> mcp_types.CallToolResult:
        """Run a tool call through the chain without a protocol server."""
        return await dispatch(self._chain, name, arguments)

    async def aclose(self) -> None:
        """Close the backend HTTP clients."""
        await self._clients.aclose()
        logger.info("GatewayService closed backend clients.")
