"""MCP handler functions - registered on each protocol server instance."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from mcp import types as mcp_types
from mcp.server import Server as McpServer

from mcp_chatwoot.bridge.middleware.chain import RequestContext
from mcp_chatwoot.bridge.router import ToolRouter

logger = logging.getLogger(__name__)

Chain = Callable[[RequestContext], Awaitable[Any]]


async def dispatch(
    chain: Chain,
    tool_name: str,
    arguments: Optional[Dict[str, Any]] = None,
) -> mcp_types.CallToolResult:
    """Run one tool call through the middleware chain."""
    ctx = RequestContext(tool_name=tool_name, arguments=arguments or {})
    return await chain(ctx)


def register_handlers(mcp_server: McpServer, router: ToolRouter, chain: Chain) -> None:
    """Register the tools/list and tools/call handlers on *mcp_server*."""

    @mcp_server.list_tools()
    async def handle_list_tools() -> List[mcp_types.Tool]:
        tools = router.list_tools()
        logger.debug("Listing %d tools", len(tools))
        return tools

    @mcp_server.call_tool()
    async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> mcp_types.CallToolResult:
        logger.info("Tool call: %s", name)
        return await dispatch(chain, name, arguments)
