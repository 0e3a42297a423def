"""stdio front: one protocol server over stdin/stdout."""

import logging

from mcp.server.lowlevel import NotificationOptions
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server

from mcp_chatwoot.constants import SERVER_NAME, SERVER_VERSION
from mcp_chatwoot.runtime.service import GatewayService

logger = logging.getLogger(__name__)


async def run_stdio(service: GatewayService) -> None:
    """Serve MCP over stdio until stdin closes.

    stdout carries the protocol; logging must go to files or stderr.
    """
    mcp_server = service.create_server()
    init_opts = InitializationOptions(
        server_name=SERVER_NAME,
        server_version=SERVER_VERSION,
        capabilities=mcp_server.get_capabilities(NotificationOptions(), {}),
    )
    logger.info("%s v%s running on stdio (%d tools).", SERVER_NAME, SERVER_VERSION, service.tool_count)
    try:
        async with stdio_server() as (read_stream, write_stream):
            await mcp_server.run(read_stream, write_stream, init_opts)
    finally:
        await service.aclose()
        logger.info("stdio session ended.")
