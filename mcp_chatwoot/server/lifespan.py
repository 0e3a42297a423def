"""Application lifespan management - startup and shutdown sequences."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from starlette.applications import Starlette

from mcp_chatwoot.constants import SERVER_NAME, SERVER_VERSION
from mcp_chatwoot.runtime.service import GatewayService
from mcp_chatwoot.server.session.manager import SessionRegistry

logger = logging.getLogger(__name__)


def make_lifespan(
    service: GatewayService,
    registry: SessionRegistry,
) -> Callable[[Starlette], "AsyncIterator[None]"]:
    """Build the Starlette lifespan for *service* and its session *registry*.

    Startup starts the idle-session sweep.  Shutdown closes every session
    first, then the backend clients they share.
    """

    @asynccontextmanager
    async def app_lifespan(app: Starlette) -> AsyncIterator[None]:
        logger.info(
            "%s v%s starting: %d tools available.",
            SERVER_NAME,
            SERVER_VERSION,
            service.tool_count,
        )
        registry.start()
        try:
            yield
        finally:
            logger.info("Shutting down: closing %d session(s).", registry.active_count)
            await registry.stop()
            await service.aclose()
            logger.info("Shutdown complete.")

    return app_lifespan
