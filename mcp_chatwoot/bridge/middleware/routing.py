"""Routing middleware: the terminal layer that hands calls to the router."""

from __future__ import annotations

import logging
from typing import Any

from mcp_chatwoot.bridge.middleware.chain import RequestContext
from mcp_chatwoot.bridge.router import ToolRouter

logger = logging.getLogger(__name__)


class RoutingMiddleware:
    """Resolve the owning bucket and dispatch the call.

    This is the innermost layer and the only one that reaches a backend.
    """

    def __init__(self, router: ToolRouter) -> None:
        self._router = router

    async def __call__(self, ctx: RequestContext, next_handler: Any = None) -> Any:
        """Route and dispatch. *next_handler* is ignored (terminal layer)."""
        bucket = self._router.resolve(ctx.tool_name)
        ctx.bucket = bucket.kind.value
        result = await self._router.dispatch(bucket, ctx.tool_name, ctx.arguments)
        logger.debug(
            "[%s] Routed %s → %s (isError=%s)",
            ctx.request_id,
            ctx.tool_name,
            ctx.bucket,
            result.isError,
        )
        return result
