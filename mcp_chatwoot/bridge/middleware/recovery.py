"""Outermost layer: turns stray exceptions into ``isError`` results."""

from __future__ import annotations

import logging
from typing import Any

from mcp_chatwoot.bridge.middleware.chain import RequestContext
from mcp_chatwoot.tools.base import text_result

logger = logging.getLogger(__name__)


class RecoveryMiddleware:
    """Dispatchers already shape Chatwoot failures; this catches the rest.

    The traceback goes to the log and the client sees only the tool name.
    """

    async def __call__(self, ctx: RequestContext, next_handler: Any) -> Any:
        try:
            return await next_handler(ctx)
        except Exception as exc:
            ctx.error = exc
            ctx.is_error = True
            logger.exception(
                "[%s] unhandled %s while calling %s (bucket=%s)",
                ctx.request_id,
                type(exc).__name__,
                ctx.tool_name,
                ctx.bucket or "unknown",
            )
            return text_result(f"Error: internal error in tool {ctx.tool_name}", is_error=True)
