"""Audit layer: a request line and an outcome line for every tool call."""

from __future__ import annotations

import logging
from typing import Any

from mcp_chatwoot.bridge.middleware.chain import RequestContext

logger = logging.getLogger("mcp_chatwoot.audit")


class AuditMiddleware:
    """Record tool, bucket, target account, outcome and latency.

    Argument values can hold customer data, so only the argument names
    are written.
    """

    async def __call__(self, ctx: RequestContext, next_handler: Any) -> Any:
        logger.info(
            "AUDIT REQUEST  id=%s tool=%s account=%s args_keys=%s",
            ctx.request_id,
            ctx.tool_name,
            ctx.account_override or "default",
            sorted((ctx.arguments or {}).keys()),
        )

        result = await next_handler(ctx)

        ctx.is_error = ctx.is_error or bool(getattr(result, "isError", False))
        logger.info(
            "AUDIT RESPONSE id=%s tool=%s bucket=%s outcome=%s elapsed_ms=%.1f",
            ctx.request_id,
            ctx.tool_name,
            ctx.bucket or "unknown",
            ctx.outcome,
            ctx.elapsed_ms,
        )
        return result
