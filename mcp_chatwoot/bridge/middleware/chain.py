"""Tool-call middleware plumbing.

A call travels as a :class:`RequestContext` through a stack of layers:
each layer receives the context and the next layer, and the innermost
layer (routing) talks to a bucket.
"""

from __future__ import annotations

import functools
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Sequence

from mcp import types as mcp_types

# ── Layer protocols ──────────────────────────────────────────────────────


class ToolHandler(Protocol):
    async def __call__(self, ctx: RequestContext) -> mcp_types.CallToolResult: ...


class ToolMiddleware(Protocol):
    async def __call__(
        self, ctx: RequestContext, next_handler: ToolHandler
    ) -> mcp_types.CallToolResult: ...


# ── Call context ─────────────────────────────────────────────────────────


@dataclass
class RequestContext:
    """State of one tool call as it moves through the layers.

    Attributes:
        tool_name: Tool requested by the client.
        arguments: Call arguments as received (never logged as values).
        request_id: Short id tying the audit lines of one call together.
        bucket: Owning bucket, filled in by the routing layer.
        start_time: Monotonic timestamp taken when the call entered.
        is_error: Whether the call ended in an ``isError`` result.
        error: Unexpected exception caught by the recovery layer.
    """

    tool_name: str
    arguments: Optional[Dict[str, Any]] = None
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    bucket: Optional[str] = None
    start_time: float = field(default_factory=time.monotonic)
    is_error: bool = False
    error: Optional[Exception] = None

    @property
    def account_override(self) -> Optional[Any]:
        """The ``account_id`` argument, when the caller targets a specific account."""
        return (self.arguments or {}).get("account_id") or None

    @property
    def outcome(self) -> str:
        return "error" if self.is_error else "success"

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.start_time) * 1000.0


# ── Composition ──────────────────────────────────────────────────────────

Chain = Callable[[RequestContext], Awaitable[Any]]


def _bind(next_handler: Chain, middleware: Any) -> Chain:
    return functools.partial(middleware, next_handler=next_handler)


def build_chain(middlewares: Sequence[Any], handler: Any) -> Chain:
    """Stack *middlewares* on top of *handler*; the first one runs first."""
    return functools.reduce(_bind, reversed(list(middlewares)), handler)
