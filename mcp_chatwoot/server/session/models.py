"""Session data model: one protocol server bound to one HTTP transport."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from typing import Optional

from mcp.server import Server as McpServer
from mcp.server.lowlevel import NotificationOptions
from mcp.server.models import InitializationOptions
from mcp.server.streamable_http import StreamableHTTPServerTransport
from starlette.types import Receive, Scope, Send

from mcp_chatwoot.constants import SERVER_NAME, SERVER_VERSION

logger = logging.getLogger(__name__)


@dataclass
class GatewaySession:
    """A per-client MCP session over streamable HTTP.

    Each session owns its own protocol server, so protocol state
    (initialization, request ids, notifications) never leaks between
    clients.  Backend clients are shared through the runtime service.
    """

    id: str
    server: McpServer
    transport: StreamableHTTPServerTransport
    created_at: float = 0.0
    """Registry clock timestamp of creation."""

    last_activity: float = 0.0
    """Registry clock timestamp of the last request."""

    _task: Optional[asyncio.Task[None]] = field(default=None, init=False, repr=False)
    _closed: bool = field(default=False, init=False, repr=False)

    @classmethod
    def create(
        cls,
        session_id: str,
        server: McpServer,
        *,
        json_response: bool = False,
    ) -> "GatewaySession":
        transport = StreamableHTTPServerTransport(
            mcp_session_id=session_id,
            is_json_response_enabled=json_response,
        )
        return cls(id=session_id, server=server, transport=transport)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    # ── Lifecycle ────────────────────────────────────────────────────

    async def start(self) -> None:
        """Connect the transport and run the protocol server in the background.

        Returns once the transport streams are ready to accept requests.
        """
        if self._task is not None:
            return
        ready = asyncio.Event()
        self._task = asyncio.create_task(self._run(ready), name=f"mcp-session-{self.id}")
        waiter = asyncio.create_task(ready.wait())
        done, _ = await asyncio.wait({waiter, self._task}, return_when=asyncio.FIRST_COMPLETED)
        if waiter not in done:
            waiter.cancel()
            # The run task ended before the transport came up.
            self._task.result()
            raise RuntimeError(f"Session {self.id} stopped during startup")
        logger.debug("Session %s started", self.id)

    async def _run(self, ready: asyncio.Event) -> None:
        init_options = InitializationOptions(
            server_name=SERVER_NAME,
            server_version=SERVER_VERSION,
            capabilities=self.server.get_capabilities(NotificationOptions(), {}),
        )
        async with self.transport.connect() as (read_stream, write_stream):
            ready.set()
            await self.server.run(read_stream, write_stream, init_options)

    async def handle_request(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Forward one HTTP exchange to the transport."""
        await self.transport.handle_request(scope, receive, send)

    async def close(self) -> None:
        """Terminate the transport and stop the protocol server. Idempotent."""
        if self._closed:
            return
        self._closed = True
        try:
            await self.transport.terminate()
        finally:
            task, self._task = self._task, None
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        logger.debug("Session %s closed", self.id)

