"""Streamable HTTP handling for ``/mcp`` (POST, GET, DELETE)."""

import logging
import uuid
from typing import Optional

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import Message, Receive, Scope, Send

from mcp_chatwoot.constants import SESSION_ID_HEADER
from mcp_chatwoot.server.session.manager import SessionRegistry

logger = logging.getLogger(__name__)

_NO_SESSION = {"error": "No active session. Send POST /mcp first."}
_INTERNAL_ERROR = {"error": "Internal server error"}


def _short(session_id: str) -> str:
    return session_id[:8]


class _TrackingSend:
    """Wrap an ASGI ``send`` and remember whether a response has started."""

    def __init__(self, send: Send) -> None:
        self._send = send
        self.started = False

    async def __call__(self, message: Message) -> None:
        if message["type"] == "http.response.start":
            self.started = True
        await self._send(message)


class StreamableHttpEndpoint:
    """ASGI app behind the MCP route.

    POST creates the session on first use; GET needs an existing one;
    DELETE closes it and always succeeds.
    """

    def __init__(self, registry: SessionRegistry) -> None:
        self._registry = registry

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        session_id: Optional[str] = request.headers.get(SESSION_ID_HEADER) or None
        logger.debug("Streamable HTTP %s (session=%s)", request.method, session_id)

        if request.method == "POST":
            await self._handle_post(session_id or str(uuid.uuid4()), scope, receive, send)
        elif request.method == "GET":
            await self._handle_get(session_id, scope, receive, send)
        elif request.method == "DELETE":
            await self._handle_delete(session_id, scope, receive, send)
        else:
            await JSONResponse({"error": "Method not allowed"}, status_code=405)(
                scope, receive, send
            )

    async def _handle_post(self, session_id: str, scope: Scope, receive: Receive, send: Send) -> None:
        tracking_send = _TrackingSend(send)
        try:
            session = await self._registry.get_or_create(session_id)
            self._registry.touch(session_id)
            await session.handle_request(scope, receive, tracking_send)
        except Exception:
            logger.error("Session %s request error", _short(session_id), exc_info=True)
            if not tracking_send.started:
                await JSONResponse(_INTERNAL_ERROR, status_code=500)(scope, receive, send)

    async def _handle_get(
        self, session_id: Optional[str], scope: Scope, receive: Receive, send: Send
    ) -> None:
        session = self._registry.get(session_id)
        if session_id is None or session is None:
            await JSONResponse(_NO_SESSION, status_code=400)(scope, receive, send)
            return

        tracking_send = _TrackingSend(send)
        self._registry.touch(session_id)
        try:
            await session.handle_request(scope, receive, tracking_send)
        except Exception:
            logger.error("SSE stream error (session %s)", _short(session_id), exc_info=True)
            if not tracking_send.started:
                await JSONResponse(_INTERNAL_ERROR, status_code=500)(scope, receive, send)

    async def _handle_delete(
        self, session_id: Optional[str], scope: Scope, receive: Receive, send: Send
    ) -> None:
        if session_id and await self._registry.close(session_id):
            logger.info("Session closed by client: %s...", _short(session_id))
        await JSONResponse({"ok": True})(scope, receive, send)
