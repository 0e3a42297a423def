"""Bearer token authentication for the MCP endpoint.

When no token is configured, authentication is disabled and every request
passes.  Only the MCP path is protected; ``/health`` is always public.
"""

import hmac
import logging
from typing import Optional

from starlette.datastructures import Headers
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from mcp_chatwoot.constants import STREAMABLE_HTTP_PATH

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "


class BearerAuthMiddleware:
    """Pure ASGI middleware that enforces a static Bearer token.

    Uses the ASGI interface directly (no ``BaseHTTPMiddleware``) so
    streaming responses from the MCP transport pass through untouched.
    """

    def __init__(
        self,
        app: ASGIApp,
        token: Optional[str] = None,
        protected_path: str = STREAMABLE_HTTP_PATH,
    ) -> None:
        self.app = app
        self._token = token or None
        self._protected_path = protected_path.rstrip("/")
        if self._token:
            logger.info("MCP endpoint authentication ENABLED.")
        else:
            logger.warning(
                "MCP endpoint authentication DISABLED. Set AUTH_TOKEN to require a Bearer token."
            )

    @property
    def auth_enabled(self) -> bool:
        return self._token is not None

    def _is_protected(self, path: str) -> bool:
        return path.rstrip("/") == self._protected_path

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.auth_enabled:
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "/")
        if not self._is_protected(path):
            await self.app(scope, receive, send)
            return

        auth_header = Headers(scope=scope).get("authorization", "")

        if not auth_header.startswith(_BEARER_PREFIX):
            await _unauthorized("Missing Bearer token")(scope, receive, send)
            return

        provided = auth_header[len(_BEARER_PREFIX):].encode("utf-8")
        # Constant-time comparison
        if not hmac.compare_digest(provided, self._token.encode("utf-8")):  # type: ignore[union-attr]
            client = scope.get("client")
            logger.warning(
                "Rejected bearer token on %s (client %s)",
                path,
                client[0] if client else "unknown",
            )
            await _unauthorized("Invalid token")(scope, receive, send)
            return

        await self.app(scope, receive, send)


def _unauthorized(message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=401)
