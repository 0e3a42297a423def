"""Starlette ASGI application factory for the streamable HTTP front."""

import logging
from typing import Optional

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from mcp_chatwoot.config.schema import ServerSettings
from mcp_chatwoot.constants import HEALTH_PATH, SERVER_NAME, SERVER_VERSION, STREAMABLE_HTTP_PATH
from mcp_chatwoot.runtime.service import GatewayService
from mcp_chatwoot.server.auth import BearerAuthMiddleware
from mcp_chatwoot.server.lifespan import make_lifespan
from mcp_chatwoot.server.session.manager import SessionRegistry
from mcp_chatwoot.server.session.models import GatewaySession
from mcp_chatwoot.server.transport import StreamableHttpEndpoint

logger = logging.getLogger(__name__)

_CORS_OPTIONS = {
    "allow_origins": ["*"],
    "allow_methods": ["POST", "GET", "DELETE", "OPTIONS"],
    "allow_headers": ["Content-Type", "Authorization", "Accept", "Mcp-Session-Id"],
    "expose_headers": ["Mcp-Session-Id"],
    "max_age": 86400,
}


def create_app(
    service: GatewayService,
    settings: Optional[ServerSettings] = None,
    registry: Optional[SessionRegistry] = None,
) -> Starlette:
    """Create and return the Starlette ASGI application.

    Parameters
    ----------
    service:
        The gateway service every session's protocol server is built from.
    settings:
        Server settings; defaults to ``service.config.server``.
    registry:
        Session registry override (tests inject one with a fake clock).
    """
    settings = settings or service.config.server
    if registry is None:
        registry = SessionRegistry(
            lambda session_id: GatewaySession.create(
                session_id,
                service.create_server(),
                json_response=settings.json_response,
            ),
            timeout=settings.session_timeout,
            sweep_interval=settings.sweep_interval,
        )

    async def health(request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "status": "ok",
                "server": SERVER_NAME,
                "version": SERVER_VERSION,
                "activeSessions": registry.active_count,
                "tools": service.tool_count,
            }
        )

    application = Starlette(
        lifespan=make_lifespan(service, registry),
        routes=[
            Route(HEALTH_PATH, endpoint=health, methods=["GET"]),
            Route(
                STREAMABLE_HTTP_PATH,
                endpoint=StreamableHttpEndpoint(registry),
                methods=["GET", "POST", "DELETE"],
            ),
        ],
        middleware=[
            Middleware(CORSMiddleware, **_CORS_OPTIONS),
            Middleware(BearerAuthMiddleware, token=settings.auth_token),
        ],
    )
    application.state.service = service
    application.state.sessions = registry
    logger.info(
        "Starlette ASGI app '%s' created. Streamable HTTP on %s, health on %s",
        SERVER_NAME,
        STREAMABLE_HTTP_PATH,
        HEALTH_PATH,
    )
    return application
