"""Tests for the streamable HTTP front: health, auth, CORS and the MCP endpoint."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

import httpx
import pytest

from mcp_chatwoot.constants import SERVER_NAME, SERVER_VERSION
from mcp_chatwoot.server.app import create_app
from mcp_chatwoot.server.session.manager import SessionRegistry

from tests.support import FakeChatwoot, make_config, make_service

AUTH_TOKEN = "gateway-bearer-token"
MCP_HEADERS = {
    "Accept": "application/json, text/event-stream",
    "Content-Type": "application/json",
}


def _app(fake: FakeChatwoot, auth_token: Optional[str] = None, registry=None):
    config = make_config(server={"json_response": True, "auth_token": auth_token})
    service = make_service(fake, config)
    return create_app(service, config.server, registry=registry)


def _client(app) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://gateway.test")


def _rpc(method: str, params: Optional[Dict[str, Any]] = None, id_: Optional[int] = 1) -> Dict[str, Any]:
    message: Dict[str, Any] = {"jsonrpc": "2.0", "method": method}
    if params is not None:
        message["params"] = params
    if id_ is not None:
        message["id"] = id_
    return message


async def _shutdown(app) -> None:
    await app.state.sessions.stop()
    await app.state.service.aclose()


# ════════════════════════════════════════════════════════════════════════
#  Health and auth
# ════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
class TestHealth:
    async def test_health_payload(self, fake: FakeChatwoot) -> None:
        app = _app(fake)
        async with _client(app) as client:
            response = await client.get("/health")
        await _shutdown(app)
        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "activeSessions": 0,
            "tools": 81,
        }

    async def test_health_is_public_with_auth(self, fake: FakeChatwoot) -> None:
        app = _app(fake, auth_token=AUTH_TOKEN)
        async with _client(app) as client:
            response = await client.get("/health")
        await _shutdown(app)
        assert response.status_code == 200


@pytest.mark.asyncio
class TestBearerAuth:
    async def test_missing_token(self, fake: FakeChatwoot) -> None:
        app = _app(fake, auth_token=AUTH_TOKEN)
        async with _client(app) as client:
            response = await client.post("/mcp", json=_rpc("tools/list"), headers=MCP_HEADERS)
        await _shutdown(app)
        assert response.status_code == 401
        assert response.json() == {"error": "Missing Bearer token"}

    async def test_wrong_scheme(self, fake: FakeChatwoot) -> None:
        app = _app(fake, auth_token=AUTH_TOKEN)
        headers = {**MCP_HEADERS, "Authorization": f"Basic {AUTH_TOKEN}"}
        async with _client(app) as client:
            response = await client.post("/mcp", json=_rpc("tools/list"), headers=headers)
        await _shutdown(app)
        assert response.status_code == 401
        assert response.json() == {"error": "Missing Bearer token"}

    async def test_invalid_token(self, fake: FakeChatwoot) -> None:
        app = _app(fake, auth_token=AUTH_TOKEN)
        headers = {**MCP_HEADERS, "Authorization": "Bearer wrong-token"}
        async with _client(app) as client:
            response = await client.delete("/mcp", headers=headers)
        await _shutdown(app)
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token"}

    async def test_valid_token_passes(self, fake: FakeChatwoot) -> None:
        app = _app(fake, auth_token=AUTH_TOKEN)
        headers = {"Authorization": f"Bearer {AUTH_TOKEN}"}
        async with _client(app) as client:
            response = await client.delete("/mcp", headers=headers)
        await _shutdown(app)
        assert response.status_code == 200

    async def test_cors_preflight_skips_auth(self, fake: FakeChatwoot) -> None:
        app = _app(fake, auth_token=AUTH_TOKEN)
        headers = {
            "Origin": "https://inspector.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Mcp-Session-Id, Authorization",
        }
        async with _client(app) as client:
            response = await client.options("/mcp", headers=headers)
        await _shutdown(app)
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-max-age"] == "86400"


# ════════════════════════════════════════════════════════════════════════
#  MCP endpoint
# ════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
class TestMcpEndpoint:
    async def test_get_without_session(self, fake: FakeChatwoot) -> None:
        app = _app(fake)
        async with _client(app) as client:
            response = await client.get("/mcp")
            unknown = await client.get("/mcp", headers={"mcp-session-id": "missing"})
        await _shutdown(app)
        assert response.status_code == 400
        assert unknown.status_code == 400
        assert "No active session" in response.json()["error"]

    async def test_delete_always_ok(self, fake: FakeChatwoot) -> None:
        app = _app(fake)
        async with _client(app) as client:
            response = await client.delete("/mcp", headers={"mcp-session-id": "never-existed"})
        await _shutdown(app)
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    async def test_unsupported_method(self, fake: FakeChatwoot) -> None:
        app = _app(fake)
        async with _client(app) as client:
            response = await client.put("/mcp", json={})
        await _shutdown(app)
        assert response.status_code == 405

    async def test_session_failure_returns_500(self, fake: FakeChatwoot) -> None:
        def _broken_factory(session_id: str):
            raise RuntimeError("cannot build session")

        app = _app(fake, registry=SessionRegistry(_broken_factory))
        async with _client(app) as client:
            response = await client.post("/mcp", json=_rpc("tools/list"), headers=MCP_HEADERS)
        await _shutdown(app)
        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    async def test_initialize_list_and_call(self, fake: FakeChatwoot) -> None:
        fake.add("GET", "/api/v1/accounts/1/", {"id": 1, "name": "Acme"})
        app = _app(fake)
        async with _client(app) as client:
            init = await client.post(
                "/mcp",
                json=_rpc(
                    "initialize",
                    {
                        "protocolVersion": "2025-03-26",
                        "capabilities": {},
                        "clientInfo": {"name": "pytest", "version": "1.0"},
                    },
                ),
                headers=MCP_HEADERS,
            )
            assert init.status_code == 200
            session_id = init.headers["mcp-session-id"]
            assert init.json()["result"]["serverInfo"]["name"] == SERVER_NAME
            assert app.state.sessions.active_count == 1

            headers = {**MCP_HEADERS, "mcp-session-id": session_id}
            initialized = await client.post(
                "/mcp", json=_rpc("notifications/initialized", id_=None), headers=headers
            )
            assert initialized.status_code == 202

            listed = await client.post("/mcp", json=_rpc("tools/list", {}, id_=2), headers=headers)
            tools = listed.json()["result"]["tools"]
            assert len(tools) == 81
            assert tools[0]["name"] == "chatwoot_health"

            called = await client.post(
                "/mcp",
                json=_rpc("tools/call", {"name": "chatwoot_health", "arguments": {}}, id_=3),
                headers=headers,
            )
            result = called.json()["result"]
            assert result["isError"] is False
            assert "Account: Acme" in result["content"][0]["text"]

            health = await client.get("/health")
            assert health.json()["activeSessions"] == 1

            closed = await client.delete("/mcp", headers={"mcp-session-id": session_id})
            assert closed.status_code == 200
            assert app.state.sessions.active_count == 0
        await _shutdown(app)

    async def test_tool_error_is_result_not_protocol_error(self, fake: FakeChatwoot) -> None:
        app = _app(fake)
        async with _client(app) as client:
            init = await client.post(
                "/mcp",
                json=_rpc(
                    "initialize",
                    {
                        "protocolVersion": "2025-03-26",
                        "capabilities": {},
                        "clientInfo": {"name": "pytest", "version": "1.0"},
                    },
                ),
                headers=MCP_HEADERS,
            )
            headers = {**MCP_HEADERS, "mcp-session-id": init.headers["mcp-session-id"]}
            await client.post("/mcp", json=_rpc("notifications/initialized", id_=None), headers=headers)
            called = await client.post(
                "/mcp",
                json=_rpc("tools/call", {"name": "public_get_contact", "arguments": {}}, id_=2),
                headers=headers,
            )
        await _shutdown(app)
        body = called.json()
        assert "error" not in body
        assert body["result"]["isError"] is True
        assert "MCP_ENABLE_PUBLIC_API=true" in json.dumps(body["result"])
