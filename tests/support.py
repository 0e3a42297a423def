"""Test support: configuration builders and a fake Chatwoot backend."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx

from mcp_chatwoot.bridge.buckets import BackendClients, create_clients
from mcp_chatwoot.config.schema import GatewayConfig
from mcp_chatwoot.runtime.service import GatewayService

BASE_URL = "https://chat.test"
API_TOKEN = "account-token-1234"
PLATFORM_TOKEN = "platform-token-5678"


class FakeChatwoot:
    """In-memory stand-in for a Chatwoot server.

    Responses are registered per ``(method, path)``; anything unregistered
    answers 404.  Every request is recorded.
    """

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Tuple[int, Any]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, body: Any = None, status: int = 200) -> None:
        self.routes[(method.upper(), path)] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes.get(
            (request.method, request.url.path), (404, {"message": "Resource could not be found"})
        )
        if body is None:
            return httpx.Response(status)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        content = self.last.content
        return json.loads(content) if content else None


def make_config(**sections: Dict[str, Any]) -> GatewayConfig:
    """Build a config with test credentials; keyword args override sections."""
    raw: Dict[str, Any] = {
        "chatwoot": {"base_url": BASE_URL, "api_token": API_TOKEN, "account_id": 1},
        "platform": {"api_token": PLATFORM_TOKEN},
    }
    for name, values in sections.items():
        raw[name] = {**raw.get(name, {}), **values}
    return GatewayConfig.model_validate(raw)


def make_service(
    fake: FakeChatwoot,
    config: Optional[GatewayConfig] = None,
) -> GatewayService:
    config = config or make_config()
    clients: BackendClients = create_clients(config, transport=fake.transport)
    return GatewayService(config, clients=clients)


def result_text(result: Any) -> str:
    return result.content[0].text


