"""Client for the platform (super-admin) API."""

from __future__ import annotations

from typing import Optional

import httpx

from mcp_chatwoot.backend.http import ApiScope, RestClient
from mcp_chatwoot.constants import BACKEND_TIMEOUT
from mcp_chatwoot.errors import PlatformApiError


class PlatformClient(RestClient):
    """Client for ``/platform/api/v1``, authenticated with a platform app token.

    Platform calls act across tenants: accounts, users and global bots.
    """

    error_class = PlatformApiError

    def __init__(
        self,
        base_url: str,
        api_token: str,
        *,
        timeout: float = BACKEND_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(
            base_url,
            headers={"api_access_token": api_token},
            timeout=timeout,
            transport=transport,
        )
        self._root = self.scope("/platform/api/v1")

    @property
    def root(self) -> ApiScope:
        return self._root
