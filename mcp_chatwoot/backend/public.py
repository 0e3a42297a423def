"""Client for the unauthenticated public (widget) API."""

from __future__ import annotations

from typing import Optional

import httpx

from mcp_chatwoot.backend.http import ApiScope, RestClient
from mcp_chatwoot.constants import BACKEND_TIMEOUT
from mcp_chatwoot.errors import PublicApiError


class PublicClient(RestClient):
    """Client for ``/public/api/v1/inboxes/{inbox_identifier}``.

    The inbox identifier (the widget token) is the only credential, so no
    auth header is sent.
    """

    error_class = PublicApiError

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = BACKEND_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, transport=transport)

    def for_inbox(self, inbox_identifier: str) -> ApiScope:
        if not inbox_identifier:
            raise ValueError("inbox_identifier is required")
        return self.scope(f"/public/api/v1/inboxes/{inbox_identifier}")
