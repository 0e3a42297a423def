"""Account-scoped client for the Chatwoot application API.

One client serves every account the API token can reach.  Calls default
to the configured account; tools may pass another ``account_id`` and get
an ephemeral scope for it on the same connection pool.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

import httpx

from mcp_chatwoot.backend.http import ApiScope, RestClient
from mcp_chatwoot.constants import BACKEND_TIMEOUT
from mcp_chatwoot.errors import AccountRequiredError, ChatwootApiError

logger = logging.getLogger(__name__)


class ChatwootClient(RestClient):
    """Client for ``/api/v1/accounts/{id}`` and the ``/api/v2`` reports surface.

    Parameters
    ----------
    base_url:
        Chatwoot root URL, without the ``/api`` suffix.
    api_token:
        User or agent bot access token (``api_access_token`` header).
    account_id:
        Default account.  When ``None``, every call must name one.
    """

    error_class = ChatwootApiError

    def __init__(
        self,
        base_url: str,
        api_token: str,
        account_id: Optional[int] = None,
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
        self._default_account_id = _account_number(account_id)
        self._default_scope: Optional[ApiScope] = None
        self._default_reports_scope: Optional[ApiScope] = None
        if self._default_account_id:
            self._default_scope = self.scope(f"/api/v1/accounts/{self._default_account_id}")
            self._default_reports_scope = self.scope(
                f"/api/v2/accounts/{self._default_account_id}"
            )

    def resolve_account_id(self, account_id: Optional[Union[int, float, str]] = None) -> int:
        """Return *account_id*, or the default, or raise."""
        resolved = _account_number(account_id) or self._default_account_id
        if not resolved:
            raise AccountRequiredError()
        return resolved

    def for_account(self, account_id: Optional[Union[int, float, str]] = None) -> ApiScope:
        """Scope for the v1 application API of *account_id*.

        The default account's scope is built once and reused; any other
        account gets a fresh scope that leaves the default untouched.
        """
        resolved = self.resolve_account_id(account_id)
        if resolved == self._default_account_id and self._default_scope is not None:
            return self._default_scope
        logger.debug("Using account override scope: %s", resolved)
        return self.scope(f"/api/v1/accounts/{resolved}")

    def for_reports(self, account_id: Optional[Union[int, float, str]] = None) -> ApiScope:
        """Scope for the v2 reporting surface, reused for the default account."""
        resolved = self.resolve_account_id(account_id)
        if resolved == self._default_account_id and self._default_reports_scope is not None:
            return self._default_reports_scope
        return self.scope(f"/api/v2/accounts/{resolved}")


def _account_number(value: Optional[Union[int, float, str]]) -> Optional[int]:
    # JSON clients may send 7.0 or "7"; the path needs the integer form
    if value is None or value == "":
        return None
    if isinstance(value, float):
        if not value.is_integer():
            raise ChatwootApiError(400, f"Invalid account_id: {value}")
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ChatwootApiError(400, f"Invalid account_id: {value!r}") from None
    return int(value)
