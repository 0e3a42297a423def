"""Shared async REST plumbing for the Chatwoot backend clients.

A :class:`RestClient` owns one pooled :class:`httpx.AsyncClient` and turns
every failure into the client's :class:`~mcp_chatwoot.errors.BackendApiError`
subclass.  An :class:`ApiScope` binds a path prefix (an account, an inbox,
the platform root) to a client, so scoped callers can be created per call
without opening new connections.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

import httpx

from mcp_chatwoot.constants import BACKEND_TIMEOUT
from mcp_chatwoot.errors import BackendApiError, ChatwootApiError

logger = logging.getLogger(__name__)

_TRANSPORT_ERROR_STATUS = 500


# ── Error normalization ──────────────────────────────────────────────────


def extract_error_message(body: Any, fallback: str) -> str:
    """Pick the most useful message out of an error *body*.

    Prefers ``body["message"]``, then ``body["error"]``, then *fallback*.
    """
    if isinstance(body, Mapping):
        for key in ("message", "error"):
            value = body.get(key)
            if value:
                return value if isinstance(value, str) else str(value)
    return fallback


def normalize_error(
    error_cls: Type[BackendApiError],
    status_code: Optional[int],
    body: Any,
    fallback: str,
) -> BackendApiError:
    """Build a typed backend error from the raw pieces of a failure.

    A missing *status_code* (no response at all) maps to 500.
    """
    return error_cls(
        status_code or _TRANSPORT_ERROR_STATUS,
        extract_error_message(body, fallback),
        body,
    )


def encode_params(params: Optional[Mapping[str, Any]]) -> List[Tuple[str, Any]]:
    """Encode query parameters, Rails style.

    ``None`` values are dropped and list values become repeated
    ``key[]`` entries.
    """
    encoded: List[Tuple[str, Any]] = []
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            encoded.extend((f"{key}[]", item) for item in value)
        else:
            encoded.append((key, value))
    return encoded


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


# ── Client ───────────────────────────────────────────────────────────────


class RestClient:
    """Async HTTP client for one backend credential.

    Parameters
    ----------
    base_url:
        Root URL of the backend (e.g. ``https://chat.example.com``).
    headers:
        Extra headers applied to every request (auth tokens, etc.).
    timeout:
        Per-request timeout in seconds.  Expiry surfaces as a transport
        error; nothing is retried.
    transport:
        Optional :class:`httpx.AsyncBaseTransport`, mainly for tests.
    """

    error_class: Type[BackendApiError] = ChatwootApiError

    def __init__(
        self,
        base_url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = BACKEND_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {"Content-Type": "application/json", **(headers or {})}
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    # ── lifecycle ───────────────────────────────────────────────────

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def scope(self, prefix: str) -> "ApiScope":
        """Return a caller bound to *prefix* on this client."""
        return ApiScope(self, prefix)

    # ── requests ────────────────────────────────────────────────────

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        """Issue one request and return the decoded body.

        Raises the client's :attr:`error_class` on transport failures and
        on any non-2xx response.
        """
        client = self._ensure_client()
        label = self.error_class.label
        try:
            response = await client.request(
                method,
                path,
                params=encode_params(params),
                json=json,
            )
        except httpx.HTTPError as exc:
            message = str(exc) or type(exc).__name__
            logger.error("%s transport error: %s %s: %s", label, method, path, message)
            raise normalize_error(self.error_class, None, None, message) from exc

        if response.is_error:
            body = _parse_body(response)
            err = normalize_error(
                self.error_class,
                response.status_code,
                body,
                f"Request failed with status code {response.status_code}",
            )
            logger.error(
                "%s error: %s %s (%s %s)",
                label,
                err.status_code,
                err.message,
                method,
                path,
            )
            raise err

        logger.debug("%s %s %s → %d", label, method, path, response.status_code)
        return _parse_body(response)


class ApiScope:
    """A :class:`RestClient` bound to a path prefix.

    Scopes are cheap: they share the client's connection pool and carry
    no state of their own beyond the prefix.
    """

    __slots__ = ("_client", "_prefix")

    def __init__(self, client: RestClient, prefix: str) -> None:
        self._client = client
        self._prefix = "/" + prefix.strip("/") if prefix.strip("/") else ""

    @property
    def prefix(self) -> str:
        return self._prefix

    def _url(self, path: str) -> str:
        if path in ("", "/"):
            return self._prefix + "/"
        return self._prefix + ("" if path.startswith("/") else "/") + path

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        return await self._client.request(method, self._url(path), params=params, json=json)

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any = None) -> Any:
        return await self.request("POST", path, json=json)

    async def delete(self, path: str, json: Any = None) -> Any:
        return await self.request("DELETE", path, json=json)
