"""Bucket assembly: which tool catalogs exist and which are live.

Every catalog is always known to the router, so a call to a tool of a
disabled bucket can be answered with the flag that enables it instead of
"unknown tool".
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Optional, Tuple

from mcp import types as mcp_types

from mcp_chatwoot.backend import ChatwootClient, PlatformClient, PublicClient
from mcp_chatwoot.config.schema import GatewayConfig
from mcp_chatwoot.tools import core, enterprise, helpcenter, platform, public
from mcp_chatwoot.tools.base import BucketDispatcher, catalog

logger = logging.getLogger(__name__)


class BucketKind(str, enum.Enum):
    CORE = "core"
    PUBLIC = "public"
    PLATFORM = "platform"
    ENTERPRISE = "enterprise"
    HELP_CENTER = "help-center"


@dataclass(frozen=True)
class Bucket:
    """One tool catalog plus its dispatcher.

    ``dispatcher`` is ``None`` when the bucket is disabled or its
    credential is missing; ``enable_hint`` is then returned to callers.
    """

    kind: BucketKind
    tools: Tuple[mcp_types.Tool, ...]
    names: FrozenSet[str]
    dispatcher: Optional[BucketDispatcher]
    enable_hint: str = ""

    @property
    def enabled(self) -> bool:
        return self.dispatcher is not None


@dataclass
class BackendClients:
    """The backend clients a gateway owns; platform is absent without a token."""

    chatwoot: ChatwootClient
    public: Optional[PublicClient] = None
    platform: Optional[PlatformClient] = None

    async def aclose(self) -> None:
        for client in (self.chatwoot, self.public, self.platform):
            if client is not None:
                await client.close()


_ENABLE_HINTS: Dict[BucketKind, str] = {
    BucketKind.PUBLIC: "Public API bucket is not enabled. Set MCP_ENABLE_PUBLIC_API=true.",
    BucketKind.PLATFORM: (
        "Platform API bucket is not enabled. "
        "Set MCP_ENABLE_PLATFORM_API=true and CHATWOOT_PLATFORM_API_TOKEN."
    ),
    BucketKind.ENTERPRISE: "Enterprise bucket is not enabled. Set MCP_ENABLE_ENTERPRISE=true.",
    BucketKind.HELP_CENTER: "Help Center bucket is not enabled. Set MCP_ENABLE_HELP_CENTER=true.",
}


def create_clients(config: GatewayConfig, **client_kwargs: Any) -> BackendClients:
    """Build the backend clients the configuration calls for.

    *client_kwargs* (``timeout``, ``transport``) are passed to every client.
    """
    cw = config.chatwoot
    clients = BackendClients(
        chatwoot=ChatwootClient(cw.base_url, cw.api_token, cw.account_id, **client_kwargs)
    )
    if config.buckets.public_api:
        clients.public = PublicClient(cw.base_url, **client_kwargs)
    if config.buckets.platform_api:
        if config.platform.api_token:
            clients.platform = PlatformClient(
                cw.base_url, config.platform.api_token, **client_kwargs
            )
        else:
            logger.warning(
                "MCP_ENABLE_PLATFORM_API=true but CHATWOOT_PLATFORM_API_TOKEN is not set. "
                "Platform bucket disabled."
            )
    return clients


def _bucket(
    kind: BucketKind,
    module: Any,
    client: Any,
    enabled: bool,
    safe_mode: bool,
) -> Bucket:
    factory: Callable[..., BucketDispatcher] = module.create_dispatcher
    dispatcher = factory(client, safe_mode) if enabled and client is not None else None
    bucket = Bucket(
        kind=kind,
        tools=catalog(module.TOOLS),
        names=frozenset(spec.name for spec in module.TOOLS),
        dispatcher=dispatcher,
        enable_hint=_ENABLE_HINTS.get(kind, ""),
    )
    if bucket.enabled and kind is not BucketKind.CORE:
        logger.info(
            "%s bucket enabled: %d tools (safe_mode=%s)",
            kind.value,
            len(bucket.tools),
            safe_mode,
        )
    return bucket


def build_buckets(config: GatewayConfig, clients: BackendClients) -> Tuple[Bucket, ...]:
    """Build all five buckets, core first, in listing order."""
    flags = config.buckets
    safety = config.safety
    return (
        _bucket(BucketKind.CORE, core, clients.chatwoot, True, safety.safe_mode),
        _bucket(BucketKind.PUBLIC, public, clients.public, flags.public_api, False),
        _bucket(
            BucketKind.PLATFORM,
            platform,
            clients.platform,
            flags.platform_api,
            safety.platform_safe_mode,
        ),
        _bucket(
            BucketKind.ENTERPRISE,
            enterprise,
            clients.chatwoot,
            flags.enterprise,
            safety.safe_mode,
        ),
        _bucket(
            BucketKind.HELP_CENTER,
            helpcenter,
            clients.chatwoot,
            flags.help_center,
            safety.safe_mode,
        ),
    )
