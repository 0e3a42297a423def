"""Tool name → bucket routing."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from mcp import types as mcp_types

from mcp_chatwoot.bridge.buckets import Bucket, BucketKind
from mcp_chatwoot.errors import CapabilityConflictError
from mcp_chatwoot.tools.base import text_result

logger = logging.getLogger(__name__)

# Optional buckets are consulted in this order; core is the fallback.
_RESOLVE_ORDER = (
    BucketKind.PUBLIC,
    BucketKind.PLATFORM,
    BucketKind.ENTERPRISE,
    BucketKind.HELP_CENTER,
)


class ToolRouter:
    """Resolve tool names to buckets and hand calls to their dispatchers.

    Parameters
    ----------
    buckets:
        All buckets, enabled or not.  Exactly one must be
        :attr:`BucketKind.CORE` and its dispatcher must be set.

    Raises
    ------
    CapabilityConflictError
        If a tool name appears in more than one catalog.
    """

    def __init__(self, buckets: Sequence[Bucket]) -> None:
        self._buckets: Dict[BucketKind, Bucket] = {b.kind: b for b in buckets}
        core = self._buckets.get(BucketKind.CORE)
        if core is None or core.dispatcher is None:
            raise ValueError("The core bucket is required and must be enabled.")
        self._core = core

        owner: Dict[str, BucketKind] = {}
        for bucket in buckets:
            for name in bucket.names:
                if name in owner:
                    raise CapabilityConflictError(name, owner[name].value, bucket.kind.value)
                owner[name] = bucket.kind

        self._tools: List[mcp_types.Tool] = list(core.tools)
        for kind in _RESOLVE_ORDER:
            bucket = self._buckets.get(kind)
            if bucket is not None and bucket.enabled:
                self._tools.extend(bucket.tools)
        logger.info(
            "ToolRouter ready: %d tools listed (%d known).", len(self._tools), len(owner)
        )

    @property
    def tool_count(self) -> int:
        return len(self._tools)

    def list_tools(self) -> List[mcp_types.Tool]:
        """Core tools first, then each enabled optional bucket."""
        return list(self._tools)

    def resolve(self, name: str) -> Bucket:
        """Return the bucket that owns *name*; core for anything unclaimed."""
        for kind in _RESOLVE_ORDER:
            bucket = self._buckets.get(kind)
            if bucket is not None and name in bucket.names:
                return bucket
        return self._core

    async def route(
        self,
        name: str,
        arguments: Optional[Dict[str, Any]] = None,
    ) -> mcp_types.CallToolResult:
        return await self.dispatch(self.resolve(name), name, arguments)

    async def dispatch(
        self,
        bucket: Bucket,
        name: str,
        arguments: Optional[Dict[str, Any]] = None,
    ) -> mcp_types.CallToolResult:
        """Call *name* on an already resolved *bucket*, or return its enable hint."""
        if bucket.dispatcher is None:
            logger.info("Tool %s rejected: %s bucket not enabled", name, bucket.kind.value)
            return text_result(bucket.enable_hint, is_error=True)
        return await bucket.dispatcher(name, arguments)
