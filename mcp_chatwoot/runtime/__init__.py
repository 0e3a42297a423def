"""Runtime composition: the gateway service."""

from mcp_chatwoot.runtime.service import GatewayService

__all__ = ["GatewayService"]
