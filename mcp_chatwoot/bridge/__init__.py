"""Bucket assembly, tool routing and the call middleware chain."""

from mcp_chatwoot.bridge.buckets import BackendClients, Bucket, BucketKind, build_buckets, create_clients
from mcp_chatwoot.bridge.router import ToolRouter

__all__ = [
    "BackendClients",
    "Bucket",
    "BucketKind",
    "ToolRouter",
    "build_buckets",
    "create_clients",
]
