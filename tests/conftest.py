"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from mcp_chatwoot.config.schema import GatewayConfig

from tests.support import FakeChatwoot, make_config


@pytest.fixture
def fake() -> FakeChatwoot:
    return FakeChatwoot()


@pytest.fixture
def all_buckets_config() -> GatewayConfig:
    return make_config(
        buckets={
            "public_api": True,
            "platform_api": True,
            "enterprise": True,
            "help_center": True,
        },
    )
