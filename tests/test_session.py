"""Tests for session management."""

from __future__ import annotations

import asyncio
from typing import List

import pytest

from mcp_chatwoot.errors import SessionError
from mcp_chatwoot.server.session.manager import SessionRegistry
from mcp_chatwoot.server.session.models import GatewaySession

from tests.support import FakeChatwoot, make_service


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubSession:
    """Session double recording lifecycle calls."""

    def __init__(self, session_id: str, fail_start: bool = False, fail_close: bool = False) -> None:
        self.id = session_id
        self.created_at = 0.0
        self.last_activity = 0.0
        self.start_calls = 0
        self.close_calls = 0
        self._fail_start = fail_start
        self._fail_close = fail_close

    async def start(self) -> None:
        self.start_calls += 1
        await asyncio.sleep(0)
        if self._fail_start:
            raise RuntimeError("transport refused")

    async def close(self) -> None:
        self.close_calls += 1
        if self._fail_close:
            raise RuntimeError("close failed")


class StubFactory:
    def __init__(self, **session_kwargs) -> None:
        self.created: List[StubSession] = []
        self._kwargs = session_kwargs

    def __call__(self, session_id: str) -> StubSession:
        session = StubSession(session_id, **self._kwargs)
        self.created.append(session)
        return session


# ════════════════════════════════════════════════════════════════════════
#  SessionRegistry construction
# ════════════════════════════════════════════════════════════════════════


class TestSessionRegistryConfig:
    def test_rejects_non_positive_timeout(self) -> None:
        with pytest.raises(SessionError):
            SessionRegistry(StubFactory(), timeout=0)

    def test_rejects_non_positive_interval(self) -> None:
        with pytest.raises(SessionError):
            SessionRegistry(StubFactory(), sweep_interval=-1)

    def test_get_unknown(self) -> None:
        registry = SessionRegistry(StubFactory())
        assert registry.get("nope") is None
        assert registry.get(None) is None
        assert registry.touch("nope") is False
        assert registry.active_count == 0


# ════════════════════════════════════════════════════════════════════════
#  SessionRegistry behaviour
# ════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
class TestSessionRegistry:
    async def test_create_then_reuse(self) -> None:
        factory = StubFactory()
        registry = SessionRegistry(factory)
        first = await registry.get_or_create("s1")
        second = await registry.get_or_create("s1")
        assert first is second
        assert len(factory.created) == 1
        assert first.start_calls == 1
        assert registry.active_count == 1

    async def test_concurrent_first_requests_share_session(self) -> None:
        factory = StubFactory()
        registry = SessionRegistry(factory)
        results = await asyncio.gather(*(registry.get_or_create("same") for _ in range(5)))
        assert all(r is results[0] for r in results)
        assert len(factory.created) == 1
        assert results[0].start_calls == 1

    async def test_timestamps_from_clock(self) -> None:
        clock = FakeClock(50.0)
        registry = SessionRegistry(StubFactory(), clock=clock)
        session = await registry.get_or_create("s1")
        assert session.created_at == 50.0
        clock.advance(10)
        assert registry.touch("s1") is True
        assert session.last_activity == 60.0
        info = registry.list_sessions()
        assert info == [{"id": "s1", "age_seconds": 10.0, "idle_seconds": 0.0}]

    async def test_failed_start_is_removed(self) -> None:
        factory = StubFactory(fail_start=True)
        registry = SessionRegistry(factory)
        with pytest.raises(RuntimeError, match="transport refused"):
            await registry.get_or_create("bad")
        assert registry.active_count == 0
        assert factory.created[0].close_calls == 1

    async def test_close_is_idempotent(self) -> None:
        factory = StubFactory()
        registry = SessionRegistry(factory)
        await registry.get_or_create("s1")
        assert await registry.close("s1") is True
        assert await registry.close("s1") is False
        assert factory.created[0].close_calls == 1
        assert registry.get("s1") is None

    async def test_close_error_is_logged_not_raised(self, caplog) -> None:
        registry = SessionRegistry(StubFactory(fail_close=True))
        await registry.get_or_create("s1")
        assert await registry.close("s1") is True
        assert registry.active_count == 0
        assert "Error closing session s1" in caplog.text

    async def test_sweep_uses_strict_timeout(self) -> None:
        clock = FakeClock()
        registry = SessionRegistry(StubFactory(), timeout=300, clock=clock)
        await registry.get_or_create("idle")
        await registry.get_or_create("busy")

        clock.advance(300)
        assert await registry.sweep() == 0

        registry.touch("busy")
        clock.advance(0.5)
        assert await registry.sweep() == 1
        assert registry.get("idle") is None
        assert registry.get("busy") is not None

    async def test_stop_closes_everything(self) -> None:
        factory = StubFactory()
        registry = SessionRegistry(factory, sweep_interval=3600)
        registry.start()
        await registry.get_or_create("a")
        await registry.get_or_create("b")
        await registry.stop()
        assert registry.active_count == 0
        assert all(s.close_calls == 1 for s in factory.created)

    async def test_background_sweep(self) -> None:
        clock = FakeClock()
        registry = SessionRegistry(StubFactory(), timeout=1, sweep_interval=0.01, clock=clock)
        await registry.get_or_create("s1")
        clock.advance(5)
        registry.start()
        try:
            for _ in range(100):
                if registry.active_count == 0:
                    break
                await asyncio.sleep(0.01)
            assert registry.active_count == 0
        finally:
            await registry.stop()


# ════════════════════════════════════════════════════════════════════════
#  GatewaySession
# ════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
class TestGatewaySession:
    async def test_start_and_close(self, fake: FakeChatwoot) -> None:
        service = make_service(fake)
        session = GatewaySession.create("abc", service.create_server(), json_response=True)
        assert not session.running
        await session.start()
        assert session.running
        await session.close()
        assert session.closed
        assert not session.running
        await session.close()
        await service.aclose()

    async def test_each_session_has_own_server(self, fake: FakeChatwoot) -> None:
        service = make_service(fake)
        one = GatewaySession.create("1", service.create_server())
        two = GatewaySession.create("2", service.create_server())
        assert one.server is not two.server
        assert one.transport.mcp_session_id == "1"
        await service.aclose()
