"""Session registry with idle-timeout sweeping."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from mcp_chatwoot.constants import SESSION_SWEEP_INTERVAL, SESSION_TIMEOUT
from mcp_chatwoot.errors import SessionError

logger = logging.getLogger(__name__)

SessionFactory = Callable[[str], Any]
"""Builds an unstarted session (``start()``/``close()`` coroutines) for an id."""


class SessionRegistry:
    """Map session ids to live sessions and close the idle ones.

    Parameters
    ----------
    session_factory:
        Called with a session id; returns a not yet started session,
        normally a :class:`~mcp_chatwoot.server.session.models.GatewaySession`.
    timeout:
        Idle seconds after which the sweep closes a session.
    sweep_interval:
        Seconds between background sweeps.
    clock:
        Monotonic time source, replaceable in tests.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        timeout: float = SESSION_TIMEOUT,
        sweep_interval: float = SESSION_SWEEP_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if timeout <= 0:
            raise SessionError(f"Session timeout must be positive, got {timeout}")
        if sweep_interval <= 0:
            raise SessionError(f"Sweep interval must be positive, got {sweep_interval}")
        self._factory = session_factory
        self._timeout = timeout
        self._sweep_interval = sweep_interval
        self._clock = clock
        self._sessions: Dict[str, Any] = {}
        self._starting: Dict[str, asyncio.Future[None]] = {}
        self._sweep_task: Optional[asyncio.Task[None]] = None

    # ── Lifecycle ────────────────────────────────────────────────────

    def start(self) -> None:
        """Start the background sweep loop."""
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_loop(), name="session-sweep")
            logger.info(
                "Session sweep started (interval=%.0fs, timeout=%.0fs).",
                self._sweep_interval,
                self._timeout,
            )

    async def stop(self) -> None:
        """Cancel the sweep task and close every session."""
        if self._sweep_task is not None and not self._sweep_task.done():
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
        self._sweep_task = None
        session_ids = list(self._sessions)
        for session_id in session_ids:
            await self.close(session_id)
        logger.info("SessionRegistry stopped. Closed %d session(s).", len(session_ids))

    # ── Sessions ─────────────────────────────────────────────────────

    async def get_or_create(self, session_id: str) -> Any:
        """Return the live session for *session_id*, creating it if needed.

        The entry is registered before the first await, so concurrent
        first requests for one id share a single session.
        """
        session = self._sessions.get(session_id)
        if session is None:
            session = self._factory(session_id)
            session.created_at = self._clock()
            self._sessions[session_id] = session
            self._starting[session_id] = asyncio.ensure_future(session.start())
            logger.info("Session created: id=%s (active=%d)", session_id, len(self._sessions))
        session.last_activity = self._clock()

        starting = self._starting.get(session_id)
        if starting is not None:
            try:
                await asyncio.shield(starting)
            except Exception:
                logger.error("Session %s failed to start", session_id, exc_info=True)
                await self.close(session_id)
                raise
            if self._starting.get(session_id) is starting:
                del self._starting[session_id]
        return session

    def get(self, session_id: Optional[str]) -> Optional[Any]:
        """Return the session or ``None``; does not refresh activity."""
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def touch(self, session_id: str) -> bool:
        """Refresh the activity timestamp. Returns ``False`` if unknown."""
        session = self._sessions.get(session_id)
        if session is None:
            return False
        session.last_activity = self._clock()
        return True

    async def close(self, session_id: str) -> bool:
        """Remove and close a session. Safe to call any number of times.

        Returns ``True`` if this call removed the session.
        """
        session = self._sessions.pop(session_id, None)
        self._starting.pop(session_id, None)
        if session is None:
            return False
        try:
            await session.close()
        except Exception as exc:
            logger.error("Error closing session %s: %s", session_id, exc, exc_info=True)
        logger.info("Session closed: id=%s (active=%d)", session_id, len(self._sessions))
        return True

    async def sweep(self) -> int:
        """Close sessions idle for longer than the timeout; return how many."""
        now = self._clock()
        idle = [
            sid
            for sid, session in self._sessions.items()
            if now - session.last_activity > self._timeout
        ]
        closed = 0
        for sid in idle:
            if await self.close(sid):
                closed += 1
        if closed:
            logger.info(
                "Session sweep: closed %d idle session(s), %d remaining.",
                closed,
                len(self._sessions),
            )
        return closed

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def active_count(self) -> int:
        return len(self._sessions)

    def list_sessions(self) -> List[Dict[str, Any]]:
        now = self._clock()
        return [
            {
                "id": sid,
                "age_seconds": round(now - session.created_at, 1),
                "idle_seconds": round(now - session.last_activity, 1),
            }
            for sid, session in self._sessions.items()
        ]

    # ── Internal ─────────────────────────────────────────────────────

    async def _sweep_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self._sweep_interval)
                await self.sweep()
        except asyncio.CancelledError:
            logger.debug("Session sweep loop cancelled.")
            raise
