"""
Streaming Session
=================

Single source of truth for one connection's streaming state.

The Session owns a SessionState snapshot and is the only thing allowed
to replace it. Every mutator is a plain (non-async) method that builds
the next snapshot and swaps it in one assignment, so no other task on the
event loop can observe a half-applied command.

Design Rules:
    - Control commands notify waiters; sender bookkeeping does not
    - The frame pool is swapped by reference, never edited
    - target_index never moves backwards during a playback
"""

import asyncio
import logging
from dataclasses import replace
from typing import Optional, Tuple

from framepace.models.control import ResizeCommand
from framepace.models.pool import FramePool
from framepace.models.session import SessionState


logger = logging.getLogger(__name__)


class Session:
    """
    Guarded owner of a SessionState snapshot.

    Attributes:
        state: Current immutable snapshot
        closed: Whether the owning connection has ended

    Example:
        session = Session(SessionState.initial(1024, 1024, 60.0, pool))

        session.start(now_us=clock.now())
        session.observe_target(clock.target_index(session.state))
        claim = session.claim_next()
    """

    def __init__(self, state: SessionState) -> None:
        self._state = state
        self._changed = asyncio.Event()
        self._closed = False

    @property
    def state(self) -> SessionState:
        """Current snapshot."""
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    # -------------------------------------------------------------------------
    # Control commands
    # -------------------------------------------------------------------------

    def commit_resize(self, command: ResizeCommand, pool: FramePool) -> SessionState:
        """
        Apply geometry, rate and the pool rendered for it as one unit.

        Args:
            command: Validated resize command
            pool: Pool already rendered for (command.width, command.height)

        Returns:
            The new snapshot
        """
        if (pool.width, pool.height) != (command.width, command.height):
            raise ValueError(
                f"Pool geometry {pool.width}x{pool.height} does not match "
                f"resize {command.width}x{command.height}"
            )

        state = self._state
        return self._publish(
            replace(
                state,
                width=command.width,
                height=command.height,
                target_rate=command.fps,
                pacing_interval_us=command.pacing_interval_us,
                pool=pool,
                epoch=state.epoch + 1,
            )
        )

    def start(self, now_us: int) -> SessionState:
        """Begin a new playback with its time origin at ``now_us``."""
        return self._publish(
            replace(
                self._state,
                playing=True,
                play_started_at_us=now_us,
                target_index=0,
                sent_index=0,
                playback=self._state.playback + 1,
            )
        )

    def quit(self) -> SessionState:
        """Stop playback; the index stays frozen at 0 until the next start."""
        return self._publish(
            replace(
                self._state,
                playing=False,
                target_index=0,
                sent_index=0,
            )
        )

    # -------------------------------------------------------------------------
    # Sender bookkeeping
    # -------------------------------------------------------------------------

    def observe_target(self, target_index: int) -> SessionState:
        """
        Record the pacing clock's latest target index.

        Ignored while stopped. Never lowers the index, so a rate decrease
        mid-playback makes the sender wait instead of re-sending.
        """
        state = self._state
        if not state.playing or target_index <= state.target_index:
            return state

        self._state = replace(state, target_index=target_index)
        return self._state

    def claim_next(self) -> Optional[Tuple[int, bytes]]:
        """
        Reserve the next frame to send.

        Advances sent_index by exactly one and picks the payload from the
        pool in effect right now.

        Returns:
            (index, payload), or None if playback is stopped or caught up.
        """
        state = self._state
        if self._closed or not state.playing or state.sent_index >= state.target_index:
            return None

        index = state.sent_index + 1
        self._state = replace(state, sent_index=index)
        return index, state.pool.frame_for(index)

    # -------------------------------------------------------------------------
    # Change notification
    # -------------------------------------------------------------------------

    def clear_change(self) -> None:
        """Forget earlier notifications before re-reading the state."""
        self._changed.clear()

    async def wait_for_change(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until a control command changes the session.

        Args:
            timeout: Maximum seconds to wait. None = wait forever.

        Returns:
            True if a change was signalled, False on timeout.
        """
        try:
            if timeout is not None:
                await asyncio.wait_for(self._changed.wait(), timeout=timeout)
            else:
                await self._changed.wait()
            return True
        except asyncio.TimeoutError:
            return False

    def close(self) -> None:
        """Mark the session as finished and wake any waiter."""
        self._closed = True
        self._changed.set()

    def _publish(self, state: SessionState) -> SessionState:
        self._state = state
        self._changed.set()
        return state
