"""
Pacing Clock
============

Derives which frame should be visible from elapsed playback time.

    target_index = floor((now_us - play_started_at_us) / pacing_interval_us)

The index is recomputed from scratch on every evaluation rather than
accumulated, so a rate change mid-playback changes how fast future
indices advance without rebasing the elapsed time. The sender evaluates
the clock on demand; nothing runs in the background.
"""

import time
from typing import Callable, Optional

from framepace.models.control import MICROSECONDS_PER_SECOND
from framepace.models.session import SessionState


def monotonic_us() -> int:
    """Monotonic time in whole microseconds."""
    return time.monotonic_ns() // 1000


class PacingClock:
    """
    Pull-based frame clock.

    Attributes:
        now_us: Time source returning monotonic microseconds

    Example:
        clock = PacingClock()
        target = clock.target_index(session.state)
    """

    def __init__(self, now_us: Callable[[], int] = monotonic_us) -> None:
        self.now_us = now_us

    def now(self) -> int:
        return self.now_us()

    def target_index(self, state: SessionState, now: Optional[int] = None) -> int:
        """
        Frame index due at ``now`` for the given snapshot.

        While playback is stopped the snapshot's frozen index is returned.
        """
        if not state.playing:
            return state.target_index

        if now is None:
            now = self.now_us()

        elapsed_us = max(0, now - state.play_started_at_us)
        return elapsed_us // state.pacing_interval_us

    def delay_until_next(
        self,
        state: SessionState,
        now: Optional[int] = None,
    ) -> Optional[float]:
        """
        Seconds until the frame after ``state.target_index`` becomes due.

        Returns:
            Delay in seconds (0.0 if already due), or None when not playing.
        """
        if not state.playing:
            return None

        if now is None:
            now = self.now_us()

        due_us = (
            state.play_started_at_us
            + (state.target_index + 1) * state.pacing_interval_us
        )
        return max(0, due_us - now) / MICROSECONDS_PER_SECOND
