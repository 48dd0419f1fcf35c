"""
Session State Model
===================

Immutable snapshot of one connection's streaming state.

The live session never edits a snapshot field by field. Each change builds
a new SessionState with ``dataclasses.replace`` and swaps it in as a
whole, so a reader always sees geometry, rate, interval and pool from the
same command.

Counters:
    target_index: Frame that should currently be visible (pacing clock)
    sent_index:   Last frame delivered to the client
    Invariant:    0 <= sent_index <= target_index

Epochs:
    epoch:    Bumped on every committed Resize (pool generation)
    playback: Bumped on every Start
"""

from dataclasses import dataclass

from framepace.models.control import pacing_interval_for
from framepace.models.pool import FramePool


@dataclass(frozen=True, slots=True)
class SessionState:
    """
    Snapshot of a streaming session.

    Attributes:
        width: Current frame width
        height: Current frame height
        target_rate: Requested frames per second
        pacing_interval_us: Microseconds per frame derived from target_rate
        pool: Frame pool rendered for (width, height)
        playing: Whether playback is running
        play_started_at_us: Monotonic time of the last Start, in microseconds
        target_index: Last target index computed by the pacing clock
        sent_index: Number of frames sent in the current playback
        epoch: Geometry epoch
        playback: Playback epoch
    """

    width: int
    height: int
    target_rate: float
    pacing_interval_us: int
    pool: FramePool
    playing: bool = False
    play_started_at_us: int = 0
    target_index: int = 0
    sent_index: int = 0
    epoch: int = 0
    playback: int = 0

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.pacing_interval_us < 1:
            raise ValueError("pacing_interval_us must be >= 1")
        if not 0 <= self.sent_index <= self.target_index:
            raise ValueError(
                f"sent_index must be in [0, target_index], "
                f"got sent={self.sent_index} target={self.target_index}"
            )

    @classmethod
    def initial(
        cls,
        width: int,
        height: int,
        target_rate: float,
        pool: FramePool,
    ) -> "SessionState":
        """Build the state a connection starts with."""
        return cls(
            width=width,
            height=height,
            target_rate=target_rate,
            pacing_interval_us=pacing_interval_for(target_rate),
            pool=pool,
        )

    @property
    def behind(self) -> int:
        """Frames due but not yet sent."""
        return self.target_index - self.sent_index
