"""
Frame Pool Model
================

Immutable set of pre-rendered, pre-encoded frames for one geometry.

Playback cycles over the pool: the frame sent for index ``i`` is
``pool[i % size]``. A geometry change builds a brand new pool and the
session swaps it in by reference, so a send that already holds a payload
from the previous pool is never affected.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class FramePool:
    """
    Ordered, fixed-length sequence of encoded frame payloads.

    Attributes:
        width: Geometry the frames were rendered for
        height: Geometry the frames were rendered for
        frames: Encoded payloads, one per pool slot
        epoch: Geometry epoch the pool belongs to
    """

    width: int
    height: int
    frames: Tuple[bytes, ...]
    epoch: int = 0

    def __post_init__(self) -> None:
        """Validate invariants."""
        if not self.frames:
            raise ValueError("frames must not be empty")

    @property
    def size(self) -> int:
        return len(self.frames)

    def frame_for(self, index: int) -> bytes:
        """Return the payload shown at frame ``index``."""
        return self.frames[index % len(self.frames)]

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the payloads."""
        return (
            f"FramePool(width={self.width}, height={self.height}, "
            f"size={self.size}, epoch={self.epoch})"
        )
