"""
Control Message Schema
======================

Commands a client can send over the streaming WebSocket.

Input Contract (text frames):
    "<width>,<height>,<fps>"  -> ResizeCommand
    "start"                   -> StartCommand
    "quit"                    -> QuitCommand
    anything else             -> UnknownCommand (ignored)

The protocol is fire-and-forget: no command is ever acknowledged.

Example:
    from framepace.models.control import ResizeCommand

    command = ResizeCommand.model_validate(
        {"width": "640", "height": "480", "fps": "30"}
    )
    print(command.pacing_interval_us)   # 33333
"""

import math
from dataclasses import dataclass
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


START_MESSAGE = "start"
QUIT_MESSAGE = "quit"
RESIZE_SEPARATOR = ","
RESIZE_FIELDS = ("width", "height", "fps")

MICROSECONDS_PER_SECOND = 1_000_000


def pacing_interval_for(fps: float) -> int:
    """Microseconds per frame for a target rate, never below 1."""
    return max(1, round(MICROSECONDS_PER_SECOND / fps))


class ResizeCommand(BaseModel):
    """
    Change frame geometry and target frame rate.

    Attributes:
        width: New frame width in pixels
        height: New frame height in pixels
        fps: New target frame rate
    """

    model_config = ConfigDict(frozen=True)

    width: int = Field(..., ge=0, description="Frame width in pixels")
    height: int = Field(..., ge=0, description="Frame height in pixels")
    fps: float = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Target frames per second",
    )

    @field_validator("fps")
    @classmethod
    def fps_gives_finite_interval(cls, value: float) -> float:
        """Reject rates so small that the frame interval overflows."""
        if not math.isfinite(MICROSECONDS_PER_SECOND / value):
            raise ValueError(f"fps {value!r} is too small to pace")
        return value

    @property
    def pacing_interval_us(self) -> int:
        return pacing_interval_for(self.fps)


@dataclass(frozen=True, slots=True)
class StartCommand:
    """Begin (or restart) playback from frame 0."""


@dataclass(frozen=True, slots=True)
class QuitCommand:
    """Stop playback and reset the sent counter."""


@dataclass(frozen=True, slots=True)
class UnknownCommand:
    """Unrecognized message, kept only for logging."""

    raw: str


ControlCommand = Union[ResizeCommand, StartCommand, QuitCommand, UnknownCommand]
