"""
Data Models
===========

Typed models for FramePace.

Models:
    Control:
        - ResizeCommand: Geometry + frame rate change (validated)
        - StartCommand, QuitCommand: Playback control
        - UnknownCommand: Ignored message

    Session:
        - FramePool: Immutable set of encoded frames for one geometry
        - SessionState: Immutable snapshot of one connection's state
"""

from framepace.models.control import (
    ControlCommand,
    QuitCommand,
    ResizeCommand,
    StartCommand,
    UnknownCommand,
    pacing_interval_for,
)
from framepace.models.pool import FramePool
from framepace.models.session import SessionState

__all__ = [
    # Control
    "ControlCommand",
    "ResizeCommand",
    "StartCommand",
    "QuitCommand",
    "UnknownCommand",
    "pacing_interval_for",
    # Session
    "FramePool",
    "SessionState",
]
