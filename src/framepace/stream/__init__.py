"""
Stream Module
=============

Frame pacing and control-protocol engine.

This module provides the per-connection streaming layer for FramePace:
    - Session: Guarded owner of the connection's state snapshot
    - ControlChannel: Decodes and applies client commands
    - PacingClock: Derives the due frame index from elapsed time
    - FrameSender: Sends due frames, in order, one message each
    - StreamConnection: Runs channel + sender for one client
    - build_pool / render_frame: Noise raster rendering and BMP encoding

Example:
    from framepace.stream import StreamConnection, WebSocketTransport

    connection = StreamConnection(
        WebSocketTransport(websocket),
        settings.stream,
        metrics=metrics,
    )
    await connection.run()
"""

from framepace.stream.raster import RasterEncodeError, encode_bmp, generate_noise, render_frame
from framepace.stream.pool import build_pool
from framepace.stream.pacing import PacingClock, monotonic_us
from framepace.stream.session import Session
from framepace.stream.transport import ChannelClosed, FrameTransport, WebSocketTransport
from framepace.stream.metrics import StreamMetrics
from framepace.stream.control import ControlChannel, ControlDecodeError, parse_command
from framepace.stream.sender import FrameSender
from framepace.stream.connection import StreamConnection


__all__ = [
    "RasterEncodeError",
    "encode_bmp",
    "generate_noise",
    "render_frame",
    "build_pool",
    "PacingClock",
    "monotonic_us",
    "Session",
    "ChannelClosed",
    "FrameTransport",
    "WebSocketTransport",
    "StreamMetrics",
    "ControlChannel",
    "ControlDecodeError",
    "parse_command",
    "FrameSender",
    "StreamConnection",
]
