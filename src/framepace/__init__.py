"""
FramePace
=========

Paced raster frame streaming over WebSocket.

A client connects, optionally sends "<width>,<height>,<fps>" to pick a
geometry and frame rate, then "start". The server answers with a stream
of BMP frames, one binary message per frame, delivered at the requested
rate until the client sends "quit" or disconnects.

Components:
    - models: Control commands, frame pool and session snapshots
    - stream: Session, control channel, pacing clock, frame sender
    - config: YAML + environment configuration and logging setup
    - main: FastAPI application and process entry point

Example:
    from framepace.config import settings

    # Service is started via the FastAPI application
    # See main.py for entry point
"""

__version__ = "0.1.0"
__author__ = "FramePace Project"

__all__ = [
    "__version__",
]
