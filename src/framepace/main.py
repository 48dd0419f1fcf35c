"""
FramePace Main Application
==========================

FastAPI entry point for the paced frame streaming service.

Each WebSocket client gets its own streaming session: the client sends
text commands ("<width>,<height>,<fps>", "start", "quit") and receives
BMP frames as binary messages, paced to the requested frame rate.

Endpoints:
    GET  /         - Service information
    GET  /health   - Liveness probe
    GET  /metrics  - Streaming counters
    WS   /         - Frame stream (path configurable)
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, WebSocket
from fastapi.responses import JSONResponse

from framepace.config import settings
from framepace.stream import StreamConnection, StreamMetrics, WebSocketTransport


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_metrics = StreamMetrics()
_startup_time: float = 0.0


def get_metrics() -> StreamMetrics:
    return _metrics


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    global _startup_time

    _startup_time = time.time()
    logger.info(f"Starting {settings.service.name} {settings.service.version}")
    logger.info(
        f"Stream defaults: {settings.stream.default_width}x"
        f"{settings.stream.default_height} @ {settings.stream.default_fps:g} fps, "
        f"pool_size={settings.stream.pool_size}"
    )

    yield

    logger.info(
        f"Shutting down, {_metrics.active_connections} connection(s) still open"
    )


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="FramePace",
    description="Paced raster frame streaming over WebSocket",
    version=settings.service.version,
    lifespan=lifespan,
)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "FramePace",
        "version": settings.service.version,
        "name": settings.service.name,
        "status": "running",
        "websocket_path": settings.server.websocket_path,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """
    Liveness probe - is the process alive?

    Always returns 200 if the service is running.
    """
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Streaming counters for observability."""
    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1),
        **get_metrics().to_dict(),
    })


# =============================================================================
# WebSocket Endpoints
# =============================================================================

@app.websocket(settings.server.websocket_path)
async def frame_stream(websocket: WebSocket) -> None:
    """WebSocket endpoint streaming paced frames to one client."""
    await websocket.accept()
    transport = WebSocketTransport(websocket)
    connection = StreamConnection(transport, settings.stream, metrics=_metrics)

    try:
        await connection.run()
    except Exception as e:
        logger.error(f"[conn {connection.connection_id}] Connection error: {e}")
    finally:
        await transport.close()


# =============================================================================
# Main Entry Point
# =============================================================================

def run() -> None:
    """
    Serve the application on the configured host and port.

    uvicorn exits the process with status 1 (after logging the cause)
    when the listener cannot bind.
    """
    import uvicorn

    logger.info(f"Listening on port {settings.server.port}...")
    uvicorn.run(
        "framepace.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=False,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    run()
