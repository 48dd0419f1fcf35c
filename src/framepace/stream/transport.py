"""
Frame Transport
===============

Duplex message channel between a streaming session and its client.

The session only needs two operations: read the next text command and
write one binary frame. Any failure on either side surfaces as a single
ChannelClosed exception, which the connection treats as teardown.
"""

import logging
from typing import Optional, Protocol

from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState


logger = logging.getLogger(__name__)


class ChannelClosed(Exception):
    """Raised when the client channel can no longer be read or written."""

    def __init__(self, reason: str, code: Optional[int] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.code = code


class FrameTransport(Protocol):
    """
    Protocol for client channels.

    Implemented by:
        - WebSocketTransport (FastAPI / Starlette WebSocket)
        - in-memory fakes in the test suite
    """

    async def receive_text(self) -> str:
        """Return the next inbound message as text."""
        ...

    async def send_bytes(self, data: bytes) -> None:
        """Send one binary message."""
        ...


class WebSocketTransport:
    """
    FrameTransport over an accepted Starlette WebSocket.

    Binary inbound messages are decoded as UTF-8 so they go through the
    same command parser as text messages.
    """

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket

    @property
    def connected(self) -> bool:
        return (
            self._websocket.client_state == WebSocketState.CONNECTED
            and self._websocket.application_state == WebSocketState.CONNECTED
        )

    async def receive_text(self) -> str:
        try:
            message = await self._websocket.receive()
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            raise ChannelClosed(f"read failed: {e}")

        if message["type"] == "websocket.disconnect":
            raise ChannelClosed("client disconnected", code=message.get("code"))

        text = message.get("text")
        if text is not None:
            return text

        data = message.get("bytes") or b""
        return data.decode("utf-8", errors="replace")

    async def send_bytes(self, data: bytes) -> None:
        try:
            await self._websocket.send_bytes(data)
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            raise ChannelClosed(f"write failed: {e}")

    async def close(self) -> None:
        """
        Close the socket if both sides still consider it open.

        The peer may vanish between the state check and the close frame;
        that failure is logged and otherwise ignored.
        """
        if not self.connected:
            return
        try:
            await self._websocket.close()
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            logger.debug(f"Close on a dead socket ignored: {e!r}")
