"""
Transport Tests
===============

WebSocketTransport error mapping against a stand-in Starlette socket.
"""

import asyncio

import pytest
from starlette.websockets import WebSocketDisconnect, WebSocketState

from framepace.stream.transport import ChannelClosed, WebSocketTransport


class StubWebSocket:
    """Just enough of starlette.websockets.WebSocket for the transport."""

    def __init__(self, inbound=None, send_error=None, close_error=None):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.inbound = list(inbound or [])
        self.sent = []
        self.send_error = send_error
        self.close_error = close_error
        self.close_calls = 0

    async def receive(self):
        return self.inbound.pop(0)

    async def send_bytes(self, data):
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(data)

    async def close(self, code=1000):
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error
        self.application_state = WebSocketState.DISCONNECTED


class TestReceive:
    """Tests for receive_text."""

    def test_text_message(self):
        transport = WebSocketTransport(
            StubWebSocket(inbound=[{"type": "websocket.receive", "text": "start"}])
        )
        assert asyncio.run(transport.receive_text()) == "start"

    def test_binary_message_decoded(self):
        transport = WebSocketTransport(
            StubWebSocket(inbound=[{"type": "websocket.receive", "bytes": b"quit"}])
        )
        assert asyncio.run(transport.receive_text()) == "quit"

    def test_disconnect_becomes_channel_closed(self):
        transport = WebSocketTransport(
            StubWebSocket(inbound=[{"type": "websocket.disconnect", "code": 1001}])
        )
        with pytest.raises(ChannelClosed) as info:
            asyncio.run(transport.receive_text())
        assert info.value.code == 1001


class TestSend:
    """Tests for send_bytes."""

    def test_send(self):
        websocket = StubWebSocket()
        asyncio.run(WebSocketTransport(websocket).send_bytes(b"BM"))
        assert websocket.sent == [b"BM"]

    @pytest.mark.parametrize(
        "error",
        [WebSocketDisconnect(code=1006), RuntimeError("closed"), OSError("broken pipe")],
    )
    def test_write_errors_become_channel_closed(self, error):
        transport = WebSocketTransport(StubWebSocket(send_error=error))
        with pytest.raises(ChannelClosed):
            asyncio.run(transport.send_bytes(b"BM"))


class TestClose:
    """Tests for close."""

    def test_closes_open_socket(self):
        websocket = StubWebSocket()
        asyncio.run(WebSocketTransport(websocket).close())
        assert websocket.close_calls == 1

    def test_skips_socket_the_client_already_closed(self):
        websocket = StubWebSocket()
        websocket.client_state = WebSocketState.DISCONNECTED
        asyncio.run(WebSocketTransport(websocket).close())
        assert websocket.close_calls == 0

    @pytest.mark.parametrize(
        "error",
        [
            RuntimeError('Cannot call "send" once a close message has been sent.'),
            OSError("connection reset"),
            WebSocketDisconnect(code=1006),
        ],
    )
    def test_close_on_half_dead_socket_does_not_raise(self, error):
        """Both states still read CONNECTED but the peer is already gone."""
        websocket = StubWebSocket(close_error=error)

        asyncio.run(WebSocketTransport(websocket).close())

        assert websocket.close_calls == 1
