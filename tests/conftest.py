"""
Test Configuration
==================

Pytest fixtures and test doubles for FramePace.

Async components are driven with ``asyncio.run`` inside plain test
functions, using a hand-advanced clock and an in-memory transport.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional

import pytest

from framepace.models.control import pacing_interval_for
from framepace.models.pool import FramePool
from framepace.models.session import SessionState
from framepace.stream.pacing import PacingClock
from framepace.stream.session import Session
from framepace.stream.transport import ChannelClosed


FPS_60_INTERVAL_US = pacing_interval_for(60.0)


class FakeTime:
    """Monotonic microsecond clock that only moves when told to."""

    def __init__(self, start_us: int = 0) -> None:
        self.now_us = start_us

    def __call__(self) -> int:
        return self.now_us

    def advance(self, delta_us: int) -> None:
        self.now_us += delta_us

    def set(self, now_us: int) -> None:
        self.now_us = now_us


class FakeTransport:
    """
    In-memory FrameTransport.

    Inbound messages are queued with push(); pushing ``None`` closes the
    channel. Outbound frames are collected in ``sent``.
    """

    def __init__(
        self,
        fail_on_send: bool = False,
        on_send: Optional[Callable[[int], Awaitable[None]]] = None,
    ) -> None:
        self.sent: List[bytes] = []
        self.fail_on_send = fail_on_send
        self.on_send = on_send
        self._inbound: Optional[asyncio.Queue] = None

    @property
    def inbound(self) -> asyncio.Queue:
        if self._inbound is None:
            self._inbound = asyncio.Queue()
        return self._inbound

    async def push(self, message: Optional[str]) -> None:
        await self.inbound.put(message)

    async def receive_text(self) -> str:
        message = await self.inbound.get()
        if message is None:
            raise ChannelClosed("client disconnected")
        return message

    async def send_bytes(self, data: bytes) -> None:
        if self.fail_on_send:
            raise ChannelClosed("write failed: broken pipe")
        if self.on_send is not None:
            await self.on_send(len(self.sent) + 1)
        self.sent.append(data)


def fake_pool_builder(width: int, height: int, size: int = 5, epoch: int = 0) -> FramePool:
    """Pool whose payloads name their epoch, geometry and slot."""
    frames = tuple(
        f"e{epoch}-{width}x{height}-{slot}".encode() for slot in range(size)
    )
    return FramePool(width=width, height=height, frames=frames, epoch=epoch)


@pytest.fixture
def fake_time():
    """Provide a hand-advanced microsecond clock starting at 0."""
    return FakeTime()


@pytest.fixture
def pacing_clock(fake_time):
    """Provide a PacingClock driven by fake_time."""
    return PacingClock(now_us=fake_time)


@pytest.fixture
def transport():
    """Provide an in-memory transport."""
    return FakeTransport()


@pytest.fixture
def session():
    """Provide a stopped 64x48 @ 60 fps session with a fake pool."""
    return Session(
        SessionState.initial(
            width=64,
            height=48,
            target_rate=60.0,
            pool=fake_pool_builder(64, 48),
        )
    )
