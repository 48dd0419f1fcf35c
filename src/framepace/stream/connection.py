"""
Stream Connection
=================

Lifecycle of one client connection.

A connection owns a Session, a ControlChannel and a FrameSender. The
channel and the sender run as two asyncio tasks; as soon as either one
finishes (client gone, write failure, unexpected error) the other is
cancelled and the session is released.
"""

import asyncio
import itertools
import logging
from typing import Optional

from framepace.config import StreamConfig
from framepace.models.session import SessionState
from framepace.stream.control import ControlChannel, PoolBuilder
from framepace.stream.metrics import StreamMetrics
from framepace.stream.pacing import PacingClock
from framepace.stream.pool import build_pool
from framepace.stream.sender import FrameSender
from framepace.stream.session import Session
from framepace.stream.transport import ChannelClosed, FrameTransport


logger = logging.getLogger(__name__)

_connection_ids = itertools.count(1)


class StreamConnection:
    """
    Wires one transport to a fresh streaming session.

    Attributes:
        connection_id: Process-unique id used in logs and task names
        session: Live session (None before run() or after it returns)

    Example:
        connection = StreamConnection(WebSocketTransport(websocket), settings.stream)
        await connection.run()
    """

    def __init__(
        self,
        transport: FrameTransport,
        config: StreamConfig,
        metrics: Optional[StreamMetrics] = None,
        clock: Optional[PacingClock] = None,
        pool_builder: PoolBuilder = build_pool,
    ) -> None:
        self.transport = transport
        self.config = config
        self.metrics = metrics or StreamMetrics()
        self.clock = clock or PacingClock()
        self._pool_builder = pool_builder

        self.connection_id = next(_connection_ids)
        self.session: Optional[Session] = None

    async def run(self) -> None:
        """Serve the connection until the client goes away."""
        config = self.config
        pool = await asyncio.to_thread(
            self._pool_builder,
            config.default_width,
            config.default_height,
            config.pool_size,
            0,
        )
        self.metrics.pool_builds += 1

        session = Session(
            SessionState.initial(
                width=config.default_width,
                height=config.default_height,
                target_rate=config.default_fps,
                pool=pool,
            )
        )
        self.session = session

        control = ControlChannel(
            session,
            self.transport,
            self.clock,
            pool_size=config.pool_size,
            max_dimension=config.max_dimension,
            pool_builder=self._pool_builder,
            metrics=self.metrics,
        )
        sender = FrameSender(
            session,
            self.transport,
            self.clock,
            max_idle_wait=config.max_idle_wait_seconds,
            metrics=self.metrics,
        )

        self.metrics.connections_opened += 1
        self.metrics.active_connections += 1
        logger.info(f"[conn {self.connection_id}] WebSocket opened")

        tasks = [
            asyncio.create_task(control.run(), name=f"control-{self.connection_id}"),
            asyncio.create_task(sender.run(), name=f"sender-{self.connection_id}"),
        ]
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                self._report(task)
        finally:
            # Wake the sender before cancelling so its wait can unwind
            session.close()
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

            self.session = None
            self.metrics.active_connections -= 1

            logger.info(
                f"[conn {self.connection_id}] WebSocket closed "
                f"(frames sent in last playback: {session.state.sent_index})"
            )

    def _report(self, task: asyncio.Task) -> None:
        """Log why a connection task ended."""
        if task.cancelled():
            return

        exc = task.exception()
        if exc is None:
            logger.info(f"[conn {self.connection_id}] {task.get_name()} finished")
        elif isinstance(exc, ChannelClosed):
            logger.info(f"[conn {self.connection_id}] {task.get_name()}: {exc.reason}")
        else:
            logger.error(
                f"[conn {self.connection_id}] {task.get_name()} failed: {exc!r}",
                exc_info=exc,
            )
