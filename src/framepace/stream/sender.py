"""
Frame Sender
============

Keeps the client's displayed frame caught up with the pacing clock.

Each pump evaluates the clock once, then sends every frame between the
last sent index and the target, one binary message per frame, in order.
The client advances its own index by one per message, so frames are
never skipped or repeated and a late pump produces a burst of catch-up
sends rather than a single "latest" frame.

Between pumps the sender sleeps until either the next frame is due or a
control command changes the session.
"""

import logging
from typing import Optional

from framepace.stream.metrics import StreamMetrics
from framepace.stream.pacing import PacingClock
from framepace.stream.session import Session
from framepace.stream.transport import FrameTransport


logger = logging.getLogger(__name__)


class FrameSender:
    """
    Single writer of frame messages for one connection.

    Attributes:
        session: Session providing counters and the frame pool
        transport: Channel frames are written to
        clock: Pacing clock evaluated on every pump
        max_idle_wait: Longest sleep between pumps, in seconds
    """

    def __init__(
        self,
        session: Session,
        transport: FrameTransport,
        clock: PacingClock,
        max_idle_wait: float = 0.5,
        metrics: Optional[StreamMetrics] = None,
    ) -> None:
        if max_idle_wait <= 0:
            raise ValueError("max_idle_wait must be positive")

        self.session = session
        self.transport = transport
        self.clock = clock
        self.max_idle_wait = max_idle_wait
        self._metrics = metrics or StreamMetrics()

    async def run(self) -> None:
        """
        Send frames until the session closes.

        Raises:
            ChannelClosed: When a frame cannot be written
        """
        while not self.session.closed:
            self.session.clear_change()
            await self.pump()

            delay = self.clock.delay_until_next(self.session.state)
            timeout = self.max_idle_wait if delay is None else min(delay, self.max_idle_wait)
            await self.session.wait_for_change(timeout=timeout)

    async def pump(self) -> int:
        """
        Evaluate the clock and send every frame that is due.

        A command applied while a frame is in flight takes effect on the
        next claim; the in-flight frame is completed as is.

        Returns:
            Number of frames sent.
        """
        session = self.session
        session.observe_target(self.clock.target_index(session.state))

        sent = 0
        while True:
            claim = session.claim_next()
            if claim is None:
                break

            index, payload = claim
            await self.transport.send_bytes(payload)
            sent += 1
            self._metrics.frames_sent += 1
            logger.debug(f"Frame: {index}")

        return sent
