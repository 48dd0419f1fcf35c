"""
Control Channel
===============

Decodes client text messages into commands and applies them to the
session, strictly in arrival order.

Grammar:
    "<width>,<height>,<fps>"  -> Resize (pool regenerated, then committed)
    "start"                   -> Start
    "quit"                    -> Quit
    anything else             -> ignored

Design Rules:
    - Fire-and-forget: nothing is ever sent back to the client
    - A malformed Resize is dropped whole; the session is untouched
    - Encoder failures are scoped to the one Resize that caused them
    - The next message is not read until the current one is applied
"""

import asyncio
import logging
from typing import Callable, Optional

from pydantic import ValidationError

from framepace.models.control import (
    QUIT_MESSAGE,
    RESIZE_FIELDS,
    RESIZE_SEPARATOR,
    START_MESSAGE,
    ControlCommand,
    QuitCommand,
    ResizeCommand,
    StartCommand,
    UnknownCommand,
)
from framepace.models.pool import FramePool
from framepace.stream.metrics import StreamMetrics
from framepace.stream.pacing import PacingClock
from framepace.stream.pool import build_pool
from framepace.stream.raster import RasterEncodeError
from framepace.stream.session import Session
from framepace.stream.transport import FrameTransport


logger = logging.getLogger(__name__)


PoolBuilder = Callable[..., FramePool]


class ControlDecodeError(Exception):
    """Raised when a Resize message cannot be parsed."""
    pass


def parse_command(raw: str) -> ControlCommand:
    """
    Classify and decode a single control message.

    Args:
        raw: Message text as received

    Returns:
        ResizeCommand, StartCommand, QuitCommand or UnknownCommand

    Raises:
        ControlDecodeError: If the message looks like a Resize but is invalid
    """
    if raw == START_MESSAGE:
        return StartCommand()
    if raw == QUIT_MESSAGE:
        return QuitCommand()
    if RESIZE_SEPARATOR not in raw:
        return UnknownCommand(raw=raw)

    parts = [part.strip() for part in raw.split(RESIZE_SEPARATOR)]
    if len(parts) != len(RESIZE_FIELDS):
        raise ControlDecodeError(
            f"Resize needs {len(RESIZE_FIELDS)} fields, got {len(parts)}: {raw!r}"
        )

    try:
        return ResizeCommand.model_validate(dict(zip(RESIZE_FIELDS, parts)))
    except ValidationError as e:
        raise ControlDecodeError(
            f"Invalid resize {raw!r}: {e.error_count()} validation error(s)"
        ) from e


class ControlChannel:
    """
    Reads commands from the transport and applies them to a Session.

    Attributes:
        session: Session the commands are applied to
        transport: Channel the commands are read from
        pool_size: Frames rendered per pool
        max_dimension: Largest width/height a Resize may request

    Example:
        channel = ControlChannel(session, transport, clock)
        task = asyncio.create_task(channel.run())
    """

    def __init__(
        self,
        session: Session,
        transport: FrameTransport,
        clock: PacingClock,
        pool_size: int = 5,
        max_dimension: int = 8192,
        pool_builder: PoolBuilder = build_pool,
        metrics: Optional[StreamMetrics] = None,
    ) -> None:
        self.session = session
        self.transport = transport
        self.clock = clock
        self.pool_size = pool_size
        self.max_dimension = max_dimension
        self._pool_builder = pool_builder
        self._metrics = metrics or StreamMetrics()

    async def run(self) -> None:
        """
        Apply inbound commands until the channel closes.

        Raises:
            ChannelClosed: When the transport can no longer be read
        """
        while True:
            raw = await self.transport.receive_text()
            await self.handle(raw)

    async def handle(self, raw: str) -> bool:
        """
        Decode and apply one message.

        Returns:
            True if the session changed, False if the message was
            ignored or dropped.
        """
        try:
            command = parse_command(raw)
        except ControlDecodeError as e:
            self._metrics.commands_dropped += 1
            logger.warning(f"Dropped control message: {e}")
            return False

        if isinstance(command, ResizeCommand):
            applied = await self._apply_resize(command)
        elif isinstance(command, StartCommand):
            state = self.session.start(now_us=self.clock.now())
            logger.info(
                f"Playback started: {state.width}x{state.height} "
                f"@ {state.target_rate:g} fps"
            )
            applied = True
        elif isinstance(command, QuitCommand):
            self.session.quit()
            logger.info("Playback stopped")
            applied = True
        else:
            self._metrics.commands_ignored += 1
            logger.debug(f"Ignored control message: {command.raw[:64]!r}")
            return False

        if applied:
            self._metrics.commands_applied += 1
        else:
            self._metrics.commands_dropped += 1
        return applied

    async def _apply_resize(self, command: ResizeCommand) -> bool:
        """Render the new pool off the event loop, then commit in one step."""
        if command.width > self.max_dimension or command.height > self.max_dimension:
            logger.warning(
                f"Dropped resize {command.width}x{command.height}: "
                f"exceeds max dimension {self.max_dimension}"
            )
            return False

        epoch = self.session.state.epoch + 1
        try:
            pool = await asyncio.to_thread(
                self._pool_builder,
                command.width,
                command.height,
                self.pool_size,
                epoch,
            )
        except RasterEncodeError as e:
            self._metrics.pool_build_failures += 1
            logger.error(
                f"Frame pool build failed for {command.width}x{command.height}: {e}"
            )
            return False

        self._metrics.pool_builds += 1
        state = self.session.commit_resize(command, pool)
        logger.info(
            f"Client Width: {state.width} Height: {state.height} "
            f"FPS: {state.target_rate:g} (interval={state.pacing_interval_us}us, "
            f"epoch={state.epoch})"
        )
        return True
