"""
Frame Pool Builder
==================

Renders the frames a session cycles through during playback.

Design Rules:
    - A pool is complete before anyone can see it
    - Pools are never mutated after construction
    - Encoding errors propagate as RasterEncodeError
"""

import logging
from typing import Optional

import numpy as np

from framepace.models.pool import FramePool
from framepace.stream.raster import render_frame


logger = logging.getLogger(__name__)


def build_pool(
    width: int,
    height: int,
    size: int = 5,
    epoch: int = 0,
    rng: Optional[np.random.Generator] = None,
) -> FramePool:
    """
    Render ``size`` independent frames for the given geometry.

    This is CPU bound; call it through ``asyncio.to_thread`` from the
    event loop.

    Args:
        width: Frame width in pixels
        height: Frame height in pixels
        size: Number of frames in the pool
        epoch: Geometry epoch to tag the pool with
        rng: Random generator shared by all frames (a fresh one if None)

    Returns:
        Fully rendered FramePool

    Raises:
        ValueError: If size < 1
        RasterEncodeError: If any frame fails to encode
    """
    if size < 1:
        raise ValueError("size must be >= 1")

    if rng is None:
        rng = np.random.default_rng()

    frames = tuple(render_frame(width, height, rng) for _ in range(size))
    pool = FramePool(width=width, height=height, frames=frames, epoch=epoch)

    logger.debug(f"Built {pool!r}, frame size={len(frames[0])} bytes")
    return pool
