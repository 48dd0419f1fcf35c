"""
Raster Generation
=================

Dedicated module for producing and encoding the raster frames that are
streamed to clients.

Design Rules:
    - This is the ONLY place in the codebase that encodes images
    - Rasters are single-channel uint8 intensity buffers of shape (H, W)
    - Encoded payloads are standard BMP containers
    - Fails with RasterEncodeError, never with a bare OpenCV error
"""

import logging
from typing import Optional

import cv2
import numpy as np


logger = logging.getLogger(__name__)


class RasterEncodeError(Exception):
    """Raised when a raster cannot be encoded."""
    pass


def generate_noise(
    width: int,
    height: int,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Generate a raster of uniform-random pixel intensities.

    Args:
        width: Raster width in pixels
        height: Raster height in pixels
        rng: Random generator to draw from (a fresh one if None)

    Returns:
        Grayscale raster as np.ndarray (height, width), dtype=uint8
    """
    if rng is None:
        rng = np.random.default_rng()
    return rng.integers(0, 256, size=(height, width), dtype=np.uint8)


def encode_bmp(raster: np.ndarray) -> bytes:
    """
    Encode a grayscale raster as a BMP payload.

    Args:
        raster: Grayscale image as np.ndarray (H, W), dtype=uint8

    Returns:
        BMP file bytes

    Raises:
        RasterEncodeError: If the raster is malformed or encoding fails
    """
    if raster.ndim != 2:
        raise RasterEncodeError(f"Invalid raster shape: {raster.shape}")
    if raster.dtype != np.uint8:
        raise RasterEncodeError(f"Invalid raster dtype: {raster.dtype}")
    if raster.size == 0:
        raise RasterEncodeError(f"Empty raster: {raster.shape}")

    try:
        ok, encoded = cv2.imencode(".bmp", raster)
    except cv2.error as e:
        raise RasterEncodeError(f"BMP encode failed for {raster.shape}: {e}")

    if not ok:
        raise RasterEncodeError(
            f"BMP encode failed for {raster.shape}: cv2.imencode returned False"
        )

    return encoded.tobytes()


def render_frame(
    width: int,
    height: int,
    rng: Optional[np.random.Generator] = None,
) -> bytes:
    """Generate one noise raster and return it BMP-encoded."""
    payload = encode_bmp(generate_noise(width, height, rng))
    logger.debug(f"Rendered {width}x{height} frame, size={len(payload)} bytes")
    return payload
