"""Colour helpers — conversions between 8-bit pixels and float vectors.

Pixels are RGBA ``uint8`` arrays; colour vectors are the RGB channels
normalised to ``[0, 1]`` as ``float64``.  Both helpers work on single
pixels or on whole arrays of them (any leading shape).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from numpy.random import Generator

logger = logging.getLogger(__name__)

OPAQUE = 255


def pixel_to_vector(pixel: NDArray[np.uint8]) -> NDArray[np.float64]:
    """Return the RGB channels of ``pixel`` scaled into ``[0, 1]``.

    Alpha (if present) is dropped.
    """
    return np.asarray(pixel)[..., :3].astype(np.float64) / 255.0


def vector_to_pixel(vector: NDArray[np.float64]) -> NDArray[np.uint8]:
    """Convert a colour vector back to an opaque RGBA pixel.

    Channels are scaled by 255 and truncated toward zero, then clamped
    into ``[0, 255]`` so perturbed values never wrap around.  NaN
    channels become 0.

    Args:
        vector: Array of shape ``(..., 3)``.

    Returns:
        ``uint8`` array of shape ``(..., 4)`` with alpha 255.
    """
    vector = np.asarray(vector, dtype=np.float64)
    channels = np.trunc(np.nan_to_num(vector * 255.0, nan=0.0))
    channels = np.clip(channels, 0, 255)

    pixel = np.full((*vector.shape[:-1], 4), OPAQUE, dtype=np.uint8)
    pixel[..., :3] = channels.astype(np.uint8)
    return pixel


def random_unit_scaled(
    rng: Generator,
    magnitude: float,
    count: int | None = None,
) -> NDArray[np.float64]:
    """Draw random directions in the positive octant scaled to ``magnitude``.

    Three uniform samples in ``[0, 1)`` are normalised, so the result is
    not uniformly distributed over the sphere.  A zero-length draw
    yields the zero vector.

    Args:
        rng: Random source.
        magnitude: Length of each returned vector.
        count: Number of vectors to draw in one call, or None for one.

    Returns:
        A length-3 vector, or a ``(count, 3)`` array when ``count`` is
        given.
    """
    v = rng.random(3 if count is None else (count, 3))
    length = np.sqrt(
        v[..., 0] * v[..., 0] + v[..., 1] * v[..., 1] + v[..., 2] * v[..., 2],
    )
    degenerate = length == 0.0
    if np.any(degenerate):
        logger.debug("zero-length colour sample, using zero vector")
    safe = np.where(degenerate, 1.0, length)[..., np.newaxis]
    return np.where(degenerate[..., np.newaxis], 0.0, v / safe * magnitude)
