"""TrailCanvas — the persistent RGBA pixel grid particles paint into.

The canvas is a single contiguous ``(height, width, 4)`` uint8 array
addressed as ``pixels[y, x]``.  Its size is fixed at construction.
``DirtyMask`` is the per-pass scratch grid used by the diffusion step.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray


@dataclass
class TrailCanvas:
    """A fixed-size grid of RGBA pixels.

    Attributes:
        width: Number of pixel columns.
        height: Number of pixel rows.
        pixels: RGBA values, indexed as ``pixels[y, x]``; zero-initialised.
    """

    width: int
    height: int
    pixels: NDArray[np.uint8] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Allocate a fully transparent black canvas."""
        self.pixels = np.zeros((self.height, self.width, 4), dtype=np.uint8)

    def __setattr__(self, name: str, value: object) -> None:
        if name in ("width", "height") and name in self.__dict__:
            msg = f"canvas {name} is fixed at {self.__dict__[name]}"
            raise AttributeError(msg)
        super().__setattr__(name, value)

    def in_bounds(self, x: int, y: int) -> bool:
        """Return True if ``(x, y)`` addresses a pixel on this canvas."""
        return 0 <= x < self.width and 0 <= y < self.height

    def clamp(self, x: int, y: int) -> tuple[int, int]:
        """Clamp ``(x, y)`` to the nearest valid pixel coordinate."""
        return (
            min(max(x, 0), self.width - 1),
            min(max(y, 0), self.height - 1),
        )

    def pixel_at(self, x: int, y: int) -> NDArray[np.uint8]:
        """Return a copy of the pixel at ``(x, y)``.

        Raises:
            IndexError: If coordinates are out of bounds.
        """
        if not self.in_bounds(x, y):
            msg = f"({x}, {y}) out of bounds for {self.width}x{self.height}"
            raise IndexError(msg)
        return self.pixels[y, x].copy()

    def put_pixel(self, x: int, y: int, pixel: NDArray[np.uint8]) -> None:
        """Overwrite the pixel at ``(x, y)``.

        Raises:
            IndexError: If coordinates are out of bounds.
        """
        if not self.in_bounds(x, y):
            msg = f"({x}, {y}) out of bounds for {self.width}x{self.height}"
            raise IndexError(msg)
        self.pixels[y, x] = pixel

    def view(self) -> NDArray[np.uint8]:
        """Return a read-only view of the pixel array (no copy)."""
        ro = self.pixels.view()
        ro.flags.writeable = False
        return ro


@dataclass
class DirtyMask:
    """Cells already written as a neighbour during one diffusion pass.

    Flags are kept flat in row-major order (``index = y * width + x``)
    so the spreading loop can test and set them cheaply.

    Attributes:
        width: Number of columns, matching the canvas.
        height: Number of rows, matching the canvas.
        flags: One byte per cell, non-zero once the cell is written.
        writes: Number of neighbour overwrites recorded so far.
    """

    width: int
    height: int
    flags: bytearray = field(init=False, repr=False)
    writes: int = 0

    def __post_init__(self) -> None:
        """Start with every cell clean."""
        self.flags = bytearray(self.width * self.height)

    @property
    def grid(self) -> NDArray[np.bool_]:
        """Return the flags as a ``(height, width)`` boolean view."""
        return np.frombuffer(self.flags, dtype=np.bool_).reshape(self.height, self.width)

    def is_dirty(self, x: int, y: int) -> bool:
        """Return True if ``(x, y)`` was written this pass."""
        return bool(self.flags[y * self.width + x])

    def mark(self, x: int, y: int) -> None:
        """Record a neighbour overwrite at ``(x, y)``."""
        self.flags[y * self.width + x] = 1
        self.writes += 1
