"""Spread-and-darken update for the trail canvas.

One call to ``step_trails`` is one simulated timestep.  Cells are
visited in raster order (top-to-bottom, left-to-right).  A cell bright
enough to spread (squared colour length at or above the threshold) has
its colour nudged by a small random vector and bleeds that colour onto
any strictly dimmer neighbour among its eight.  Every visited cell is
then darkened in place.  A neighbour written this way is marked dirty
and is neither written again nor visited as a source for the rest of
the pass.

Only the choice of which neighbours get written is order dependent.
Everything else is computed for the whole canvas at once:

- A source's nudged colour depends only on its value before the pass
  and its noise, so the noise for every bright cell is drawn in one
  batch (one row per bright cell, in raster order, including cells
  that end up skipped) and all spread and faded pixels are converted
  together.
- When a source looks at a neighbour, an earlier neighbour has already
  been visited and holds its faded value, while a later one still
  holds its value from before the pass.  Written neighbours are dirty
  and never looked at again, so both magnitudes are known up front.
- A cell's final pixel is the colour written onto it if it is dirty,
  else its faded value.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from inkdrift.canvas.canvas import DirtyMask, TrailCanvas
from inkdrift.canvas.colour import pixel_to_vector, random_unit_scaled, vector_to_pixel

if TYPE_CHECKING:
    from numpy.random import Generator

logger = logging.getLogger(__name__)

SPREAD_THRESHOLD = 0.03
PERTURB_MAGNITUDE = 0.03
DARKEN_FACTOR = 0.81

# Orthogonal neighbours, then diagonals.
_NEIGHBOUR_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, 0),
    (1, 0),
    (0, -1),
    (0, 1),
    (1, 1),
    (1, -1),
    (-1, -1),
    (-1, 1),
)


def squared_magnitude(vectors: NDArray[np.float64]) -> NDArray[np.float64]:
    """Return the squared length of each colour vector along the last axis.

    Summed channel by channel so one vector and a whole array of them
    round identically.
    """
    return (
        vectors[..., 0] * vectors[..., 0]
        + vectors[..., 1] * vectors[..., 1]
        + vectors[..., 2] * vectors[..., 2]
    )


def darken(canvas: TrailCanvas, darken_factor: float = DARKEN_FACTOR) -> None:
    """Scale every pixel's colour by ``darken_factor`` in-place."""
    vectors = pixel_to_vector(canvas.pixels)
    canvas.pixels[...] = vector_to_pixel(vectors * darken_factor)


def _spread_targets(
    sources: NDArray[np.intp],
    before: NDArray[np.float64],
    after: NDArray[np.float64],
    mask: DirtyMask,
) -> tuple[list[int], list[int]]:
    """Walk the bright cells in raster order and pick neighbours to write.

    Args:
        sources: Flat indices of the bright cells, ascending.
        before: Flat squared magnitudes from before the pass.
        after: Flat squared magnitudes each cell holds once visited.
        mask: Dirty mask for this pass; updated in place.

    Returns:
        ``(targets, writers)``: flat index of each written neighbour and
        the position in ``sources`` of the cell that wrote it.
    """
    width, height = mask.width, mask.height
    dirty = mask.flags
    before_mags = before.tolist()
    after_mags = after.tolist()
    targets: list[int] = []
    writers: list[int] = []

    for i, s in enumerate(sources.tolist()):
        if dirty[s]:
            continue
        mag = before_mags[s]
        y, x = divmod(s, width)

        for dx, dy in _NEIGHBOUR_OFFSETS:
            nx, ny = x + dx, y + dy
            if not (0 <= nx < width and 0 <= ny < height):
                continue
            n = ny * width + nx
            if dirty[n]:
                continue

            neighbour_mag = after_mags[n] if n < s else before_mags[n]
            if neighbour_mag < mag:
                dirty[n] = 1
                targets.append(n)
                writers.append(i)

    mask.writes += len(targets)
    return targets, writers


def step_trails(
    canvas: TrailCanvas,
    rng: Generator,
    *,
    spread_threshold: float = SPREAD_THRESHOLD,
    perturb_magnitude: float = PERTURB_MAGNITUDE,
    darken_factor: float = DARKEN_FACTOR,
) -> DirtyMask:
    """Run one spread + darken pass over the whole canvas in-place.

    Args:
        canvas: The canvas to update.
        rng: Random source for the colour perturbation.  One batch of
            noise is drawn per pass, one row per bright cell.
        spread_threshold: Minimum squared colour length for a cell to
            spread.
        perturb_magnitude: Length of the random vector subtracted from
            a spreading cell's colour.
        darken_factor: Multiplier applied to every visited cell.

    Returns:
        The pass's dirty mask, recording every neighbour overwrite.
    """
    vectors = pixel_to_vector(canvas.pixels).reshape(-1, 3)
    magnitudes = squared_magnitude(vectors)
    # flatnonzero is ascending, i.e. raster order
    sources = np.flatnonzero(magnitudes >= spread_threshold)

    darken(canvas, darken_factor)
    mask = DirtyMask(width=canvas.width, height=canvas.height)
    if len(sources) == 0:
        return mask

    noise = random_unit_scaled(rng, perturb_magnitude, len(sources))
    nudged = vectors[sources] - noise
    spread = vector_to_pixel(nudged)
    faded = vector_to_pixel(nudged * darken_factor)

    pixels = canvas.pixels.reshape(-1, 4)
    faded_mags = squared_magnitude(pixel_to_vector(pixels))
    faded_mags[sources] = squared_magnitude(pixel_to_vector(faded))

    targets, writers = _spread_targets(sources, magnitudes, faded_mags, mask)

    pixels[sources] = faded
    pixels[np.array(targets, dtype=np.intp)] = spread[np.array(writers, dtype=np.intp)]

    logger.debug(
        "trail pass: %d spreading cells, %d neighbour writes",
        len(sources),
        mask.writes,
    )
    return mask
