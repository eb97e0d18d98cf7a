"""Tests for inkdrift.canvas.diffusion — spread and darken."""

from __future__ import annotations

import numpy as np

from inkdrift.canvas.canvas import DirtyMask, TrailCanvas
from inkdrift.canvas.colour import pixel_to_vector, random_unit_scaled, vector_to_pixel
from inkdrift.canvas.diffusion import darken, squared_magnitude, step_trails

WHITE = np.array([255, 255, 255, 255], dtype=np.uint8)

_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1), (1, 1), (1, -1), (-1, -1), (-1, 1))


def _raster_walk(pixels: np.ndarray, rng, threshold=0.03, modify=0.03, darken_by=0.81):
    """Visit every cell in raster order; the plain form of the trail pass.

    Noise comes as one batch with a row per bright cell, in raster order.
    """
    height, width = pixels.shape[:2]
    dirty = np.zeros((height, width), dtype=bool)
    bright = [
        (y, x)
        for y in range(height)
        for x in range(width)
        if squared_magnitude(pixel_to_vector(pixels[y, x])) >= threshold
    ]
    noise = random_unit_scaled(rng, modify, len(bright)) if bright else None
    row = {cell: i for i, cell in enumerate(bright)}
    for y in range(height):
        for x in range(width):
            if dirty[y, x]:
                continue
            v = pixel_to_vector(pixels[y, x])
            mag = squared_magnitude(v)
            if mag >= threshold:
                v = v - noise[row[(y, x)]]
                for dx, dy in _OFFSETS:
                    nx, ny = x + dx, y + dy
                    if not (0 <= nx < width and 0 <= ny < height) or dirty[ny, nx]:
                        continue
                    nv = pixel_to_vector(pixels[ny, nx])
                    if squared_magnitude(nv) < mag:
                        pixels[ny, nx] = vector_to_pixel(v)
                        dirty[ny, nx] = True
            pixels[y, x] = vector_to_pixel(v * darken_by)
    return dirty


def _random_canvas(rng: np.random.Generator, width: int, height: int) -> TrailCanvas:
    canvas = TrailCanvas(width=width, height=height)
    canvas.pixels[..., :3] = rng.integers(0, 256, size=(height, width, 3))
    # mostly dark with a few bright specks, like a running simulation
    dark = rng.random((height, width)) < 0.7
    canvas.pixels[dark, :3] //= 8
    canvas.pixels[..., 3] = 255
    return canvas


class TestDarken:
    """Tests for the whole-canvas fade."""

    def test_darken_scales_channels(self) -> None:
        canvas = TrailCanvas(width=2, height=2)
        canvas.pixels[...] = WHITE
        darken(canvas, 0.5)
        assert np.all(canvas.pixels[..., :3] == 127)
        assert np.all(canvas.pixels[..., 3] == 255)


class TestStepTrails:
    """Tests for one spread + darken pass."""

    def test_single_bright_pixel_spreads(
        self,
        small_canvas: TrailCanvas,
        fixed_rng,
    ) -> None:
        small_canvas.pixels[..., 3] = 255
        small_canvas.put_pixel(5, 5, WHITE)

        mask = step_trails(
            small_canvas,
            fixed_rng,
            spread_threshold=0.03,
            darken_factor=0.81,
        )

        # (1 - 0.03/sqrt(3)) * 0.81 * 255 = 202.97
        assert small_canvas.pixel_at(5, 5).tolist() == [202, 202, 202, 255]
        # (1 - 0.03/sqrt(3)) * 255 = 250.58
        for dx, dy in _OFFSETS:
            assert small_canvas.pixel_at(5 + dx, 5 + dy).tolist() == [250, 250, 250, 255]
            assert mask.is_dirty(5 + dx, 5 + dy)
        assert mask.writes == 8
        assert not mask.is_dirty(5, 5)
        assert fixed_rng.calls == 1

    def test_everything_else_stays_black(
        self,
        small_canvas: TrailCanvas,
        fixed_rng,
    ) -> None:
        small_canvas.put_pixel(5, 5, WHITE)
        step_trails(small_canvas, fixed_rng)
        rgb = small_canvas.pixels[..., :3].copy()
        rgb[4:7, 4:7] = 0
        assert not rgb.any()
        assert np.all(small_canvas.pixels[..., 3] == 255)

    def test_unperturbed_decay_when_dim(self, fixed_rng) -> None:
        canvas = TrailCanvas(width=3, height=3)
        canvas.pixels[1, 1] = [20, 20, 20, 255]  # 3 * (20/255)^2 = 0.018
        mask = step_trails(canvas, fixed_rng)
        # 20/255 * 0.81 * 255 = 16.2
        assert canvas.pixel_at(1, 1).tolist() == [16, 16, 16, 255]
        assert mask.writes == 0
        assert fixed_rng.calls == 0

    def test_white_pixel_without_spread_darkens_plainly(self, fixed_rng) -> None:
        """A source with no dimmer neighbour still keeps its noise."""
        canvas = TrailCanvas(width=1, height=1)
        canvas.pixels[0, 0] = WHITE
        step_trails(canvas, fixed_rng)
        assert canvas.pixel_at(0, 0).tolist() == [202, 202, 202, 255]

    def test_dimmer_source_cannot_overwrite_brighter(self, fixed_rng) -> None:
        canvas = TrailCanvas(width=4, height=3)
        canvas.pixels[..., 3] = 255
        canvas.put_pixel(1, 1, np.array([200, 200, 200, 255], dtype=np.uint8))
        canvas.put_pixel(2, 1, WHITE)

        mask = step_trails(canvas, fixed_rng)

        # the white cell kept its own (noised, darkened) colour
        assert canvas.pixel_at(2, 1).tolist() == [202, 202, 202, 255]
        assert not mask.is_dirty(2, 1)
        # and then bled over the now darker 200-grey cell
        assert canvas.pixel_at(1, 1).tolist() == [250, 250, 250, 255]
        assert mask.is_dirty(1, 1)

    def test_equal_brightness_does_not_spread(self, fixed_rng) -> None:
        canvas = TrailCanvas(width=2, height=1)
        canvas.pixels[...] = WHITE
        mask = step_trails(canvas, fixed_rng)
        # equal is not strictly dimmer
        assert not mask.is_dirty(1, 0)

    def test_decay_only_is_monotone(self, rng: np.random.Generator) -> None:
        canvas = TrailCanvas(width=16, height=16)
        # 3 * (25/255)^2 < 0.03, nothing can spread
        canvas.pixels[..., :3] = rng.integers(0, 26, size=(16, 16, 3))
        canvas.pixels[..., 3] = 255
        before = canvas.pixels.copy()

        mask = step_trails(canvas, rng)

        assert mask.writes == 0
        assert np.all(canvas.pixels[..., :3] <= before[..., :3])

    def test_each_cell_written_at_most_once(self, rng: np.random.Generator) -> None:
        canvas = _random_canvas(rng, 24, 24)
        mask = step_trails(canvas, rng)
        assert isinstance(mask, DirtyMask)
        assert mask.writes == int(mask.grid.sum())
        assert mask.writes > 0

    def test_matches_plain_raster_walk(self) -> None:
        """Bit-identical to visiting every cell in raster order."""
        for seed in range(5):
            canvas = _random_canvas(np.random.default_rng(seed), 20, 15)
            expected = canvas.pixels.copy()

            dirty = _raster_walk(expected, np.random.default_rng(100 + seed))
            mask = step_trails(canvas, np.random.default_rng(100 + seed))

            assert np.array_equal(canvas.pixels, expected)
            assert np.array_equal(mask.grid, dirty)

    def test_boundary_cells_have_no_wraparound(self, fixed_rng) -> None:
        canvas = TrailCanvas(width=4, height=4)
        canvas.pixels[..., 3] = 255
        canvas.put_pixel(0, 0, WHITE)
        step_trails(canvas, fixed_rng)
        assert not canvas.pixels[3, :, :3].any()
        assert not canvas.pixels[:, 3, :3].any()
        assert canvas.pixel_at(1, 1).tolist() == [250, 250, 250, 255]

    def test_noise_drawn_once_per_pass(self, fixed_rng) -> None:
        canvas = TrailCanvas(width=12, height=12)
        canvas.pixels[::3, ::3] = WHITE
        step_trails(canvas, fixed_rng)
        assert fixed_rng.calls == 1

    def test_noise_rows_follow_raster_order(self) -> None:
        """Each bright cell uses its own row of the noise batch."""

        class RowRng:
            def random(self, size):
                rows = np.zeros(size)
                rows[0] = [1.0, 0.0, 0.0]
                rows[1] = [0.0, 0.0, 1.0]
                return rows

        canvas = TrailCanvas(width=5, height=5)
        canvas.pixels[..., 3] = 255
        canvas.put_pixel(0, 0, WHITE)
        canvas.put_pixel(4, 0, WHITE)
        step_trails(canvas, RowRng())

        # (1 - 0.03) * 255 = 247.35
        assert canvas.pixel_at(1, 1).tolist() == [247, 255, 255, 255]
        assert canvas.pixel_at(3, 1).tolist() == [255, 255, 247, 255]

    def test_busy_canvas_matches_raster_walk(self) -> None:
        """Dense, touching bright regions, as after many ticks."""
        rng = np.random.default_rng(9)
        canvas = TrailCanvas(width=48, height=40)
        canvas.pixels[..., :3] = rng.integers(60, 256, size=(40, 48, 3))
        canvas.pixels[..., 3] = 255
        expected = canvas.pixels.copy()

        dirty = _raster_walk(expected, np.random.default_rng(1))
        mask = step_trails(canvas, np.random.default_rng(1))

        assert np.array_equal(canvas.pixels, expected)
        assert np.array_equal(mask.grid, dirty)
        assert mask.writes == int(mask.grid.sum())
