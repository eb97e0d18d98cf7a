"""Headless frame export with Pillow.

Runs the engine without a window and writes one PNG per tick, named by
frame number (``0000.png``, ``0001.png``, ...), with each ball drawn as
a filled disc over the trail canvas.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw

if TYPE_CHECKING:
    from inkdrift.simulation.engine import SimulationEngine

logger = logging.getLogger(__name__)


def render_frame(engine: SimulationEngine) -> Image.Image:
    """Compose the current canvas and ball markers into an RGB image."""
    canvas = engine.canvas_view()
    image = Image.fromarray(canvas[..., :3].copy())
    draw = ImageDraw.Draw(image)

    half_w = engine.canvas.width // 2
    half_h = engine.canvas.height // 2
    for ball in engine.ball_views():
        cx = ball.x + half_w
        cy = half_h - ball.y
        r = ball.radius
        draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=ball.colour[:3])
    return image


def frame_path(directory: Path, frame: int) -> Path:
    """Return the output path for ``frame`` inside ``directory``."""
    return directory / f"{frame:04d}.png"


def export_frames(
    engine: SimulationEngine,
    frames: int,
    output_dir: str | Path,
) -> list[Path]:
    """Advance ``engine`` ``frames`` times, saving a PNG after each tick.

    Args:
        engine: The simulation to run.
        frames: Number of ticks (and images) to produce.
        output_dir: Directory for the PNGs; created if missing.

    Returns:
        Paths of the written images, in frame order.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for _ in range(frames):
        engine.step()
        path = frame_path(output_dir, engine.frame - 1)
        render_frame(engine).save(path)
        written.append(path)

    logger.info("wrote %d frames to %s", len(written), output_dir)
    return written
