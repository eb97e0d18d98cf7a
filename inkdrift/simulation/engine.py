"""SimulationEngine — the main tick loop.

Owns the trail canvas and the balls and advances them in a fixed order
each tick:

1. Spread and darken the trail canvas
2. Move every ball and paint its colour under it

Balls paint after the trail pass so a fresh deposit survives untouched
until the next pass spreads it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
from numpy.random import Generator
from numpy.typing import NDArray

from inkdrift.canvas.canvas import TrailCanvas
from inkdrift.canvas.diffusion import step_trails
from inkdrift.particles.ball import Ball
from inkdrift.simulation.config import SimulationConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BallView:
    """Read-only snapshot of a ball for renderers."""

    x: float
    y: float
    radius: float
    colour: tuple[int, int, int, int]


@dataclass
class SimulationEngine:
    """Drives the simulation forward tick by tick.

    Attributes:
        config: Loaded simulation configuration.
        canvas: The trail canvas.
        balls: All balls, fixed in number for the lifetime of the engine.
        rng: Master seeded random generator.
        frame: Number of ticks run so far.
    """

    config: SimulationConfig
    canvas: TrailCanvas = field(init=False)
    balls: list[Ball] = field(init=False, default_factory=list)
    rng: Generator = field(init=False)
    frame: int = 0

    def __post_init__(self) -> None:
        """Build the canvas, balls and RNG from config."""
        cfg = self.config
        self.rng = np.random.default_rng(cfg.seed)
        self.canvas = TrailCanvas(width=cfg.canvas_width, height=cfg.canvas_height)
        self.balls = [
            Ball.spawn(
                self.rng,
                speed=cfg.particle_speed,
                radius=cfg.particle_radius,
                colour_range=(cfg.colour_low, cfg.colour_high),
            )
            for _ in range(cfg.particle_count)
        ]
        logger.info(
            "engine ready: %dx%d canvas, %d balls, seed %d",
            cfg.canvas_width,
            cfg.canvas_height,
            cfg.particle_count,
            cfg.seed,
        )

    def tick(self, dt: float | None = None) -> None:
        """Advance the simulation by one frame.

        Args:
            dt: Seconds to advance the balls by.  Defaults to the fixed
                ``config.dt`` so runs are reproducible.
        """
        cfg = self.config
        if dt is None:
            dt = cfg.dt

        # 1. Trail canvas
        step_trails(
            self.canvas,
            self.rng,
            spread_threshold=cfg.spread_threshold,
            perturb_magnitude=cfg.perturb_magnitude,
            darken_factor=cfg.darken_factor,
        )

        # 2. Balls
        half_w = cfg.canvas_width // 2
        half_h = cfg.canvas_height // 2
        for ball in self.balls:
            ball.advance(
                dt,
                self.rng,
                half_w,
                half_h,
                arrival_epsilon=cfg.arrival_epsilon,
                near_target_speedup=cfg.near_target_speedup,
                margin=cfg.target_margin,
            )
            ball.deposit(self.canvas)

        self.frame += 1

    def step(self) -> None:
        """Advance one tick with the fixed time delta."""
        self.tick()

    def run(self, ticks: int) -> None:
        """Run the simulation for a fixed number of ticks.

        Args:
            ticks: Number of ticks to advance.
        """
        for _ in range(ticks):
            self.step()

    def canvas_view(self) -> NDArray[np.uint8]:
        """Return the canvas pixels as a read-only ``(H, W, 4)`` array."""
        return self.canvas.view()

    def ball_views(self) -> tuple[BallView, ...]:
        """Return a snapshot of every ball's position, radius and colour."""
        return tuple(
            BallView(
                x=float(b.position[0]),
                y=float(b.position[1]),
                radius=b.radius,
                colour=tuple(int(c) for c in b.colour),
            )
            for b in self.balls
        )
