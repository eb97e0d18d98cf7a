"""Config — load simulation parameters from YAML files.

Canvas size, particle behaviour and the trail diffusion constants all
live in YAML and are parsed into a typed dataclass here.  Values are
checked once at construction; the running simulation never rejects
input after that.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

import yaml


@dataclass
class SimulationConfig:
    """Top-level simulation configuration.

    Attributes:
        seed: RNG seed for deterministic replay.
        canvas_width: Canvas width in pixels.
        canvas_height: Canvas height in pixels.
        particle_count: Number of balls, fixed for the whole run.
        particle_speed: Ball speed in world units per second.
        particle_radius: Ball marker radius (drawing only).
        colour_low: Lowest value for each random ball colour channel.
        colour_high: Highest value for each random ball colour channel.
        spread_threshold: Squared colour length a pixel needs to spread.
        perturb_magnitude: Length of the noise subtracted before spreading.
        darken_factor: Per-pass brightness multiplier.
        arrival_epsilon: Squared distance at which a ball re-targets.
        target_margin: Gap between new targets and the canvas edge.
        near_target_speedup: Near-waypoint speed relative to the ball.
        dt: Fixed seconds per tick.
    """

    seed: int = 42
    canvas_width: int = 720
    canvas_height: int = 720
    particle_count: int = 42

    # Balls
    particle_speed: float = 150.0
    particle_radius: float = 9.0
    colour_low: int = 210
    colour_high: int = 255

    # Trail diffusion
    spread_threshold: float = 0.03
    perturb_magnitude: float = 0.03
    darken_factor: float = 0.81

    # Waypoints
    arrival_epsilon: float = 1.0
    target_margin: float = 1.0
    near_target_speedup: float = 1.5

    dt: float = 0.009

    def __post_init__(self) -> None:
        """Reject values the simulation cannot run with.

        Raises:
            ValueError: If any parameter is out of range or a count
                is not an integer.
        """
        integers = (
            "seed",
            "canvas_width",
            "canvas_height",
            "particle_count",
            "colour_low",
            "colour_high",
        )
        for name in integers:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                msg = f"{name} must be an integer, got {value!r}"
                raise ValueError(msg)
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            size = f"{self.canvas_width}x{self.canvas_height}"
            msg = f"canvas must be non-empty, got {size}"
            raise ValueError(msg)
        if self.particle_count < 0:
            msg = f"particle_count must be >= 0, got {self.particle_count}"
            raise ValueError(msg)
        if not 0 <= self.colour_low <= self.colour_high <= 255:
            bounds = f"[{self.colour_low}, {self.colour_high}]"
            msg = f"colour range {bounds} not within [0, 255]"
            raise ValueError(msg)
        if not 0.0 <= self.darken_factor <= 1.0:
            msg = f"darken_factor must be in [0, 1], got {self.darken_factor}"
            raise ValueError(msg)
        if self.dt <= 0:
            msg = f"dt must be positive, got {self.dt}"
            raise ValueError(msg)

    @classmethod
    def from_yaml(cls, path: str | Path) -> SimulationConfig:
        """Load configuration from a YAML file.

        Keys missing from the file keep their defaults; unknown keys
        are ignored.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated SimulationConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
            ValueError: If a value is out of range.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
