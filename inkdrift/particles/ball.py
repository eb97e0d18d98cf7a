"""Ball — a particle that wanders the canvas by chasing two waypoints.

Movement model:

- The ball walks toward its *near* target at ``speed`` units/second.
- The near target itself walks toward a *far* target at
  ``speed * near_target_speedup``, so the ball's heading bends smoothly
  instead of snapping between waypoints.
- Once the ball is within ``sqrt(arrival_epsilon)`` of its near target,
  both targets are re-drawn uniformly inside the canvas.

Positions are in world space: origin at the canvas centre, +y up.
``grid_position`` maps them to canvas pixels (+y down).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from inkdrift.canvas.colour import OPAQUE

if TYPE_CHECKING:
    from numpy.random import Generator

    from inkdrift.canvas.canvas import TrailCanvas

logger = logging.getLogger(__name__)

ARRIVAL_EPSILON = 1.0
NEAR_TARGET_SPEEDUP = 1.5
TARGET_MARGIN = 1.0


def _origin() -> NDArray[np.float64]:
    return np.zeros(2, dtype=np.float64)


def move_toward(
    point: NDArray[np.float64],
    target: NDArray[np.float64],
    distance: float,
) -> NDArray[np.float64]:
    """Return ``point`` moved ``distance`` units in the direction of ``target``.

    The step is not clipped at the target, so a long step overshoots.
    If ``point`` already equals ``target`` there is no direction and
    ``point`` is returned unchanged.
    """
    delta = target - point
    length = float(np.hypot(delta[0], delta[1]))
    if length == 0.0:
        logger.debug("zero-length heading at %s, not moving", point)
        return point.copy()
    return point + delta / length * distance


@dataclass
class Ball:
    """A single wandering particle.

    Attributes:
        colour: RGBA pixel painted into the canvas every tick.
        position: Current world-space position.
        near_target: Waypoint the ball is walking toward.
        far_target: Waypoint the near target is walking toward.
        speed: World units per second.
        radius: Marker radius, used only when drawing.
    """

    colour: NDArray[np.uint8]
    position: NDArray[np.float64] = field(default_factory=_origin)
    near_target: NDArray[np.float64] = field(default_factory=_origin)
    far_target: NDArray[np.float64] = field(default_factory=_origin)
    speed: float = 150.0
    radius: float = 9.0

    @classmethod
    def spawn(
        cls,
        rng: Generator,
        *,
        speed: float = 150.0,
        radius: float = 9.0,
        colour_range: tuple[int, int] = (210, 255),
    ) -> Ball:
        """Create a ball at the origin with a random light colour.

        Both targets start at the origin too, so the first ``advance``
        picks real targets.

        Args:
            rng: Random source.
            speed: World units per second.
            radius: Marker radius.
            colour_range: Inclusive (min, max) for each RGB channel.

        Returns:
            A new Ball.
        """
        lo, hi = colour_range
        rgb = rng.integers(lo, hi + 1, size=3)
        colour = np.array([*rgb, OPAQUE], dtype=np.uint8)
        return cls(colour=colour, speed=speed, radius=radius)

    def reached_target(self, arrival_epsilon: float = ARRIVAL_EPSILON) -> bool:
        """Return True if the ball is close enough to pick new targets."""
        delta = self.near_target - self.position
        return float(delta @ delta) <= arrival_epsilon

    def pick_targets(
        self,
        rng: Generator,
        half_width: float,
        half_height: float,
        margin: float = TARGET_MARGIN,
    ) -> None:
        """Draw fresh far and near targets inside the world bounds."""
        lo = np.array([-(half_width - margin), -(half_height - margin)])
        hi = -lo
        self.far_target = rng.uniform(lo, hi)
        self.near_target = rng.uniform(lo, hi)

    def advance(
        self,
        dt: float,
        rng: Generator,
        half_width: float,
        half_height: float,
        *,
        arrival_epsilon: float = ARRIVAL_EPSILON,
        near_target_speedup: float = NEAR_TARGET_SPEEDUP,
        margin: float = TARGET_MARGIN,
    ) -> None:
        """Move the ball (and its near target) forward by ``dt`` seconds.

        Args:
            dt: Time step in seconds.
            rng: Random source for target reselection.
            half_width: Half the canvas width in world units.
            half_height: Half the canvas height in world units.
            arrival_epsilon: Squared distance at which the near target
                counts as reached.
            near_target_speedup: Speed multiplier for the near target.
            margin: Gap kept between new targets and the canvas edge.
        """
        if self.reached_target(arrival_epsilon):
            self.pick_targets(rng, half_width, half_height, margin)

        self.near_target = move_toward(
            self.near_target,
            self.far_target,
            self.speed * near_target_speedup * dt,
        )
        self.position = move_toward(self.position, self.near_target, self.speed * dt)

    def grid_position(self, canvas: TrailCanvas) -> tuple[int, int]:
        """Return the canvas pixel under the ball, clamped to the canvas."""
        gx = round(float(self.position[0])) + canvas.width // 2
        gy = canvas.height // 2 - round(float(self.position[1]))
        if not canvas.in_bounds(gx, gy):
            logger.debug("ball at %s clamped onto canvas", self.position)
            gx, gy = canvas.clamp(gx, gy)
        return gx, gy

    def deposit(self, canvas: TrailCanvas) -> None:
        """Overwrite the pixel under the ball with its colour."""
        gx, gy = self.grid_position(canvas)
        canvas.put_pixel(gx, gy, self.colour)
