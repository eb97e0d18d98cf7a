"""Pygame visualization for the inkdrift simulation.

Shows the trail canvas at one pixel per cell with each ball drawn as a
filled circle.  The simulation advances a whole number of fixed-delta
ticks per displayed frame, so output does not depend on the frame rate.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

import numpy as np
import pygame

from inkdrift.ui.export import frame_path

if TYPE_CHECKING:
    from inkdrift.simulation.engine import SimulationEngine

logger = logging.getLogger(__name__)

_BG = (0, 0, 0)
_TEXT = (200, 200, 200)


class PygameRenderer:
    """Renders a SimulationEngine state into a Pygame window.

    Attributes:
        engine: The simulation engine to visualise.
        ticks_per_frame: Simulation ticks run before each redraw.
        capture_dir: If set, every drawn frame is saved there as PNG.
        screen: The Pygame display surface.
    """

    _SPEED_STEPS: ClassVar[list[int]] = [1, 2, 3, 5, 8, 13]

    def __init__(
        self,
        engine: SimulationEngine,
        ticks_per_frame: int = 1,
        capture_dir: Path | None = None,
    ) -> None:
        """Initialise the renderer and open the window.

        Args:
            engine: The simulation engine to render.
            ticks_per_frame: Simulation ticks per displayed frame.
            capture_dir: Directory for per-frame screenshots, or None.

        Raises:
            ValueError: If ``ticks_per_frame`` is below 1.
        """
        if ticks_per_frame < 1:
            msg = f"ticks_per_frame must be at least 1, got {ticks_per_frame}"
            raise ValueError(msg)
        self.engine = engine
        self.ticks_per_frame = ticks_per_frame
        self._speed_index = self._nearest_speed(ticks_per_frame)
        self.capture_dir = capture_dir
        if capture_dir is not None:
            capture_dir.mkdir(parents=True, exist_ok=True)

        self._size = (engine.canvas.width, engine.canvas.height)

        pygame.init()
        self.screen = pygame.display.set_mode(self._size)
        pygame.display.set_caption("inkdrift")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.running = True
        self.paused = False
        self.show_info = False

    def _nearest_speed(self, tpf: int) -> int:
        """Return the index of the closest speed preset."""
        diffs = [abs(s - tpf) for s in self._SPEED_STEPS]
        return diffs.index(min(diffs))

    def run(self, fps: int = 60) -> None:
        """Main loop: handle events, step sim, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            self.clock.tick(fps)
            self._handle_events()
            if not self.paused:
                for _ in range(self.ticks_per_frame):
                    self.engine.step()
            self._draw()
            if self.capture_dir is not None and not self.paused:
                pygame.image.save(
                    self.screen,
                    str(frame_path(self.capture_dir, self.engine.frame - 1)),
                )

        logger.info("window closed after %d ticks", self.engine.frame)
        pygame.quit()

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.paused = not self.paused
                elif event.key == pygame.K_i:
                    self.show_info = not self.show_info
                elif event.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    self._speed_index = min(
                        len(self._SPEED_STEPS) - 1,
                        self._speed_index + 1,
                    )
                    self.ticks_per_frame = self._SPEED_STEPS[self._speed_index]
                elif event.key == pygame.K_MINUS:
                    self._speed_index = max(0, self._speed_index - 1)
                    self.ticks_per_frame = self._SPEED_STEPS[self._speed_index]

    def _draw(self) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        self._draw_trails()
        self._draw_balls()
        if self.show_info:
            self._draw_info()
        pygame.display.flip()

    def _draw_trails(self) -> None:
        """Blit the canvas RGB channels onto the screen."""
        rgb = self.engine.canvas_view()[..., :3]
        # surfarray wants (width, height, 3)
        pygame.surfarray.blit_array(
            self.screen,
            np.ascontiguousarray(rgb.transpose(1, 0, 2)),
        )

    def _draw_balls(self) -> None:
        """Draw each ball as a filled circle in its own colour."""
        half_w, half_h = self._size[0] // 2, self._size[1] // 2
        for ball in self.engine.ball_views():
            centre = (ball.x + half_w, half_h - ball.y)
            pygame.draw.circle(self.screen, ball.colour[:3], centre, ball.radius)

    def _draw_info(self) -> None:
        """Draw a small status overlay in the top-left corner."""
        lines = [
            f"Frame: {self.engine.frame}",
            f"Ticks/frame: {self.ticks_per_frame}",
            f"{'PAUSED' if self.paused else 'RUNNING'}",
            "SPACE pause  +/- speed  I info  ESC quit",
        ]
        y = 6
        for line in lines:
            surf = self.font.render(line, True, _TEXT)
            self.screen.blit(surf, (6, y))
            y += 18
