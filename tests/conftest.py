"""Shared fixtures for the inkdrift test suite."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.random import Generator

from inkdrift.canvas.canvas import TrailCanvas
from inkdrift.simulation.config import SimulationConfig


class FixedRng:
    """Stand-in generator whose ``random`` always returns the same value."""

    def __init__(self, value: float = 0.5) -> None:
        self.value = value
        self.calls = 0

    def random(self, size: int | None = None) -> np.ndarray:
        self.calls += 1
        return np.full(size, self.value, dtype=np.float64)


@pytest.fixture
def rng() -> Generator:
    """A deterministic random generator for reproducible tests."""
    return np.random.default_rng(seed=12345)


@pytest.fixture
def fixed_rng() -> FixedRng:
    """A generator whose colour noise is always the (1, 1, 1) direction."""
    return FixedRng()


@pytest.fixture
def small_canvas() -> TrailCanvas:
    """A black 10x10 canvas."""
    return TrailCanvas(width=10, height=10)


@pytest.fixture
def default_config() -> SimulationConfig:
    """Default simulation config (no YAML file needed)."""
    return SimulationConfig()


@pytest.fixture
def small_config() -> SimulationConfig:
    """A 32x32 canvas with a handful of balls for fast engine tests."""
    return SimulationConfig(seed=777, canvas_width=32, canvas_height=32, particle_count=3)
