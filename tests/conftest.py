"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add the project root to the path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interaction import PerspectiveCamera, PointerState  # noqa: E402
from particle import ParticleSystem  # noqa: E402
from settings import SimulationConfig  # noqa: E402
from simulation import Simulation  # noqa: E402


@pytest.fixture
def small_config():
    """A config with a small swarm and the stock tunables."""
    return SimulationConfig(particle_count=1000, boundary_radius=10.0)


@pytest.fixture
def particles(small_config):
    """A seeded particle store built from small_config."""
    return ParticleSystem(small_config, seed=1234)


@pytest.fixture
def camera():
    """The default camera at (0, 0, 10) looking at the origin."""
    return PerspectiveCamera(aspect=1.0)


@pytest.fixture
def pointer():
    """A pointer resting at the centre of the screen."""
    return PointerState()


@pytest.fixture
def simulation(particles, small_config, camera):
    return Simulation(particles, small_config, camera)

