# settings.py
"""
Typed configuration for the particle swarm.

SimulationConfig is the single snapshot of tunables read by the simulation
each tick. It is created from the `simulation_parameters` section of
config.json and mutated only between ticks, through `set_value`, which
keeps every field inside the ranges declared in CONTROLS.
"""
import logging
import math
from dataclasses import dataclass, fields
from typing import Any, Dict, List, NamedTuple, Optional

from themes import DEFAULT_THEME, THEME_NAMES

# --- Data Contracts ---
#
# class SimulationConfig:
#   - from_params(params: Dict[str, Any]) -> SimulationConfig:
#     - Inputs: the "simulation_parameters" dictionary from config.json.
#       Unknown keys (e.g. "seed") are ignored.
#     - Outputs: A config whose numeric fields are clamped to CONTROLS.
#   - set_value(self, name: str, value: Any) -> Any:
#     - Side Effects: Stores the clamped value on the named field.
#     - Outputs: The value actually stored.
#     - Raises: KeyError for unknown field names.


class ControlSpec(NamedTuple):
    """A live-editable numeric control exposed to the control panel."""
    name: str
    label: str
    group: str
    minimum: float
    maximum: float
    step: float


CONTROLS: List[ControlSpec] = [
    ControlSpec("brightness", "Brightness", "Visual", 0.1, 2.0, 0.1),
    ControlSpec("bloom_strength", "Bloom Strength", "Visual", 0.1, 3.0, 0.1),
    ControlSpec("bloom_radius", "Bloom Radius", "Visual", 0.0, 1.0, 0.05),
    ControlSpec("bloom_threshold", "Bloom Threshold", "Visual", 0.0, 1.0, 0.05),
    ControlSpec("repulsion_strength", "Repulsion Strength", "Interaction", 0.1, 1.0, 0.05),
    ControlSpec("repulsion_radius", "Repulsion Radius", "Interaction", 0.5, 5.0, 0.1),
    ControlSpec("mouse_influence", "Mouse Influence", "Interaction", 0.1, 2.0, 0.1),
    ControlSpec("damping", "Damping", "Physics", 0.8, 0.99, 0.01),
    ControlSpec("random_movement", "Random Movement", "Physics", 0.0001, 0.005, 0.0001),
    ControlSpec("max_speed", "Max Speed", "Physics", 0.01, 0.5, 0.01),
    ControlSpec("float_strength", "Flow Strength", "Floating Behavior", 0.0005, 0.005, 0.0005),
    ControlSpec("float_speed", "Flow Speed", "Floating Behavior", 0.05, 0.5, 0.05),
    ControlSpec("float_scale", "Flow Scale", "Floating Behavior", 0.1, 2.0, 0.1),
    ControlSpec("center_repel_strength", "Anti-Grouping", "Floating Behavior", 0.0001, 0.005, 0.0001),
    ControlSpec("distribution_factor", "Distribution", "Floating Behavior", 0.2, 1.0, 0.1),
    ControlSpec("particle_count", "Particle Count", "Particles", 1, 200000, 1000),
    ControlSpec("particle_size", "Particle Size", "Particles", 0.01, 0.2, 0.01),
    ControlSpec("boundary_radius", "Boundary Radius", "Boundary", 2.0, 30.0, 0.5),
    ControlSpec("boundary_strength", "Boundary Strength", "Boundary", 0.01, 0.2, 0.01),
    ControlSpec("bounce_amount", "Bounce", "Boundary", 0.0, 1.0, 0.05),
]

CONTROLS_BY_NAME: Dict[str, ControlSpec] = {c.name: c for c in CONTROLS}

# Fields that only take effect after the particle store is rebuilt.
REINITIALIZING_FIELDS = frozenset({"particle_count", "particle_size", "boundary_radius"})
# Fields that change the derived base colours.
RECOLORING_FIELDS = frozenset({"color_theme", "brightness"})


@dataclass
class SimulationConfig:
    particle_count: int = 100000
    particle_size: float = 0.05

    # Mouse interaction
    repulsion_strength: float = 0.5
    repulsion_radius: float = 3.0
    mouse_influence: float = 0.8

    # Physics. `damping` is exposed to the control panel only; the tick
    # applies the fixed VELOCITY_DAMPING constant.
    damping: float = 0.99
    random_movement: float = 0.002
    max_speed: float = 0.1

    # Floating behavior
    float_strength: float = 0.002
    float_speed: float = 0.15
    float_scale: float = 0.8

    # Anti-grouping
    center_repel_strength: float = 0.001
    distribution_factor: float = 0.7

    # Visual
    color_theme: str = DEFAULT_THEME
    brightness: float = 1.5
    bloom_strength: float = 2.0
    bloom_radius: float = 0.7
    bloom_threshold: float = 0.2

    # Boundary
    boundary_radius: float = 10.0
    boundary_strength: float = 0.05
    bounce_amount: float = 0.8

    def __post_init__(self):
        for name in CONTROLS_BY_NAME:
            setattr(self, name, _clamp(name, getattr(self, name)))
        self.color_theme = _validate_theme(self.color_theme)

    @classmethod
    def from_params(cls, params: Optional[Dict[str, Any]]) -> "SimulationConfig":
        """Builds a config from a parameter dictionary, ignoring unknown keys."""
        params = params or {}
        known = {f.name for f in fields(cls)}
        ignored = sorted(set(params) - known)
        if ignored:
            logging.debug(f"Ignoring non-simulation parameters: {ignored}")
        config = cls(**{k: v for k, v in params.items() if k in known})
        logging.info(
            f"Simulation config ready: {config.particle_count} particles, "
            f"theme '{config.color_theme}', boundary radius {config.boundary_radius}."
        )
        return config

    def set_value(self, name: str, value: Any) -> Any:
        """
        Sets a single tunable, clamping it to its declared range.

        Returns:
            Any: The value that was stored.
        """
        if name == "color_theme":
            stored = _validate_theme(value)
        elif name in CONTROLS_BY_NAME:
            stored = _clamp(name, value)
        else:
            raise KeyError(f"Unknown simulation parameter '{name}'.")
        setattr(self, name, stored)
        return stored


def _clamp(name: str, value: Any):
    spec = CONTROLS_BY_NAME[name]
    is_int = isinstance(spec.step, int)
    default = SimulationConfig.__dataclass_fields__[name].default
    try:
        number = int(value) if is_int else float(value)
    except (TypeError, ValueError, OverflowError):
        logging.warning(f"Invalid value {value!r} for '{name}'. Using default {default}.")
        return default
    if not math.isfinite(number):
        logging.warning(f"Non-finite value {number} for '{name}'. Using default {default}.")
        return default
    clamped = min(max(number, spec.minimum), spec.maximum)
    if clamped != number:
        logging.warning(
            f"Parameter '{name}'={number} outside [{spec.minimum}, {spec.maximum}]. "
            f"Clamped to {clamped}."
        )
    return int(clamped) if is_int else float(clamped)


def _validate_theme(name: Any) -> str:
    if name in THEME_NAMES:
        return name
    logging.warning(f"Unknown colour theme {name!r}. Falling back to '{DEFAULT_THEME}'.")
    return DEFAULT_THEME
