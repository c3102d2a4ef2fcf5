# themes.py
"""
Colour themes for the particle swarm.

A theme maps a per-particle scalar in [0, 1] to an RGB triple and carries
the presentation parameters (background clear colour and bloom defaults)
the renderer switches to when the theme becomes active.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Tuple, Union

import numpy as np

# --- Data Contracts ---
#
# evaluate(theme: str, values: float | np.ndarray, brightness: float) -> np.ndarray
#   - Inputs:
#     - theme: One of THEME_NAMES.
#     - values: scalar or array of colour scalars in [0, 1].
#     - brightness: multiplier applied to all three channels.
#   - Outputs: float32 array of shape values.shape + (3,).
#   - Invariants: No clamping; brightness may push channels above 1.


@dataclass(frozen=True)
class Bloom:
    strength: float
    radius: float
    threshold: float


@dataclass(frozen=True)
class Theme:
    name: str
    background: int
    colors: Callable[[np.ndarray], Tuple[np.ndarray, np.ndarray, np.ndarray]]
    bloom: Bloom

    @property
    def background_rgb(self) -> Tuple[int, int, int]:
        """The background colour as an (r, g, b) tuple of 0-255 ints."""
        return (
            (self.background >> 16) & 0xFF,
            (self.background >> 8) & 0xFF,
            self.background & 0xFF,
        )


def _cosmic(v):
    return 0.2 + 0.4 * v, 0.2 + 0.2 * (1 - v), 0.5 + 0.5 * v


def _ember(v):
    return 0.5 + 0.5 * v, 0.2 + 0.3 * v, 0.1 + 0.1 * v


def _emerald(v):
    return 0.1 + 0.1 * v, 0.5 + 0.5 * v, 0.2 + 0.3 * (1 - v)


def _monochrome(v):
    val = 0.3 + 0.7 * v
    return val, val, val


_DEFAULT_BLOOM = Bloom(strength=1.5, radius=0.7, threshold=0.2)

THEMES: Dict[str, Theme] = {
    "cosmic": Theme("cosmic", 0x000011, _cosmic, _DEFAULT_BLOOM),
    "ember": Theme("ember", 0x110000, _ember, _DEFAULT_BLOOM),
    "emerald": Theme("emerald", 0x001100, _emerald, _DEFAULT_BLOOM),
    "monochrome": Theme("monochrome", 0x050505, _monochrome, _DEFAULT_BLOOM),
}

THEME_NAMES = tuple(THEMES.keys())
DEFAULT_THEME = "ember"


def get_theme(name: str) -> Theme:
    """Looks up a theme by name, raising KeyError with the valid names."""
    try:
        return THEMES[name]
    except KeyError:
        raise KeyError(
            f"Unknown colour theme '{name}'. Valid themes: {', '.join(THEME_NAMES)}."
        ) from None


def evaluate(theme: str, values: Union[float, np.ndarray], brightness: float) -> np.ndarray:
    """
    Evaluates a theme for one or many colour scalars.

    Args:
        theme (str): Name of the theme.
        values (float | np.ndarray): Colour scalar(s) in [0, 1].
        brightness (float): Factor applied to every channel.

    Returns:
        np.ndarray: RGB values with a trailing axis of length 3.
    """
    v = np.asarray(values, dtype=np.float32)
    r, g, b = get_theme(theme).colors(v)
    rgb = np.stack(np.broadcast_arrays(r, g, b), axis=-1).astype(np.float32)
    rgb *= np.float32(brightness)
    logging.debug(f"Evaluated theme '{theme}' for {v.size} value(s) at brightness {brightness}.")
    return rgb
