"""The color palette used to shade escaped fractal pixels.

The palette is a 2048-entry HSL hue ramp (saturation 0.8, lightness 0.5).
It is built once when this module is imported and frozen afterwards, so every
reader sees the complete table.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

PALETTE_SIZE = 2048
PALETTE_SATURATION = 0.8
PALETTE_LIGHTNESS = 0.5


def _hue_to_rgb(p: float, q: float, t: float) -> float:
    if t < 0.0:
        t += 1.0
    if t > 1.0:
        t -= 1.0
    if t < 1.0 / 6.0:
        return p + (q - p) * 6.0 * t
    if t < 1.0 / 2.0:
        return q
    if t < 2.0 / 3.0:
        return p + (q - p) * (2.0 / 3.0 - t) * 6.0
    return p


def hsl_to_rgb(h: float, s: float, lightness: float) -> tuple[int, int, int]:
    """Convert an HSL color (all components in ``[0, 1]``) to 8-bit RGB.

    Channels are rounded half up, i.e. ``floor(c * 255 + 0.5)``.

    """
    if s == 0.0:
        r = g = b = lightness
    else:
        q = lightness * (1.0 + s) if lightness < 0.5 else lightness + s - lightness * s
        p = 2.0 * lightness - q
        r = _hue_to_rgb(p, q, h + 1.0 / 3.0)
        g = _hue_to_rgb(p, q, h)
        b = _hue_to_rgb(p, q, h - 1.0 / 3.0)
    return (
        math.floor(r * 255.0 + 0.5),
        math.floor(g * 255.0 + 0.5),
        math.floor(b * 255.0 + 0.5),
    )


def build_palette(size: int = PALETTE_SIZE) -> NDArray[np.uint8]:
    """Build the hue ramp as a read-only ``(size, 3)`` ``uint8`` array.

    This is a pure function: repeated calls return equal arrays.

    """
    table = np.empty((size, 3), dtype=np.uint8)
    for i in range(size):
        table[i] = hsl_to_rgb(i / size, PALETTE_SATURATION, PALETTE_LIGHTNESS)
    table.flags.writeable = False
    return table


COLOR_PALETTE: NDArray[np.uint8] = build_palette()

# Same table as nested tuples, for the pure-python kernels.
COLOR_PALETTE_TUPLES: tuple[tuple[int, int, int], ...] = tuple(
    (int(r), int(g), int(b)) for r, g, b in COLOR_PALETTE.tolist()
)


def palette_index(iteration: int, max_iterations: int) -> int:
    """Map an escape iteration count to a palette slot."""
    return min(iteration * PALETTE_SIZE // max_iterations, PALETTE_SIZE - 1)


__all__ = [
    "COLOR_PALETTE",
    "COLOR_PALETTE_TUPLES",
    "PALETTE_SIZE",
    "build_palette",
    "hsl_to_rgb",
    "palette_index",
]
