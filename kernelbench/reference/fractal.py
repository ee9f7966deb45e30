"""Escape-time fractal rendering with plain python loops."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from kernelbench.palette import COLOR_PALETTE_TUPLES, palette_index
from kernelbench.validation import (
    WORKING_SET_SLACK_BYTES,
    allocation_guard,
    check_fractal_args,
    ensure_alloc_fits,
)

_BLACK = (0, 0, 0, 255)
_COLORS = tuple((r, g, b, 255) for r, g, b in COLOR_PALETTE_TUPLES)

# list slot plus boxed float per precomputed column coordinate
_BYTES_PER_COLUMN = 40


def render_fractal_bytes(width: int, height: int) -> int:
    """Estimated peak memory of :func:`render_fractal` in bytes."""
    return width * height * 4 + width * _BYTES_PER_COLUMN + WORKING_SET_SLACK_BYTES


def render_fractal(
    width: int,
    height: int,
    center_x: float,
    center_y: float,
    zoom: float,
    max_iterations: int,
) -> NDArray[np.uint8]:
    """Render the Mandelbrot set into a flat RGBA buffer.

    Parameters
    ----------
    width, height : int
        Output size in pixels. Must be > 0.

    center_x, center_y : float
        Complex-plane coordinate at the image center.

    zoom : float
        Magnification, must be > 0.

    max_iterations : int
        Iteration cap, must be >= 1. Pixels reaching the cap are black.

    Returns
    -------
    ndarray
        ``uint8`` array of length ``width * height * 4``.

    """
    width, height, center_x, center_y, zoom, max_iterations = check_fractal_args(
        width, height, center_x, center_y, zoom, max_iterations
    )
    ensure_alloc_fits(render_fractal_bytes(width, height), f"{width}x{height} fractal")

    with allocation_guard(f"{width}x{height} fractal"):
        pixels = bytearray(width * height * 4)

    scale = 4.0 / (width * zoom)
    half_width = width * 0.5
    half_height = height * 0.5
    x_coords = [(px - half_width) * scale + center_x for px in range(width)]

    idx = 0
    for py in range(height):
        y0 = (py - half_height) * scale + center_y
        for x0 in x_coords:
            x = 0.0
            y = 0.0
            x2 = 0.0
            y2 = 0.0
            iteration = 0
            while x2 + y2 <= 4.0 and iteration < max_iterations:
                y = 2.0 * x * y + y0
                x = x2 - y2 + x0
                x2 = x * x
                y2 = y * y
                iteration += 1

            if iteration == max_iterations:
                pixels[idx : idx + 4] = _BLACK
            else:
                pixels[idx : idx + 4] = _COLORS[palette_index(iteration, max_iterations)]
            idx += 4

    return np.frombuffer(pixels, dtype=np.uint8)
