"""Escape-time fractal rendering on whole NumPy arrays.

All still-bounded pixels advance one iteration per step. Escaped pixels are
dropped from the working set, so late iterations only touch the points that
are still inside the bailout radius.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from kernelbench.palette import COLOR_PALETTE, PALETTE_SIZE
from kernelbench.validation import (
    WORKING_SET_SLACK_BYTES,
    allocation_guard,
    check_fractal_args,
    ensure_alloc_fits,
)

# Coordinates, iterates and their squares, counts and active indices, plus
# the filtered copies that exist while escaped pixels are dropped.
_BYTES_PER_PIXEL = 112


def render_fractal_bytes(width: int, height: int) -> int:
    """Estimated peak memory of :func:`render_fractal` in bytes."""
    return width * height * _BYTES_PER_PIXEL + WORKING_SET_SLACK_BYTES


def escape_counts(
    width: int,
    height: int,
    center_x: float,
    center_y: float,
    zoom: float,
    max_iterations: int,
) -> NDArray[np.int64]:
    """Return the escape iteration count of every pixel, row-major.

    Arguments are expected to be validated already.

    """
    scale = 4.0 / (width * zoom)
    half_width = width * 0.5
    half_height = height * 0.5

    xs = (np.arange(width, dtype=np.float64) - half_width) * scale + center_x
    ys = (np.arange(height, dtype=np.float64) - half_height) * scale + center_y
    x0 = np.tile(xs, height)
    y0 = np.repeat(ys, width)

    n_pixels = width * height
    counts = np.zeros(n_pixels, dtype=np.int64)
    active = np.arange(n_pixels)
    x = np.zeros(n_pixels, dtype=np.float64)
    y = np.zeros(n_pixels, dtype=np.float64)
    x2 = np.zeros(n_pixels, dtype=np.float64)
    y2 = np.zeros(n_pixels, dtype=np.float64)

    for _ in range(max_iterations):
        bounded = x2 + y2 <= 4.0
        if not bounded.all():
            active = active[bounded]
            if active.size == 0:
                break
            x, y, x2, y2 = x[bounded], y[bounded], x2[bounded], y2[bounded]
            x0, y0 = x0[bounded], y0[bounded]

        # same operation order as the scalar loop, results are bit-identical
        y = 2.0 * x * y + y0
        x = x2 - y2 + x0
        x2 = x * x
        y2 = y * y
        counts[active] += 1

    return counts


def render_fractal(
    width: int,
    height: int,
    center_x: float,
    center_y: float,
    zoom: float,
    max_iterations: int,
) -> NDArray[np.uint8]:
    """Render the Mandelbrot set into a flat RGBA buffer.

    See :func:`kernelbench.reference.render_fractal` for the parameters.

    """
    width, height, center_x, center_y, zoom, max_iterations = check_fractal_args(
        width, height, center_x, center_y, zoom, max_iterations
    )
    ensure_alloc_fits(render_fractal_bytes(width, height), f"{width}x{height} fractal")

    with allocation_guard(f"{width}x{height} fractal"):
        counts = escape_counts(width, height, center_x, center_y, zoom, max_iterations)
        pixels = np.zeros((width * height, 4), dtype=np.uint8)

    escaped = counts < max_iterations
    slots = np.minimum(counts[escaped] * PALETTE_SIZE // max_iterations, PALETTE_SIZE - 1)
    pixels[escaped, :3] = COLOR_PALETTE[slots]
    pixels[:, 3] = 255
    return pixels.reshape(-1)
