"""Box blur and test-pattern generation with plain python loops."""

from __future__ import annotations

import math
from typing import Any

import numpy as np
from numpy.typing import NDArray

from kernelbench.validation import (
    WORKING_SET_SLACK_BYTES,
    allocation_guard,
    as_pixel_buffer,
    check_image_size,
    ensure_alloc_fits,
    require_non_negative_int,
)

# list object plus one slot and boxed int per clamped offset
_OFFSET_LIST_BYTES = 64
_BYTES_PER_OFFSET = 40


def generate_test_image_bytes(width: int, height: int) -> int:
    """Estimated peak memory of :func:`generate_test_image` in bytes."""
    return width * height * 4 + WORKING_SET_SLACK_BYTES


def box_blur_bytes(width: int, height: int, radius: int) -> int:
    """Estimated peak memory of :func:`box_blur` in bytes.

    A byte copy of the source and the output buffer, plus one list of
    clamped offsets per column and per row.
    """
    if radius == 0:
        return width * height * 4 + WORKING_SET_SLACK_BYTES
    ksize = 2 * radius + 1
    offsets = (width + height) * (_OFFSET_LIST_BYTES + ksize * _BYTES_PER_OFFSET)
    return width * height * 8 + offsets + WORKING_SET_SLACK_BYTES


def generate_test_image(width: int, height: int) -> NDArray[np.uint8]:
    """Generate the deterministic RGBA test pattern.

    A color gradient, overdrawn with a white disc in the center and dark
    diagonal stripes. The output depends only on `width` and `height`.

    """
    width, height = check_image_size(width, height)
    ensure_alloc_fits(generate_test_image_bytes(width, height), f"{width}x{height} test image")
    with allocation_guard(f"{width}x{height} test image"):
        pixels = bytearray(width * height * 4)

    cx = width / 2
    cy = height / 2
    radius = math.sqrt(cx * cx + cy * cy) * 0.3

    idx = 0
    for y in range(height):
        dy = y - cy
        g = int((y / height) * 255)
        for x in range(width):
            dx = x - cx
            if math.sqrt(dx * dx + dy * dy) < radius:
                pixels[idx : idx + 4] = (255, 255, 255, 255)
            elif (x + y) % 40 < 3:
                pixels[idx : idx + 4] = (50, 50, 50, 255)
            else:
                r = int((x / width) * 255)
                b = int(((x + y) / (width + height)) * 255)
                pixels[idx : idx + 4] = (r, g, b, 255)
            idx += 4

    return np.frombuffer(pixels, dtype=np.uint8)


def box_blur(pixels: Any, width: int, height: int, radius: int) -> NDArray[np.uint8]:  # noqa: ANN401
    """Blur an RGBA image with a ``(2*radius+1)**2`` box kernel.

    Samples outside the image are clamped to the nearest edge pixel. Each
    output channel is the truncated mean of its window. ``radius=0`` returns
    a copy of the input.

    """
    width, height = check_image_size(width, height)
    radius = require_non_negative_int(radius, "radius")
    src = as_pixel_buffer(pixels, width, height)
    ensure_alloc_fits(box_blur_bytes(width, height, radius), f"{width}x{height} blur")

    if radius == 0:
        return src.copy()

    data = src.tobytes()
    with allocation_guard(f"{width}x{height} blur output"):
        out = bytearray(len(data))

    area = (2 * radius + 1) ** 2
    offsets = range(-radius, radius + 1)
    # clamped byte offsets of every column / row a window can touch
    col_offsets = [[min(max(x + k, 0), width - 1) * 4 for k in offsets] for x in range(width)]
    row_offsets = [[min(max(y + k, 0), height - 1) * width * 4 for k in offsets] for y in range(height)]

    idx = 0
    for y in range(height):
        rows = row_offsets[y]
        for x in range(width):
            cols = col_offsets[x]
            r = g = b = a = 0
            for row in rows:
                for col in cols:
                    src_idx = row + col
                    r += data[src_idx]
                    g += data[src_idx + 1]
                    b += data[src_idx + 2]
                    a += data[src_idx + 3]
            out[idx] = r // area
            out[idx + 1] = g // area
            out[idx + 2] = b // area
            out[idx + 3] = a // area
            idx += 4

    return np.frombuffer(out, dtype=np.uint8)
