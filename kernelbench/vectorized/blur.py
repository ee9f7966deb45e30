"""Box blur and test-pattern generation with NumPy and OpenCV.

The blur uses an unnormalized ``cv2.boxFilter`` with replicated borders to get
exact per-window channel sums; integer division by the window area then gives
the same truncated mean as the scalar implementation.
"""

from __future__ import annotations

import math
from typing import Any

import cv2
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

# int64 coordinate sums, float64 quotients and distances, boolean masks
_TEST_IMAGE_BYTES_PER_PIXEL = 40
# owned uint8 copy, float64 window sums, int64 means, uint8 output
_BLUR_BYTES_PER_PIXEL = 80


def generate_test_image_bytes(width: int, height: int) -> int:
    """Estimated peak memory of :func:`generate_test_image` in bytes."""
    return width * height * _TEST_IMAGE_BYTES_PER_PIXEL + WORKING_SET_SLACK_BYTES


def box_blur_bytes(width: int, height: int, radius: int) -> int:
    """Estimated peak memory of :func:`box_blur` in bytes."""
    if radius == 0:
        return width * height * 4 + WORKING_SET_SLACK_BYTES
    return width * height * _BLUR_BYTES_PER_PIXEL + WORKING_SET_SLACK_BYTES


def generate_test_image(width: int, height: int) -> NDArray[np.uint8]:
    """Generate the deterministic RGBA test pattern.

    Byte-identical to :func:`kernelbench.reference.generate_test_image`.

    """
    width, height = check_image_size(width, height)
    ensure_alloc_fits(generate_test_image_bytes(width, height), f"{width}x{height} test image")

    xs = np.arange(width, dtype=np.int64)
    ys = np.arange(height, dtype=np.int64)
    cx = width / 2
    cy = height / 2
    radius = math.sqrt(cx * cx + cy * cy) * 0.3

    with allocation_guard(f"{width}x{height} test image"):
        image = np.empty((height, width, 4), dtype=np.uint8)
        coord_sum = xs[np.newaxis, :] + ys[:, np.newaxis]

        image[..., 0] = ((xs / width) * 255).astype(np.uint8)[np.newaxis, :]
        image[..., 1] = ((ys / height) * 255).astype(np.uint8)[:, np.newaxis]
        image[..., 2] = ((coord_sum / (width + height)) * 255).astype(np.uint8)
        image[..., 3] = 255

        dx = xs - cx
        dy = ys - cy
        dist = np.sqrt((dx * dx)[np.newaxis, :] + (dy * dy)[:, np.newaxis])
        disc = dist < radius
        stripes = ~disc & (coord_sum % 40 < 3)

    image[disc, :3] = 255
    image[stripes, :3] = 50
    return image.reshape(-1)


def box_blur(pixels: Any, width: int, height: int, radius: int) -> NDArray[np.uint8]:  # noqa: ANN401
    """Blur an RGBA image with a ``(2*radius+1)**2`` box kernel.

    See :func:`kernelbench.reference.box_blur` for the semantics. The input
    is never written to.

    """
    width, height = check_image_size(width, height)
    radius = require_non_negative_int(radius, "radius")
    src = as_pixel_buffer(pixels, width, height)
    ensure_alloc_fits(box_blur_bytes(width, height, radius), f"{width}x{height} blur")

    if radius == 0:
        return src.copy()

    ksize = 2 * radius + 1
    area = ksize * ksize
    # cv2 wants an owned, contiguous array; the input may be a read-only view
    image = src.reshape(height, width, 4).copy()

    with allocation_guard(f"{width}x{height} blur output"):
        sums = cv2.boxFilter(
            image,
            ddepth=cv2.CV_64F,
            ksize=(ksize, ksize),
            normalize=False,
            borderType=cv2.BORDER_REPLICATE,
        )
        np.rint(sums, out=sums)
        blurred = sums.astype(np.int64)
        del sums
        blurred //= area
        return blurred.astype(np.uint8).reshape(-1)
