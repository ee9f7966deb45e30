"""Pure-python kernels.

Every kernel is written as explicit loops over flat buffers. This is the
interpreted baseline the vectorized provider is compared against.
"""

from __future__ import annotations

from .blur import box_blur, generate_test_image
from .fractal import render_fractal
from .matrix import multiply_naive, multiply_optimized
from .primes import count_primes, enumerate_primes

NAME = "reference"

__all__ = [
    "NAME",
    "box_blur",
    "count_primes",
    "enumerate_primes",
    "generate_test_image",
    "multiply_naive",
    "multiply_optimized",
    "render_fractal",
]
