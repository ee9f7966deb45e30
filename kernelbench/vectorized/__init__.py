"""NumPy / OpenCV kernels.

Same contract as :mod:`kernelbench.reference`: identical preconditions,
byte-identical pixel buffers and prime lists, matrix products within 1e-9
relative error.
"""

from __future__ import annotations

from .blur import box_blur, generate_test_image
from .fractal import escape_counts, render_fractal
from .matrix import multiply_naive, multiply_optimized
from .primes import count_primes, enumerate_primes, sieve_bits

NAME = "vectorized"

__all__ = [
    "NAME",
    "box_blur",
    "count_primes",
    "enumerate_primes",
    "escape_counts",
    "generate_test_image",
    "multiply_naive",
    "multiply_optimized",
    "render_fractal",
    "sieve_bits",
]
