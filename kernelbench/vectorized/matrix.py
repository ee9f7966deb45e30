"""Square matrix multiplication on NumPy rows and columns."""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray

from kernelbench.validation import (
    WORKING_SET_SLACK_BYTES,
    allocation_guard,
    check_matrix_operands,
    ensure_alloc_fits,
)

# float64 operand copies, the transpose, the result and a spare row
_BYTES_PER_ELEMENT = 40


def multiply_bytes(size: int) -> int:
    """Estimated peak memory of :func:`multiply_naive` / :func:`multiply_optimized` in bytes."""
    return size * size * _BYTES_PER_ELEMENT + WORKING_SET_SLACK_BYTES


def multiply_naive(a: Any, b: Any, size: int) -> NDArray[np.float64]:  # noqa: ANN401
    """Multiply two flat row-major matrices one output element at a time.

    Each element is the dot product of a row of `a` with a strided column of
    `b`.

    """
    arr_a, arr_b, size = check_matrix_operands(a, b, size)
    ensure_alloc_fits(multiply_bytes(size), f"{size}x{size} matrix product")
    lhs = arr_a.reshape(size, size)
    rhs = arr_b.reshape(size, size)

    with allocation_guard(f"{size}x{size} matrix product"):
        result = np.empty((size, size), dtype=np.float64)

    for i in range(size):
        row = lhs[i]
        for j in range(size):
            result[i, j] = np.dot(row, rhs[:, j])
    return result.reshape(-1)


def multiply_optimized(a: Any, b: Any, size: int) -> NDArray[np.float64]:  # noqa: ANN401
    """Multiply two flat row-major matrices after transposing `b`.

    The transpose is materialized as a C-contiguous array, so each output row
    is a product of contiguous rows only.

    """
    arr_a, arr_b, size = check_matrix_operands(a, b, size)
    ensure_alloc_fits(multiply_bytes(size), f"{size}x{size} matrix product")
    lhs = arr_a.reshape(size, size)

    with allocation_guard(f"{size}x{size} matrix product"):
        rhs_t = np.ascontiguousarray(arr_b.reshape(size, size).T)
        result = np.empty((size, size), dtype=np.float64)

    for i in range(size):
        result[i] = rhs_t @ lhs[i]
    return result.reshape(-1)
