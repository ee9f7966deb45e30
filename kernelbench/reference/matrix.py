"""Square matrix multiplication with plain python loops."""

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

# float64 operand copies, two operand lists, the transpose and result lists
# (slot plus boxed float each) and the returned array
_BYTES_PER_ELEMENT = 144


def multiply_bytes(size: int) -> int:
    """Estimated peak memory of :func:`multiply_naive` / :func:`multiply_optimized` in bytes."""
    return size * size * _BYTES_PER_ELEMENT + WORKING_SET_SLACK_BYTES


def multiply_naive(a: Any, b: Any, size: int) -> NDArray[np.float64]:  # noqa: ANN401
    """Multiply two flat row-major ``size x size`` matrices (i, j, k loop order)."""
    arr_a, arr_b, size = check_matrix_operands(a, b, size)
    ensure_alloc_fits(multiply_bytes(size), f"{size}x{size} matrix product")
    lhs = arr_a.tolist()
    rhs = arr_b.tolist()

    with allocation_guard(f"{size}x{size} matrix product"):
        result = [0.0] * (size * size)

    for i in range(size):
        row = i * size
        for j in range(size):
            total = 0.0
            for k in range(size):
                total += lhs[row + k] * rhs[k * size + j]
            result[row + j] = total

    return np.array(result, dtype=np.float64)


def multiply_optimized(a: Any, b: Any, size: int) -> NDArray[np.float64]:  # noqa: ANN401
    """Multiply two flat matrices after transposing `b`.

    With ``b`` transposed both operands of every inner product are read
    sequentially. The summation order is the same as in :func:`multiply_naive`.

    """
    arr_a, arr_b, size = check_matrix_operands(a, b, size)
    ensure_alloc_fits(multiply_bytes(size), f"{size}x{size} matrix product")
    lhs = arr_a.tolist()
    rhs = arr_b.tolist()

    with allocation_guard(f"{size}x{size} matrix product"):
        rhs_t = [0.0] * (size * size)
        result = [0.0] * (size * size)

    for i in range(size):
        for j in range(size):
            rhs_t[j * size + i] = rhs[i * size + j]

    for i in range(size):
        row = lhs[i * size : (i + 1) * size]
        for j in range(size):
            col = rhs_t[j * size : (j + 1) * size]
            total = 0.0
            for x, y in zip(row, col):
                total += x * y
            result[i * size + j] = total

    return np.array(result, dtype=np.float64)
