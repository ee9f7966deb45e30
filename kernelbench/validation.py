"""Helper functions to validate kernel arguments and produce error messages.

Every provider runs its arguments through these helpers before allocating
anything, so a failing call never returns (or leaves behind) a partially
written buffer. The `check_*` helpers only validate types, ranges and shapes;
each kernel compares its own working-set estimate against the allocation
budget with :func:`ensure_alloc_fits`.
"""

from __future__ import annotations

import contextlib
import math
import os
from collections.abc import Iterator
from typing import Any

import numpy as np
from numpy.typing import NDArray

from kernelbench.errors import (
    InvalidArgumentError,
    ResourceExhaustedError,
    ShapeMismatchError,
)

_DEFAULT_MAX_ALLOC_BYTES = 2 * 1024**3

# Added to every working-set estimate for interpreter objects, numpy buffers
# and other allocations that do not scale with the input.
WORKING_SET_SLACK_BYTES = 256 * 1024


def max_alloc_bytes() -> int:
    """Return the allocation budget for a single kernel call in bytes.

    Read from ``KERNELBENCH_MAX_ALLOC_BYTES`` on every call, defaults to 2 GiB.

    """
    raw = os.getenv("KERNELBENCH_MAX_ALLOC_BYTES", "").strip()
    if not raw:
        return _DEFAULT_MAX_ALLOC_BYTES
    try:
        value = int(raw)
    except ValueError as exc:
        raise InvalidArgumentError(
            f"KERNELBENCH_MAX_ALLOC_BYTES must be an integer, got {raw!r}."
        ) from exc
    if value <= 0:
        raise InvalidArgumentError(f"KERNELBENCH_MAX_ALLOC_BYTES must be > 0, got {value}.")
    return value


def is_integer(value: Any) -> bool:  # noqa: ANN401
    """Check whether `value` is an integer (``bool`` does not count)."""
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


def require_int(value: Any, name: str, *, minimum: int | None = None) -> int:  # noqa: ANN401
    """Return `value` as ``int`` or raise :class:`InvalidArgumentError`.

    Parameters
    ----------
    value : int
        The value to check.

    name : str
        Argument name used in the error message.

    minimum : None or int, optional
        If given, the smallest accepted value.

    Returns
    -------
    int
        `value` converted to a python ``int``.

    """
    if not is_integer(value):
        raise InvalidArgumentError(f"{name} must be an integer, got {type(value).__name__}.")
    value = int(value)
    if minimum is not None and value < minimum:
        raise InvalidArgumentError(f"{name} must be >= {minimum}, got {value}.")
    return value


def require_positive_int(value: Any, name: str) -> int:  # noqa: ANN401
    return require_int(value, name, minimum=1)


def require_non_negative_int(value: Any, name: str) -> int:  # noqa: ANN401
    return require_int(value, name, minimum=0)


def require_finite_float(value: Any, name: str) -> float:  # noqa: ANN401
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise InvalidArgumentError(f"{name} must be a number, got {type(value).__name__}.")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidArgumentError(f"{name} must be finite, got {value}.")
    return value


def ensure_alloc_fits(nbytes: int, what: str) -> None:
    """Raise :class:`ResourceExhaustedError` if `nbytes` exceeds the budget."""
    budget = max_alloc_bytes()
    if nbytes > budget:
        raise ResourceExhaustedError(
            f"{what} needs {nbytes} bytes, which exceeds the allocation budget of "
            f"{budget} bytes (KERNELBENCH_MAX_ALLOC_BYTES)."
        )


@contextlib.contextmanager
def allocation_guard(what: str) -> Iterator[None]:
    """Report allocator failures inside the block as :class:`ResourceExhaustedError`."""
    try:
        yield
    except ResourceExhaustedError:
        raise
    except MemoryError as exc:
        raise ResourceExhaustedError(f"Could not allocate memory for {what}.") from exc


def as_pixel_buffer(pixels: Any, width: int, height: int) -> NDArray[np.uint8]:  # noqa: ANN401
    """Convert `pixels` to a flat ``uint8`` view and check its length.

    Parameters
    ----------
    pixels : bytes-like or ndarray
        RGBA pixel data. ``bytes``, ``bytearray`` and ``memoryview`` are
        wrapped without copying. Arrays must have dtype ``uint8``.

    width : int
        Image width in pixels.

    height : int
        Image height in pixels.

    Returns
    -------
    ndarray
        One-dimensional ``uint8`` array of length ``width * height * 4``.
        This may be a view of the input, callers must not write to it.

    """
    if isinstance(pixels, (bytes, bytearray, memoryview)):
        arr = np.frombuffer(pixels, dtype=np.uint8)
    else:
        arr = np.asarray(pixels)
        if arr.dtype != np.uint8:
            raise InvalidArgumentError(f"Expected pixel buffer of dtype uint8, got {arr.dtype.name}.")
        arr = arr.reshape(-1)

    expected = width * height * 4
    if arr.size != expected:
        raise ShapeMismatchError(
            f"Expected pixel buffer of length {expected} for a {width}x{height} RGBA image, "
            f"got {arr.size}."
        )
    return arr


def as_square_matrix(values: Any, size: int, name: str) -> NDArray[np.float64]:  # noqa: ANN401
    """Convert `values` to a flat ``float64`` array of length ``size**2``."""
    try:
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise InvalidArgumentError(f"{name} must be a sequence of numbers.") from exc
    if arr.size != size * size:
        raise ShapeMismatchError(
            f"{name} must have size*size = {size * size} elements for size={size}, got {arr.size}."
        )
    return arr


def check_matrix_operands(
    a: Any,  # noqa: ANN401
    b: Any,  # noqa: ANN401
    size: Any,  # noqa: ANN401
) -> tuple[NDArray[np.float64], NDArray[np.float64], int]:
    """Validate the operands of a square matrix multiplication.

    Returns
    -------
    tuple of ndarray, ndarray, int
        Flat ``float64`` versions of `a` and `b` and `size` as ``int``.

    """
    size = require_positive_int(size, "size")
    arr_a = as_square_matrix(a, size, "a")
    arr_b = as_square_matrix(b, size, "b")
    return arr_a, arr_b, size


def check_image_size(width: Any, height: Any) -> tuple[int, int]:  # noqa: ANN401
    width = require_positive_int(width, "width")
    height = require_positive_int(height, "height")
    return width, height


def check_fractal_args(
    width: Any,  # noqa: ANN401
    height: Any,  # noqa: ANN401
    center_x: Any,  # noqa: ANN401
    center_y: Any,  # noqa: ANN401
    zoom: Any,  # noqa: ANN401
    max_iterations: Any,  # noqa: ANN401
) -> tuple[int, int, float, float, float, int]:
    """Validate the arguments of ``render_fractal`` and normalize their types."""
    width, height = check_image_size(width, height)
    center_x = require_finite_float(center_x, "center_x")
    center_y = require_finite_float(center_y, "center_y")
    zoom = require_finite_float(zoom, "zoom")
    if zoom <= 0.0:
        raise InvalidArgumentError(f"zoom must be > 0, got {zoom}.")
    max_iterations = require_positive_int(max_iterations, "max_iterations")
    return width, height, center_x, center_y, zoom, max_iterations


def check_prime_limit(limit: Any) -> int:  # noqa: ANN401
    """Validate a sieve limit. Any integer is accepted, limits below 2 yield no primes."""
    return require_int(limit, "limit")


def prime_count_upper_bound(limit: int) -> int:
    """Upper bound on the number of primes ``<= limit``.

    Uses ``pi(x) < 1.25506 * x / ln(x)`` (Rosser and Schoenfeld), valid for ``x > 1``.

    """
    if limit < 2:
        return 0
    return int(1.25506 * limit / math.log(limit)) + 1


__all__ = [
    "WORKING_SET_SLACK_BYTES",
    "allocation_guard",
    "as_pixel_buffer",
    "as_square_matrix",
    "check_fractal_args",
    "check_image_size",
    "check_matrix_operands",
    "check_prime_limit",
    "ensure_alloc_fits",
    "is_integer",
    "max_alloc_bytes",
    "prime_count_upper_bound",
    "require_finite_float",
    "require_int",
    "require_non_negative_int",
    "require_positive_int",
]
