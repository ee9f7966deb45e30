"""Kernel parameters and input generation for comparison runs."""

from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Literal, TypeAlias

import numpy as np
from numpy.typing import NDArray

from kernelbench.errors import InvalidArgumentError
from kernelbench.validation import (
    as_pixel_buffer,
    check_image_size,
    check_prime_limit,
    ensure_alloc_fits,
    require_non_negative_int,
    require_positive_int,
)
from kernelbench.viewport import ComplexViewport

KernelName: TypeAlias = Literal["fractal", "primes", "matrix", "blur"]
KERNEL_NAMES: tuple[KernelName, ...] = ("fractal", "primes", "matrix", "blur")


@dataclass(frozen=True, slots=True)
class FractalParams:
    width: int = 800
    height: int = 600
    center_x: float = -0.5
    center_y: float = 0.0
    zoom: float = 1.0
    max_iterations: int = 256

    def viewport(self) -> ComplexViewport:
        return ComplexViewport(
            width=self.width,
            height=self.height,
            center_x=self.center_x,
            center_y=self.center_y,
            zoom=self.zoom,
            max_iterations=self.max_iterations,
        )


@dataclass(frozen=True, slots=True)
class PrimesParams:
    limit: int = 1_000_000
    # time enumerate_primes instead of count_primes
    list_primes: bool = False


@dataclass(frozen=True, slots=True)
class MatrixParams:
    size: int = 128
    optimized: bool = False


@dataclass(frozen=True, slots=True)
class BlurParams:
    width: int = 512
    height: int = 512
    radius: int = 3


KernelParams: TypeAlias = FractalParams | PrimesParams | MatrixParams | BlurParams

_PARAM_TYPES: dict[str, type[Any]] = {
    "fractal": FractalParams,
    "primes": PrimesParams,
    "matrix": MatrixParams,
    "blur": BlurParams,
}


def check_kernel_name(kernel: str) -> KernelName:
    if kernel not in _PARAM_TYPES:
        raise InvalidArgumentError(
            f"Unknown kernel {kernel!r}. Expected one of: {', '.join(KERNEL_NAMES)}."
        )
    return kernel  # type: ignore[return-value]


def coerce_params(kernel: str, params: KernelParams | Mapping[str, Any] | None) -> KernelParams:
    """Return `params` as the parameter dataclass of `kernel`.

    ``None`` gives the defaults, a mapping overrides individual fields.

    """
    param_type = _PARAM_TYPES[check_kernel_name(kernel)]
    if params is None:
        return param_type()
    if isinstance(params, param_type):
        return params
    if isinstance(params, Mapping):
        known = {f.name for f in fields(param_type)}
        unknown = sorted(set(params) - known)
        if unknown:
            raise InvalidArgumentError(
                f"Unknown {kernel} parameter(s): {', '.join(unknown)}. Expected: {', '.join(sorted(known))}."
            )
        return replace(param_type(), **params)
    raise InvalidArgumentError(
        f"Expected {param_type.__name__} or a mapping for kernel {kernel!r}, got {type(params).__name__}."
    )


def params_as_dict(params: KernelParams) -> dict[str, Any]:
    return asdict(params)


def identity_matrix(size: int) -> NDArray[np.float64]:
    """Flat row-major ``size x size`` identity matrix."""
    size = require_positive_int(size, "size")
    ensure_alloc_fits(size * size * 8, f"{size}x{size} matrix")
    return np.eye(size, dtype=np.float64).reshape(-1)


def random_matrix(size: int, seed: int | None = None) -> NDArray[np.float64]:
    """Flat row-major ``size x size`` matrix with values drawn from ``[0, 1)``."""
    size = require_positive_int(size, "size")
    ensure_alloc_fits(size * size * 8, f"{size}x{size} matrix")
    rng = np.random.default_rng(seed)
    return rng.random(size * size, dtype=np.float64)


def _readonly_copy(value: Any) -> Any:  # noqa: ANN401
    if isinstance(value, np.ndarray):
        copied = value.copy()
        copied.flags.writeable = False
        return copied
    return value


@dataclass(frozen=True, slots=True)
class KernelInput:
    """A prepared kernel call: which provider method to invoke, with what.

    Array arguments are read-only, so a provider that tries to modify its
    input in place fails loudly instead of corrupting the other side's run.
    """

    kernel: KernelName
    method: str
    args: tuple[Any, ...]

    def fresh_copy(self) -> KernelInput:
        """Same values, separately owned (and still read-only) arrays."""
        return KernelInput(self.kernel, self.method, tuple(_readonly_copy(arg) for arg in self.args))

    def bind(self, provider: object) -> Callable[[], Any]:
        return functools.partial(getattr(provider, self.method), *self.args)


def prepare_input(
    kernel: str,
    params: KernelParams | Mapping[str, Any] | None = None,
    *,
    seed: int = 42,
    image_source: Callable[[int, int], Any] | None = None,
) -> KernelInput:
    """Validate `params` and generate the input values of one comparison.

    Parameters
    ----------
    kernel : {"fractal", "primes", "matrix", "blur"}
        Kernel to prepare.

    params : dataclass or mapping or None, optional
        Kernel parameters, see :func:`coerce_params`.

    seed : int, optional
        Seed for the random matrices.

    image_source : callable, optional
        ``(width, height) -> pixels`` used to build the blur input. Defaults
        to the vectorized test-image generator.

    Returns
    -------
    KernelInput
        The prepared call. Validation errors are raised here, before any
        provider runs.

    """
    kernel = check_kernel_name(kernel)
    params = coerce_params(kernel, params)

    if isinstance(params, FractalParams):
        return KernelInput(kernel, "render_fractal", params.viewport().as_args())

    if isinstance(params, PrimesParams):
        limit = check_prime_limit(params.limit)
        method = "enumerate_primes" if params.list_primes else "count_primes"
        return KernelInput(kernel, method, (limit,))

    if isinstance(params, MatrixParams):
        size = require_positive_int(params.size, "size")
        a = random_matrix(size, seed)
        b = random_matrix(size, seed + 1)
        method = "multiply_optimized" if params.optimized else "multiply_naive"
        a.flags.writeable = False
        b.flags.writeable = False
        return KernelInput(kernel, method, (a, b, size))

    width, height = check_image_size(params.width, params.height)
    radius = require_non_negative_int(params.radius, "radius")
    if image_source is None:
        from kernelbench.vectorized import generate_test_image as image_source
    image = as_pixel_buffer(image_source(width, height), width, height)
    return KernelInput(kernel, "box_blur", (_readonly_copy(image), width, height, radius))


__all__ = [
    "KERNEL_NAMES",
    "BlurParams",
    "FractalParams",
    "KernelInput",
    "KernelName",
    "KernelParams",
    "MatrixParams",
    "PrimesParams",
    "check_kernel_name",
    "coerce_params",
    "identity_matrix",
    "params_as_dict",
    "prepare_input",
    "random_matrix",
]
