"""Kernel providers and the provider registry.

A provider is any object exposing the seven kernel functions below plus a
``name``. The harness only talks to providers through this interface, so an
alternate implementation (a C extension, a subprocess bridge, a JIT build)
can be compared against the bundled ones without the harness knowing how it
is built.

Usage
-----
>>> from kernelbench.providers import get_provider  # doctest: +SKIP
>>> provider = get_provider("vectorized")  # doctest: +SKIP
>>> provider.count_primes(100)  # doctest: +SKIP
25
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from types import ModuleType
from typing import Any, Protocol, runtime_checkable

from kernelbench.errors import InvalidArgumentError

_LOGGER = logging.getLogger(__name__)

KERNEL_METHODS: tuple[str, ...] = (
    "render_fractal",
    "count_primes",
    "enumerate_primes",
    "multiply_naive",
    "multiply_optimized",
    "box_blur",
    "generate_test_image",
)


@runtime_checkable
class KernelProvider(Protocol):
    name: str

    def render_fractal(
        self,
        width: int,
        height: int,
        center_x: float,
        center_y: float,
        zoom: float,
        max_iterations: int,
    ) -> Any: ...  # noqa: ANN401

    def count_primes(self, limit: int) -> int: ...

    def enumerate_primes(self, limit: int) -> Any: ...  # noqa: ANN401

    def multiply_naive(self, a: Any, b: Any, size: int) -> Any: ...  # noqa: ANN401

    def multiply_optimized(self, a: Any, b: Any, size: int) -> Any: ...  # noqa: ANN401

    def box_blur(self, pixels: Any, width: int, height: int, radius: int) -> Any: ...  # noqa: ANN401

    def generate_test_image(self, width: int, height: int) -> Any: ...  # noqa: ANN401


def missing_capabilities(obj: object) -> list[str]:
    """Return the kernel functions `obj` lacks (empty if it is a full provider)."""
    return [method for method in KERNEL_METHODS if not callable(getattr(obj, method, None))]


@dataclass(frozen=True)
class ModuleProvider:
    """Provider backed by a module that exposes the kernel functions at top level."""

    name: str
    module: ModuleType

    def __post_init__(self) -> None:
        missing = missing_capabilities(self.module)
        if missing:
            raise InvalidArgumentError(
                f"Module {self.module.__name__} cannot act as provider {self.name!r}, "
                f"it is missing: {', '.join(missing)}."
            )

    @classmethod
    def from_module(cls, module_name: str, name: str | None = None) -> ModuleProvider:
        module = importlib.import_module(module_name)
        return cls(name=name or getattr(module, "NAME", module_name), module=module)

    def render_fractal(
        self,
        width: int,
        height: int,
        center_x: float,
        center_y: float,
        zoom: float,
        max_iterations: int,
    ) -> Any:  # noqa: ANN401
        return self.module.render_fractal(width, height, center_x, center_y, zoom, max_iterations)

    def count_primes(self, limit: int) -> int:
        return self.module.count_primes(limit)

    def enumerate_primes(self, limit: int) -> Any:  # noqa: ANN401
        return self.module.enumerate_primes(limit)

    def multiply_naive(self, a: Any, b: Any, size: int) -> Any:  # noqa: ANN401
        return self.module.multiply_naive(a, b, size)

    def multiply_optimized(self, a: Any, b: Any, size: int) -> Any:  # noqa: ANN401
        return self.module.multiply_optimized(a, b, size)

    def box_blur(self, pixels: Any, width: int, height: int, radius: int) -> Any:  # noqa: ANN401
        return self.module.box_blur(pixels, width, height, radius)

    def generate_test_image(self, width: int, height: int) -> Any:  # noqa: ANN401
        return self.module.generate_test_image(width, height)


# NOTE: Keep these factories side-effect free apart from importing the module.
_PROVIDER_FACTORIES: dict[str, Callable[[], KernelProvider]] = {
    "reference": lambda: ModuleProvider.from_module("kernelbench.reference"),
    "vectorized": lambda: ModuleProvider.from_module("kernelbench.vectorized"),
}


def list_providers() -> list[str]:
    return sorted(_PROVIDER_FACTORIES)


def register_provider(
    name: str,
    factory: Callable[[], KernelProvider],
    *,
    overwrite: bool = False,
) -> None:
    """Make a provider available under `name`.

    Parameters
    ----------
    name : str
        Registry key, e.g. ``"numba"``.

    factory : callable
        Zero-argument callable returning the provider. Called on every
        :func:`get_provider` lookup.

    overwrite : bool, optional
        Whether to replace an existing registration.

    """
    if name in _PROVIDER_FACTORIES and not overwrite:
        raise InvalidArgumentError(f"Provider {name!r} is already registered.")
    _PROVIDER_FACTORIES[name] = factory
    _LOGGER.debug("registered provider %s", name)


def unregister_provider(name: str) -> None:
    if _PROVIDER_FACTORIES.pop(name, None) is None:
        raise InvalidArgumentError(f"Unknown provider {name!r}.")


def get_provider(name: str) -> KernelProvider:
    """Instantiate the provider registered under `name`."""
    try:
        factory = _PROVIDER_FACTORIES[name]
    except KeyError:
        raise InvalidArgumentError(
            f"Unknown provider {name!r}. Available: {', '.join(list_providers())}."
        ) from None
    return resolve_provider(factory())


def resolve_provider(provider: str | object) -> KernelProvider:
    """Look up `provider` by name, or check that it is a complete provider object."""
    if isinstance(provider, str):
        return get_provider(provider)
    missing = missing_capabilities(provider)
    if missing:
        raise InvalidArgumentError(
            f"{type(provider).__name__} is not a kernel provider, it is missing: {', '.join(missing)}."
        )
    return provider  # type: ignore[return-value]


def provider_name(provider: object) -> str:
    return str(getattr(provider, "name", type(provider).__name__))


__all__ = [
    "KERNEL_METHODS",
    "KernelProvider",
    "ModuleProvider",
    "get_provider",
    "list_providers",
    "missing_capabilities",
    "provider_name",
    "register_provider",
    "resolve_provider",
    "unregister_provider",
]
