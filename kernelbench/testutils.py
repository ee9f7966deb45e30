"""Helpers for kernelbench tests.

Independent (slow, obviously correct) implementations to check the kernels
against, and fake providers/clocks for harness tests.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

import numpy as np
from numpy.typing import NDArray

from kernelbench.providers import get_provider, list_providers


def trial_division_primes(limit: int) -> list[int]:
    """All primes ``<= limit`` by trial division."""
    primes: list[int] = []
    for candidate in range(2, limit + 1):
        if all(candidate % p for p in primes if p * p <= candidate):
            primes.append(candidate)
    return primes


def numpy_matmul(a: Any, b: Any, size: int) -> NDArray[np.float64]:  # noqa: ANN401
    lhs = np.asarray(a, dtype=np.float64).reshape(size, size)
    rhs = np.asarray(b, dtype=np.float64).reshape(size, size)
    return (lhs @ rhs).reshape(-1)


def all_providers() -> list[Any]:
    return [get_provider(name) for name in list_providers()]


class StepTimer:
    """Fake monotonic clock.

    Each timed call consumes two readings (start, end); the elapsed time of
    call ``i`` is ``durations[i]``.
    """

    def __init__(self, durations: Iterable[float]) -> None:
        self._readings: list[float] = []
        now = 0.0
        for duration in durations:
            self._readings.extend((now, now + duration))
            now += duration
        self.calls = 0

    def __call__(self) -> float:
        value = self._readings[self.calls]
        self.calls += 1
        return value


class RecordingProvider:
    """Provider wrapper that records the order of kernel calls.

    Optionally replaces a single method with `override`.
    """

    def __init__(
        self,
        inner: Any,  # noqa: ANN401
        log: list[str],
        *,
        name: str | None = None,
        override: tuple[str, Callable[..., Any]] | None = None,
    ) -> None:
        self._inner = inner
        self._log = log
        self._override = override
        self.name = name or inner.name

    def __getattr__(self, attr: str) -> Any:  # noqa: ANN401
        if attr.startswith("_"):
            raise AttributeError(attr)
        target = getattr(self._inner, attr)
        if self._override is not None and self._override[0] == attr:
            target = self._override[1]
        if not callable(target):
            return target

        def _call(*args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
            self._log.append(f"{self.name}.{attr}")
            return target(*args, **kwargs)

        return _call
