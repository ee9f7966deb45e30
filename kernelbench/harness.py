"""Head-to-head timing of two kernel providers.

One comparison run is strictly sequential::

    generate input -> provider A x iterations -> provider B x iterations -> verdict

Every call is timed on its own and every call counts (there is no warm-up
phase). Both providers get their own read-only copy of the same input values.
A kernel error aborts the run and propagates unchanged; no verdict is
produced for a failed run.
"""

from __future__ import annotations

import logging
import math
import os
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

import numpy as np
from tqdm import tqdm

from kernelbench.errors import InvalidArgumentError, ResultMismatchError
from kernelbench.inputs import (
    KernelInput,
    KernelName,
    KernelParams,
    coerce_params,
    params_as_dict,
    prepare_input,
)
from kernelbench.providers import KernelProvider, provider_name, resolve_provider
from kernelbench.validation import require_positive_int

_LOGGER = logging.getLogger(__name__)

TIE_THRESHOLD_PERCENT = 5.0
MATRIX_RTOL = 1e-9

Winner = Literal["a", "b", "tie"]
Phase = Literal["generate", "run_a", "run_b", "aggregate"]


def _log_timings_enabled() -> bool:
    value = os.getenv("KERNELBENCH_LOG_TIMINGS", "0").strip().lower()
    return value in {"1", "true", "yes"}


@dataclass(frozen=True, slots=True)
class TimingStats:
    total_s: float
    avg_s: float
    min_s: float
    max_s: float
    std_s: float
    p50_s: float
    p95_s: float


def timing_stats(samples_s: np.ndarray) -> TimingStats:
    return TimingStats(
        total_s=float(np.sum(samples_s)),
        avg_s=float(np.mean(samples_s)),
        min_s=float(np.min(samples_s)),
        max_s=float(np.max(samples_s)),
        std_s=float(np.std(samples_s)),
        p50_s=float(np.percentile(samples_s, 50)),
        p95_s=float(np.percentile(samples_s, 95)),
    )


@dataclass(frozen=True, slots=True)
class BenchmarkSample:
    """Per-call elapsed times of one provider on one input, in call order."""

    provider: str
    times_s: tuple[float, ...]

    def __post_init__(self) -> None:
        if not self.times_s:
            raise InvalidArgumentError("A benchmark sample needs at least one measurement.")

    @property
    def iterations(self) -> int:
        return len(self.times_s)

    @property
    def stats(self) -> TimingStats:
        return timing_stats(np.asarray(self.times_s, dtype=np.float64))

    @property
    def total_s(self) -> float:
        return math.fsum(self.times_s)

    @property
    def avg_s(self) -> float:
        return math.fsum(self.times_s) / len(self.times_s)

    @property
    def min_s(self) -> float:
        return min(self.times_s)

    @property
    def max_s(self) -> float:
        return max(self.times_s)

    def as_dict(self) -> dict[str, Any]:
        stats = self.stats
        return {
            "provider": self.provider,
            "iterations": self.iterations,
            "times_s": list(self.times_s),
            "total_time_s": stats.total_s,
            "avg_time_s": self.avg_s,
            "min_time_s": self.min_s,
            "max_time_s": self.max_s,
            "std_time_s": stats.std_s,
            "p50_time_s": stats.p50_s,
            "p95_time_s": stats.p95_s,
        }


@dataclass(frozen=True, slots=True)
class ComparisonVerdict:
    """Outcome of comparing two samples.

    Attributes
    ----------
    winner : {"a", "b", "tie"}
        The side with the lower average time, or ``"tie"`` when the averages
        are within :data:`TIE_THRESHOLD_PERCENT` of each other.
    percent_difference : float
        ``(avg_a - avg_b) / avg_a * 100``. Positive means B was faster.
    speedup : float
        ``avg_slower / avg_faster``.
    """

    winner: Winner
    percent_difference: float
    speedup: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "winner": self.winner,
            "percent_difference": self.percent_difference,
            "speedup": self.speedup,
        }


@dataclass(frozen=True, slots=True)
class ComparisonResult:
    kernel: KernelName
    params: KernelParams
    sample_a: BenchmarkSample
    sample_b: BenchmarkSample
    verdict: ComparisonVerdict

    def as_dict(self) -> dict[str, Any]:
        return {
            "kernel": self.kernel,
            "params": params_as_dict(self.params),
            "provider_a": self.sample_a.as_dict(),
            "provider_b": self.sample_b.as_dict(),
            "verdict": self.verdict.as_dict(),
        }


def compare_samples(sample_a: BenchmarkSample, sample_b: BenchmarkSample) -> ComparisonVerdict:
    """Decide which sample is faster.

    A relative difference below 5% of A's average is a tie. A zero average
    on side A (timer too coarse) is treated as infinitely faster than any
    positive B average, and two zero averages tie.

    """
    avg_a = sample_a.avg_s
    avg_b = sample_b.avg_s
    faster, slower = min(avg_a, avg_b), max(avg_a, avg_b)

    if avg_a <= 0.0:
        if avg_b <= 0.0:
            return ComparisonVerdict(winner="tie", percent_difference=0.0, speedup=1.0)
        return ComparisonVerdict(winner="a", percent_difference=-math.inf, speedup=math.inf)

    percent_difference = (avg_a - avg_b) / avg_a * 100.0
    speedup = slower / faster if faster > 0.0 else math.inf

    if abs(percent_difference) < TIE_THRESHOLD_PERCENT:
        winner: Winner = "tie"
    elif avg_b < avg_a:
        winner = "b"
    else:
        winner = "a"
    return ComparisonVerdict(winner=winner, percent_difference=percent_difference, speedup=speedup)


def _iter_with_progress(n: int, *, desc: str, enabled: bool) -> Iterable[int]:
    return tqdm(range(n), desc=desc, leave=False, dynamic_ncols=True, disable=not enabled)


def measure(
    provider: KernelProvider,
    kernel_input: KernelInput,
    iterations: int,
    *,
    timer: Callable[[], float] = time.perf_counter,
    progress: bool = False,
) -> BenchmarkSample:
    """Call `provider` on `kernel_input` exactly `iterations` times and time each call."""
    iterations = require_positive_int(iterations, "iterations")
    name = provider_name(provider)
    call = kernel_input.bind(provider)
    log_timings = _log_timings_enabled()

    times_s: list[float] = []
    for i in _iter_with_progress(iterations, desc=f"{kernel_input.kernel} {name}", enabled=progress):
        start = timer()
        call()
        elapsed = timer() - start
        times_s.append(elapsed)
        if log_timings:
            _LOGGER.debug("%s %s iteration %d: %.6fs", kernel_input.kernel, name, i, elapsed)
    return BenchmarkSample(provider=name, times_s=tuple(times_s))


def _notify(on_phase: Callable[[Phase], None] | None, phase: Phase) -> None:
    if on_phase is not None:
        on_phase(phase)


def run_comparison(
    kernel: str,
    params: KernelParams | Mapping[str, Any] | None = None,
    iterations: int = 10,
    provider_a: str | KernelProvider = "reference",
    provider_b: str | KernelProvider = "vectorized",
    *,
    seed: int = 42,
    timer: Callable[[], float] = time.perf_counter,
    on_phase: Callable[[Phase], None] | None = None,
    progress: bool = False,
) -> ComparisonResult:
    """Time two providers on the same input and compare them.

    Parameters
    ----------
    kernel : {"fractal", "primes", "matrix", "blur"}
        Kernel to benchmark.

    params : dataclass or mapping or None, optional
        Kernel parameters, see :func:`kernelbench.inputs.coerce_params`.

    iterations : int, optional
        Number of timed calls per provider. Must be >= 1.

    provider_a, provider_b : str or KernelProvider, optional
        Registered provider names or provider objects.

    seed : int, optional
        Seed for random inputs (matrices).

    timer : callable, optional
        Monotonic clock returning seconds.

    on_phase : callable, optional
        Called with the phase name before each phase. This is a scheduling
        point for an observer (e.g. to refresh a UI); it runs on the calling
        thread and cannot overlap with a kernel call.

    progress : bool, optional
        Show a ``tqdm`` progress bar per provider.

    Returns
    -------
    ComparisonResult
        Both samples and the verdict.

    """
    iterations = require_positive_int(iterations, "iterations")
    side_a = resolve_provider(provider_a)
    side_b = resolve_provider(provider_b)
    params = coerce_params(kernel, params)

    _notify(on_phase, "generate")
    kernel_input = prepare_input(kernel, params, seed=seed, image_source=side_a.generate_test_image)

    samples: list[BenchmarkSample] = []
    for phase, provider in (("run_a", side_a), ("run_b", side_b)):
        _notify(on_phase, phase)  # type: ignore[arg-type]
        try:
            samples.append(
                measure(provider, kernel_input.fresh_copy(), iterations, timer=timer, progress=progress)
            )
        except Exception as exc:
            _LOGGER.warning(
                "%s comparison aborted: provider %s failed with %r",
                kernel,
                provider_name(provider),
                exc,
            )
            raise

    _notify(on_phase, "aggregate")
    sample_a, sample_b = samples
    verdict = compare_samples(sample_a, sample_b)
    _LOGGER.info(
        "%s: %s avg=%.6fs, %s avg=%.6fs, winner=%s (%.1f%%)",
        kernel,
        sample_a.provider,
        sample_a.avg_s,
        sample_b.provider,
        sample_b.avg_s,
        verdict.winner,
        verdict.percent_difference,
    )
    return ComparisonResult(
        kernel=kernel_input.kernel,
        params=params,
        sample_a=sample_a,
        sample_b=sample_b,
        verdict=verdict,
    )


def _outputs_agree(kernel: str, out_a: Any, out_b: Any, rtol: float) -> bool:  # noqa: ANN401
    if kernel == "primes":
        return np.array_equal(np.asarray(out_a, dtype=np.int64), np.asarray(out_b, dtype=np.int64))
    arr_a = np.asarray(out_a)
    arr_b = np.asarray(out_b)
    if arr_a.shape != arr_b.shape:
        return False
    if kernel == "matrix":
        return bool(np.allclose(arr_a, arr_b, rtol=rtol, atol=0.0))
    return bool(np.array_equal(arr_a, arr_b))


def check_agreement(
    kernel: str,
    params: KernelParams | Mapping[str, Any] | None = None,
    provider_a: str | KernelProvider = "reference",
    provider_b: str | KernelProvider = "vectorized",
    *,
    seed: int = 42,
    rtol: float = MATRIX_RTOL,
) -> None:
    """Run both providers once on the same input and check that they agree.

    Pixel buffers and prime results must be identical, matrix products must
    match within relative tolerance `rtol`.

    Raises
    ------
    ResultMismatchError
        If the outputs differ.

    """
    side_a = resolve_provider(provider_a)
    side_b = resolve_provider(provider_b)
    kernel_input = prepare_input(kernel, params, seed=seed, image_source=side_a.generate_test_image)

    out_a = kernel_input.fresh_copy().bind(side_a)()
    out_b = kernel_input.fresh_copy().bind(side_b)()
    if not _outputs_agree(kernel, out_a, out_b, rtol):
        raise ResultMismatchError(
            f"Providers {provider_name(side_a)} and {provider_name(side_b)} disagree on "
            f"{kernel_input.method}{tuple(_describe(arg) for arg in kernel_input.args)}."
        )
    _LOGGER.debug("%s: %s and %s agree", kernel, provider_name(side_a), provider_name(side_b))


def _describe(arg: Any) -> Any:  # noqa: ANN401
    if isinstance(arg, np.ndarray):
        return f"<{arg.dtype.name}[{arg.size}]>"
    return arg


__all__ = [
    "TIE_THRESHOLD_PERCENT",
    "BenchmarkSample",
    "ComparisonResult",
    "ComparisonVerdict",
    "TimingStats",
    "check_agreement",
    "compare_samples",
    "measure",
    "run_comparison",
    "timing_stats",
]
