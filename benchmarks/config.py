"""Benchmark configuration (named kernel cases)."""

from __future__ import annotations

from collections.abc import Callable

from kernelbench.inputs import (
    BlurParams,
    FractalParams,
    KernelParams,
    MatrixParams,
    PrimesParams,
)

# NOTE: Keep these factories side-effect free. The runner calls each one once
# per case and expects fresh params every time.
#
# The ``preset_*`` cases are the sizes the interactive demo offered; the
# smaller ones are quick enough to run with the pure-Python provider.
BENCHMARK_CASES: dict[str, dict[str, Callable[[], KernelParams]]] = {
    "fractal": {
        "overview_200x150": lambda: FractalParams(width=200, height=150, max_iterations=128),
        "seahorse_zoom": lambda: FractalParams(
            width=320,
            height=240,
            center_x=-0.743643887037151,
            center_y=0.13182590420533,
            zoom=64.0,
            max_iterations=512,
        ),
        "preset_800x600": lambda: FractalParams(width=800, height=600, max_iterations=256),
    },
    "primes": {
        "count_100k": lambda: PrimesParams(limit=100_000),
        "preset_count_1m": lambda: PrimesParams(limit=1_000_000),
        "preset_count_10m": lambda: PrimesParams(limit=10_000_000),
        "list_1m": lambda: PrimesParams(limit=1_000_000, list_primes=True),
    },
    "matrix": {
        "preset_naive_64": lambda: MatrixParams(size=64),
        "preset_optimized_64": lambda: MatrixParams(size=64, optimized=True),
        "preset_naive_128": lambda: MatrixParams(size=128),
        "preset_optimized_128": lambda: MatrixParams(size=128, optimized=True),
        "preset_naive_256": lambda: MatrixParams(size=256),
        "preset_optimized_256": lambda: MatrixParams(size=256, optimized=True),
    },
    "blur": {
        "128x128_r2": lambda: BlurParams(width=128, height=128, radius=2),
        "preset_512x512_r3": lambda: BlurParams(width=512, height=512, radius=3),
        "preset_512x512_r8": lambda: BlurParams(width=512, height=512, radius=8),
    },
}


def case_key(kernel: str, case: str) -> str:
    return f"{kernel}/{case}"
