"""Benchmarking scripts for kernelbench.

This package is intentionally kept separate from the main library code. It is
meant to be executed from the repository root, e.g.:

    python -m benchmarks.runner --provider-a reference --provider-b vectorized

Or run the comparison and render the Markdown report in one go:

    python -m benchmarks.run_all
"""

from __future__ import annotations

__all__ = []
