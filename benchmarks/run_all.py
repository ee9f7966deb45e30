#!/usr/bin/env python3
"""Run the full kernelbench comparison (one entrypoint).

- checks that both providers agree on every case
- times every case with both providers
- generates a Markdown summary report

Run from the repository root:
    python -m benchmarks.run_all
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any


def _print_header() -> None:
    line = "=" * 42
    print(line)
    print("kernelbench Full Comparison")
    print(line)
    print("")


def run_all(
    *,
    output_dir: Path,
    report_path: Path,
    seed: int,
    iterations: int,
    provider_a: str,
    provider_b: str,
    label: str | None,
    fail_fast: bool,
    skip_verify: bool,
) -> dict[str, Any]:
    _print_header()

    from benchmarks.runner import run_benchmarks

    print(f"[1/2] {provider_a} vs {provider_b}")
    results = run_benchmarks(
        output_dir=output_dir,
        iterations=iterations,
        seed=seed,
        provider_a=provider_a,
        provider_b=provider_b,
        kernel_filter=None,
        case_filter=None,
        fail_fast=fail_fast,
        verify=not skip_verify,
        label=label,
    )

    from benchmarks.reports.generate_report import generate_report

    print("\n[2/2] Generating report...")
    generate_report(output_dir, report_path)
    print(f"Wrote report to {report_path}")
    return results


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--output", type=Path, default=Path("benchmarks/results"))
    parser.add_argument(
        "--report",
        type=Path,
        default=Path("benchmarks/reports/out/benchmark_report.md"),
        help="Path to write the Markdown report to.",
    )
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--iterations", type=int, default=10)
    parser.add_argument("--provider-a", type=str, default="reference")
    parser.add_argument("--provider-b", type=str, default="vectorized")
    parser.add_argument("--label", type=str, default="")
    parser.add_argument("--fail-fast", action="store_true")
    parser.add_argument("--skip-verify", action="store_true")
    args = parser.parse_args(argv)

    run_all(
        output_dir=args.output,
        report_path=args.report,
        seed=int(args.seed),
        iterations=int(args.iterations),
        provider_a=args.provider_a,
        provider_b=args.provider_b,
        label=(args.label.strip() or None),
        fail_fast=bool(args.fail_fast),
        skip_verify=bool(args.skip_verify),
    )


if __name__ == "__main__":
    main()
