#!/usr/bin/env python3
"""Generate a Markdown report from comparison JSON files."""

from __future__ import annotations

import argparse
import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class ResultFile:
    path: Path
    label: str
    provider_a: str
    provider_b: str


@dataclass(frozen=True, slots=True)
class ReportRow:
    label: str
    kernel: str
    case: str
    avg_a_s: float | None
    avg_b_s: float | None
    winner: str
    percent_difference: float | None
    speedup: float | None


def _load_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _discover_results(results_dir: Path) -> list[ResultFile]:
    files: list[ResultFile] = []
    for path in sorted(results_dir.glob("compare_*.json")):
        try:
            data = _load_json(path)
        except (OSError, ValueError):
            continue
        providers = data.get("providers") or {}
        files.append(
            ResultFile(
                path=path,
                label=str(data.get("label") or path.stem),
                provider_a=str(providers.get("a") or "a"),
                provider_b=str(providers.get("b") or "b"),
            )
        )
    return files


def _md_escape(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ").strip()


def format_duration(seconds: float | None) -> str:
    """Human-readable duration (s, ms or µs)."""
    if seconds is None:
        return "n/a"
    if seconds >= 1.0:
        return f"{seconds:.3f} s"
    if seconds >= 1e-3:
        return f"{seconds * 1e3:.3f} ms"
    return f"{seconds * 1e6:.1f} µs"


def _format_percent(value: float | None) -> str:
    if value is None:
        return "n/a"
    if math.isinf(value):
        return "-inf" if value < 0 else "inf"
    return f"{value:+.1f}%"


def _format_speedup(value: float | None) -> str:
    if value is None:
        return "n/a"
    if math.isinf(value):
        return "inf"
    return f"{value:.2f}x"


def _as_float(value: Any) -> float | None:  # noqa: ANN401
    return float(value) if isinstance(value, (int, float)) else None


def _rows_for(rf: ResultFile, data: dict[str, Any]) -> list[ReportRow]:
    rows: list[ReportRow] = []
    benches: dict[str, Any] = data.get("benchmarks") or {}
    for kernel, cases in benches.items():
        if not isinstance(cases, dict):
            continue
        for case, entry in sorted(cases.items()):
            if "error" in entry:
                rows.append(
                    ReportRow(rf.label, kernel, case, None, None, f"error: {entry['error']}", None, None)
                )
                continue
            verdict = entry.get("verdict") or {}
            winner = str(verdict.get("winner") or "n/a")
            if winner == "a":
                winner = rf.provider_a
            elif winner == "b":
                winner = rf.provider_b
            rows.append(
                ReportRow(
                    label=rf.label,
                    kernel=kernel,
                    case=case,
                    avg_a_s=_as_float((entry.get("provider_a") or {}).get("avg_time_s")),
                    avg_b_s=_as_float((entry.get("provider_b") or {}).get("avg_time_s")),
                    winner=winner,
                    percent_difference=_as_float(verdict.get("percent_difference")),
                    speedup=_as_float(verdict.get("speedup")),
                )
            )
    return rows


def _render_summary_table(rows: list[ReportRow]) -> str:
    lines = [
        "| Label | Kernel | Case | A avg | B avg | Winner | Difference | Speedup |",
        "|-------|--------|------|-------|-------|--------|------------|---------|",
    ]
    for row in rows:
        lines.append(
            f"| {_md_escape(row.label)} | {_md_escape(row.kernel)} | {_md_escape(row.case)} "
            f"| {format_duration(row.avg_a_s)} | {format_duration(row.avg_b_s)} "
            f"| {_md_escape(row.winner)} | {_format_percent(row.percent_difference)} "
            f"| {_format_speedup(row.speedup)} |"
        )
    return "\n".join(lines)


def generate_report(results_dir: Path, output_path: Path) -> None:
    result_files = _discover_results(results_dir)
    if not result_files:
        raise SystemExit(f"No readable compare_*.json files found in {results_dir}")

    rows: list[ReportRow] = []
    for rf in result_files:
        rows.extend(_rows_for(rf, _load_json(rf.path)))

    md = "\n".join(
        [
            "# kernelbench Comparison Report",
            "",
            f"Results directory: `{results_dir}`",
            "",
            "## Summary",
            "",
            _render_summary_table(rows),
            "",
            "## Notes",
            "",
            "- Difference is `(A avg - B avg) / A avg`; positive means B was faster.",
            "- Differences under 5% are reported as a tie.",
            "- Every timed call counts; there is no warm-up phase.",
            "",
        ]
    )

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(md, encoding="utf-8")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--results-dir",
        type=Path,
        default=Path("benchmarks/results"),
        help="Directory containing compare_*.json files.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("benchmarks/reports/out/benchmark_report.md"),
        help="Path to write the Markdown report to.",
    )
    args = parser.parse_args(argv)
    generate_report(args.results_dir, args.output)
    print(f"Wrote report to {args.output}")


if __name__ == "__main__":
    main()
