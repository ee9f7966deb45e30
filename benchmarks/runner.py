#!/usr/bin/env python3
"""kernelbench comparison runner.

Run from the repository root:
    python -m benchmarks.runner --provider-a reference --provider-b vectorized
"""

from __future__ import annotations

import argparse
import datetime as _dt
import json
import logging
import platform as _platform
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import cv2
import numpy as np
import PIL
import PIL.Image
from tqdm import tqdm

import kernelbench as kb
from benchmarks.config import BENCHMARK_CASES, case_key
from kernelbench.inputs import BlurParams, FractalParams, KernelParams, params_as_dict
from kernelbench.providers import KernelProvider, list_providers, provider_name, resolve_provider


def _system_info() -> dict[str, object]:
    return {
        "platform": _platform.system(),
        "platform_release": _platform.release(),
        "architecture": _platform.machine(),
        "processor": _platform.processor(),
        "python_version": _platform.python_version(),
        "python_implementation": _platform.python_implementation(),
        "numpy_version": np.__version__,
        "opencv_version": cv2.__version__,
        "pillow_version": PIL.__version__,
        "kernelbench_version": kb.__version__,
        "timestamp": _dt.datetime.now(tz=_dt.timezone.utc).isoformat(),
    }


def _save_rgba(pixels: Any, width: int, height: int, path: Path) -> None:  # noqa: ANN401
    arr = np.asarray(pixels, dtype=np.uint8).reshape(height, width, 4)
    PIL.Image.fromarray(arr).save(path)


def _save_case_images(
    provider: KernelProvider,
    kernel: str,
    case: str,
    params: KernelParams,
    image_dir: Path,
) -> list[str]:
    """Write the output of one kernel call as PNG, for eyeballing."""
    image_dir.mkdir(parents=True, exist_ok=True)
    stem = f"{kernel}_{case}_{provider_name(provider)}"
    written: list[Path] = []
    if isinstance(params, FractalParams):
        path = image_dir / f"{stem}.png"
        _save_rgba(provider.render_fractal(*params.viewport().as_args()), params.width, params.height, path)
        written.append(path)
    elif isinstance(params, BlurParams):
        source = provider.generate_test_image(params.width, params.height)
        source_path = image_dir / f"{stem}_source.png"
        blurred_path = image_dir / f"{stem}_blurred.png"
        _save_rgba(source, params.width, params.height, source_path)
        _save_rgba(
            provider.box_blur(source, params.width, params.height, params.radius),
            params.width,
            params.height,
            blurred_path,
        )
        written.extend((source_path, blurred_path))
    return [str(p) for p in written]


def run_benchmarks(
    *,
    output_dir: Path,
    iterations: int,
    seed: int,
    provider_a: str | KernelProvider,
    provider_b: str | KernelProvider,
    kernel_filter: set[str] | None,
    case_filter: set[str] | None,
    fail_fast: bool,
    verify: bool,
    label: str | None,
    image_dir: Path | None = None,
    cases: Mapping[str, Mapping[str, Callable[[], KernelParams]]] | None = None,
) -> dict[str, Any]:
    side_a = resolve_provider(provider_a)
    side_b = resolve_provider(provider_b)
    cases = BENCHMARK_CASES if cases is None else cases

    results: dict[str, Any] = {
        "system_info": _system_info(),
        "label": label or f"{provider_name(side_a)}_vs_{provider_name(side_b)}",
        "providers": {"a": provider_name(side_a), "b": provider_name(side_b)},
        "params": {
            "iterations": iterations,
            "seed": seed,
            "verify": verify,
        },
        "benchmarks": {},
    }

    selected = [
        (kernel, case, factory)
        for kernel, kernel_cases in cases.items()
        if kernel_filter is None or kernel in kernel_filter
        for case, factory in kernel_cases.items()
        if case_filter is None or case in case_filter or case_key(kernel, case) in case_filter
    ]

    with tqdm(total=len(selected), desc="Cases", unit="case", leave=True, dynamic_ncols=True) as pbar:
        for kernel, case, factory in selected:
            pbar.set_postfix_str(case_key(kernel, case))
            kernel_results = results["benchmarks"].setdefault(kernel, {})
            try:
                params = factory()
                if verify:
                    kb.check_agreement(kernel, params, side_a, side_b, seed=seed)
                comparison = kb.run_comparison(
                    kernel,
                    params,
                    iterations,
                    side_a,
                    side_b,
                    seed=seed,
                    progress=True,
                )
            except Exception as exc:
                kernel_results[case] = {"error": repr(exc)}
                pbar.update(1)
                if fail_fast:
                    raise
                continue

            entry = comparison.as_dict()
            if image_dir is not None:
                entry["images"] = _save_case_images(side_a, kernel, case, params, image_dir)
            kernel_results[case] = entry
            pbar.update(1)

    output_dir.mkdir(parents=True, exist_ok=True)
    stamp = _dt.date.today().isoformat()
    out_path = output_dir / f"compare_{stamp}.json"
    out_path.write_text(json.dumps(results, indent=2, sort_keys=True), encoding="utf-8")
    print(f"Wrote {out_path}")
    results["output_path"] = str(out_path)
    return results


def _parse_filter(raw: str) -> set[str] | None:
    if not raw.strip():
        return None
    return {part.strip() for part in raw.split(",") if part.strip()}


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--provider-a", type=str, default="reference")
    parser.add_argument("--provider-b", type=str, default="vectorized")
    parser.add_argument("--output", type=Path, default=Path("benchmarks/results"))
    parser.add_argument("--iterations", type=int, default=10)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument(
        "--kernels",
        type=str,
        default="",
        help="Comma-separated kernel names (fractal, primes, matrix, blur); empty means all.",
    )
    parser.add_argument(
        "--cases",
        type=str,
        default="",
        help="Comma-separated case names or kernel/case keys; empty means all.",
    )
    parser.add_argument("--list-cases", action="store_true")
    parser.add_argument("--list-providers", action="store_true")
    parser.add_argument("--fail-fast", action="store_true")
    parser.add_argument(
        "--skip-verify",
        action="store_true",
        help="Do not check that both providers produce the same output before timing.",
    )
    parser.add_argument(
        "--save-images",
        type=Path,
        default=None,
        help="Directory to write fractal and blur outputs of provider A to, as PNG.",
    )
    parser.add_argument("--label", type=str, default="")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    if args.list_providers:
        for name in list_providers():
            print(name)
        return

    if args.list_cases:
        for kernel, kernel_cases in BENCHMARK_CASES.items():
            for case, factory in kernel_cases.items():
                print(f"{case_key(kernel, case)} {params_as_dict(factory())}")
        return

    run_benchmarks(
        output_dir=args.output,
        iterations=args.iterations,
        seed=args.seed,
        provider_a=args.provider_a,
        provider_b=args.provider_b,
        kernel_filter=_parse_filter(args.kernels),
        case_filter=_parse_filter(args.cases),
        fail_fast=args.fail_fast,
        verify=not args.skip_verify,
        label=args.label.strip() or None,
        image_dir=args.save_images,
    )


if __name__ == "__main__":
    main()
