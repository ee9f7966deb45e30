"""Imports for package kernelbench."""

from kernelbench.errors import *  # noqa: F403
from kernelbench.harness import (
    BenchmarkSample,
    ComparisonResult,
    ComparisonVerdict,
    check_agreement,
    compare_samples,
    run_comparison,
)
from kernelbench.inputs import (
    KERNEL_NAMES,
    BlurParams,
    FractalParams,
    MatrixParams,
    PrimesParams,
    identity_matrix,
    random_matrix,
)
from kernelbench.palette import COLOR_PALETTE
from kernelbench.providers import (
    KernelProvider,
    ModuleProvider,
    get_provider,
    list_providers,
    register_provider,
)
from kernelbench.viewport import ComplexViewport, render_viewport

__version__ = "0.1.0"
