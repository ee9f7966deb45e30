"""Mapping between the pixel grid and the complex plane."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from kernelbench.providers import KernelProvider, resolve_provider
from kernelbench.validation import check_fractal_args, require_finite_float


@dataclass(frozen=True, slots=True)
class ComplexViewport:
    """A rectangular window onto the complex plane.

    Attributes
    ----------
    width, height : int
        Size of the pixel grid.
    center_x, center_y : float
        Point of the complex plane shown at the grid center.
    zoom : float
        Magnification; at ``zoom=1`` the grid spans 4.0 units horizontally.
    max_iterations : int
        Escape-time iteration cap.
    """

    width: int = 800
    height: int = 600
    center_x: float = -0.5
    center_y: float = 0.0
    zoom: float = 1.0
    max_iterations: int = 256

    def __post_init__(self) -> None:
        (width, height, center_x, center_y, zoom, max_iterations) = check_fractal_args(
            self.width,
            self.height,
            self.center_x,
            self.center_y,
            self.zoom,
            self.max_iterations,
        )
        object.__setattr__(self, "width", width)
        object.__setattr__(self, "height", height)
        object.__setattr__(self, "center_x", center_x)
        object.__setattr__(self, "center_y", center_y)
        object.__setattr__(self, "zoom", zoom)
        object.__setattr__(self, "max_iterations", max_iterations)

    @property
    def scale(self) -> float:
        """Width of one pixel in complex-plane units."""
        return 4.0 / (self.width * self.zoom)

    def pixel_to_complex(self, px: float, py: float) -> tuple[float, float]:
        scale = self.scale
        x0 = (px - self.width * 0.5) * scale + self.center_x
        y0 = (py - self.height * 0.5) * scale + self.center_y
        return x0, y0

    def zoom_at(self, px: float, py: float, factor: float = 2.0) -> ComplexViewport:
        """Return a viewport centered on pixel ``(px, py)`` and magnified by `factor`."""
        factor = require_finite_float(factor, "factor")
        center_x, center_y = self.pixel_to_complex(px, py)
        return replace(self, center_x=center_x, center_y=center_y, zoom=self.zoom * factor)

    def as_args(self) -> tuple[int, int, float, float, float, int]:
        """Positional arguments for ``render_fractal``."""
        return (
            self.width,
            self.height,
            self.center_x,
            self.center_y,
            self.zoom,
            self.max_iterations,
        )


def render_viewport(provider: str | KernelProvider, viewport: ComplexViewport) -> Any:  # noqa: ANN401
    """Render `viewport` with `provider`, given by name or as a provider object."""
    return resolve_provider(provider).render_fractal(*viewport.as_args())


__all__ = ["ComplexViewport", "render_viewport"]
