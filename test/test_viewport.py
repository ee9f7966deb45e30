import unittest

import numpy as np

import kernelbench.vectorized as vec
from kernelbench.errors import InvalidArgumentError
from kernelbench.inputs import FractalParams
from kernelbench.providers import get_provider
from kernelbench.testutils import all_providers
from kernelbench.viewport import ComplexViewport, render_viewport


class TestComplexViewport(unittest.TestCase):
    def test_defaults(self):
        vp = ComplexViewport()
        assert vp.as_args() == (800, 600, -0.5, 0.0, 1.0, 256)

    def test_scale(self):
        assert np.isclose(ComplexViewport(width=400, zoom=2.0).scale, 4.0 / 800)

    def test_pixel_to_complex(self):
        vp = ComplexViewport(width=64, height=64, center_x=0.0, center_y=0.0)
        assert vp.pixel_to_complex(32, 32) == (0.0, 0.0)
        assert vp.pixel_to_complex(0, 0) == (-2.0, -2.0)

    def test_zoom_at_recenters_and_doubles_zoom(self):
        vp = ComplexViewport(width=64, height=64, center_x=0.0, center_y=0.0, zoom=1.0)
        zoomed = vp.zoom_at(48, 16)
        assert (zoomed.center_x, zoomed.center_y) == vp.pixel_to_complex(48, 16)
        assert zoomed.zoom == 2.0
        assert zoomed.width == vp.width
        assert zoomed.max_iterations == vp.max_iterations
        # the old viewport is unchanged
        assert vp.zoom == 1.0

    def test_zoom_at_center_keeps_center(self):
        vp = ComplexViewport(width=100, height=80, center_x=-0.75, center_y=0.1)
        zoomed = vp.zoom_at(50, 40, factor=4.0)
        assert zoomed.center_x == -0.75
        assert zoomed.center_y == 0.1
        assert zoomed.zoom == 4.0

    def test_frozen(self):
        vp = ComplexViewport()
        with self.assertRaises(AttributeError):
            vp.zoom = 2.0

    def test_normalizes_types(self):
        vp = ComplexViewport(width=np.int64(10), height=10, center_x=1, zoom=np.float32(2.0))
        assert type(vp.width) is int
        assert type(vp.center_x) is float
        assert type(vp.zoom) is float

    def test_invalid_values_fail(self):
        for kwargs in ({"width": 0}, {"zoom": 0.0}, {"zoom": float("inf")}, {"max_iterations": 0}):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(InvalidArgumentError):
                    ComplexViewport(**kwargs)

    def test_as_args_renders(self):
        vp = FractalParams(width=12, height=8, max_iterations=20).viewport()
        for provider in all_providers():
            out = provider.render_fractal(*vp.as_args())
            assert np.asarray(out).shape == (12 * 8 * 4,)

    def test_render_viewport(self):
        vp = ComplexViewport(width=10, height=6, max_iterations=30)
        expected = vec.render_fractal(*vp.as_args())
        assert np.array_equal(render_viewport("reference", vp), expected)
        assert np.array_equal(render_viewport(get_provider("vectorized"), vp), expected)
