import unittest

import numpy as np

import kernelbench.reference as ref
import kernelbench.vectorized as vec
from kernelbench.errors import InvalidArgumentError
from kernelbench.palette import COLOR_PALETTE, palette_index
from kernelbench.testutils import all_providers


def _pixel(buffer, width, x, y):
    idx = (y * width + x) * 4
    return np.asarray(buffer)[idx : idx + 4].tolist()


class TestRenderFractal(unittest.TestCase):
    def test_output_shape(self):
        for provider in all_providers():
            out = np.asarray(provider.render_fractal(16, 9, -0.5, 0.0, 1.0, 32))
            assert out.dtype == np.uint8
            assert out.shape == (16 * 9 * 4,)
            assert np.all(out.reshape(-1, 4)[:, 3] == 255)

    def test_center_of_main_cardioid_is_black(self):
        for provider in all_providers():
            out = provider.render_fractal(64, 64, 0.0, 0.0, 1.0, 100)
            assert _pixel(out, 64, 32, 32) == [0, 0, 0, 255]

    def test_far_outside_is_colored(self):
        for provider in all_providers():
            out = np.asarray(provider.render_fractal(8, 8, 2.5, 0.0, 1.0, 100))
            assert np.all(out.reshape(-1, 4)[:, :3].sum(axis=1) > 0)

    def test_corner_pixel_escapes_after_one_iteration(self):
        # pixel (0, 0) maps to -2-2i, |c|^2 = 8
        expected = COLOR_PALETTE[palette_index(1, 100)].tolist() + [255]
        for provider in all_providers():
            out = provider.render_fractal(64, 64, 0.0, 0.0, 1.0, 100)
            assert _pixel(out, 64, 0, 0) == expected

    def test_providers_byte_identical(self):
        cases = [
            (48, 32, -0.5, 0.0, 1.0, 64),
            (40, 30, -0.743643887037151, 0.13182590420533, 50.0, 200),
            (17, 13, 0.25, 0.5, 3.0, 1),
        ]
        for args in cases:
            with self.subTest(args=args):
                assert ref.render_fractal(*args).tobytes() == vec.render_fractal(*args).tobytes()

    def test_max_iterations_one_is_all_black(self):
        # every orbit starts at 0, so the single iteration always runs
        for provider in all_providers():
            out = np.asarray(provider.render_fractal(4, 4, 2.5, 0.0, 1.0, 1))
            assert np.all(out.reshape(-1, 4) == [0, 0, 0, 255])

    def test_escape_counts(self):
        counts = vec.escape_counts(64, 64, 0.0, 0.0, 1.0, 100)
        assert counts.shape == (64 * 64,)
        assert counts[32 * 64 + 32] == 100
        assert counts[0] == 1

    def test_invalid_arguments_fail(self):
        bad = [
            (0, 10, 0.0, 0.0, 1.0, 10),
            (10, 0, 0.0, 0.0, 1.0, 10),
            (10, 10, 0.0, 0.0, 0.0, 10),
            (10, 10, 0.0, 0.0, -1.0, 10),
            (10, 10, 0.0, 0.0, float("nan"), 10),
            (10, 10, float("inf"), 0.0, 1.0, 10),
            (10, 10, 0.0, 0.0, 1.0, 0),
            (10.5, 10, 0.0, 0.0, 1.0, 10),
        ]
        for provider in all_providers():
            for args in bad:
                with self.subTest(provider=provider.name, args=args):
                    with self.assertRaises(InvalidArgumentError):
                        provider.render_fractal(*args)
