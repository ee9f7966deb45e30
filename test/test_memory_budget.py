import os
import tracemalloc
import unittest
from unittest import mock

import kernelbench.reference.blur as ref_blur
import kernelbench.reference.fractal as ref_fractal
import kernelbench.reference.matrix as ref_matrix
import kernelbench.reference.primes as ref_primes
import kernelbench.vectorized.blur as vec_blur
import kernelbench.vectorized.fractal as vec_fractal
import kernelbench.vectorized.matrix as vec_matrix
import kernelbench.vectorized.primes as vec_primes
from kernelbench.errors import ResourceExhaustedError
from kernelbench.inputs import random_matrix


def _peak_bytes(func, args):
    tracemalloc.start()
    try:
        func(*args)
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()
    return peak


def _budget_cases():
    # inputs are built up front so they are not traced
    vec_image = vec_blur.generate_test_image(200, 150)
    ref_image = ref_blur.generate_test_image(60, 40)
    vec_a, vec_b = random_matrix(128, seed=1), random_matrix(128, seed=2)
    ref_a, ref_b = random_matrix(40, seed=3), random_matrix(40, seed=4)
    return [
        ("vectorized render_fractal", vec_fractal.render_fractal,
         (200, 150, -0.5, 0.0, 1.0, 50), vec_fractal.render_fractal_bytes(200, 150)),
        ("reference render_fractal", ref_fractal.render_fractal,
         (60, 40, -0.5, 0.0, 1.0, 30), ref_fractal.render_fractal_bytes(60, 40)),
        ("vectorized count_primes", vec_primes.count_primes,
         (2_000_000,), vec_primes.count_primes_bytes(2_000_000)),
        ("vectorized enumerate_primes", vec_primes.enumerate_primes,
         (2_000_000,), vec_primes.enumerate_primes_bytes(2_000_000)),
        ("reference count_primes", ref_primes.count_primes,
         (200_000,), ref_primes.count_primes_bytes(200_000)),
        ("reference enumerate_primes", ref_primes.enumerate_primes,
         (200_000,), ref_primes.enumerate_primes_bytes(200_000)),
        ("vectorized multiply_naive", vec_matrix.multiply_naive,
         (vec_a, vec_b, 128), vec_matrix.multiply_bytes(128)),
        ("vectorized multiply_optimized", vec_matrix.multiply_optimized,
         (vec_a, vec_b, 128), vec_matrix.multiply_bytes(128)),
        ("reference multiply_naive", ref_matrix.multiply_naive,
         (ref_a, ref_b, 40), ref_matrix.multiply_bytes(40)),
        ("reference multiply_optimized", ref_matrix.multiply_optimized,
         (ref_a, ref_b, 40), ref_matrix.multiply_bytes(40)),
        ("vectorized box_blur", vec_blur.box_blur,
         (vec_image, 200, 150, 3), vec_blur.box_blur_bytes(200, 150, 3)),
        ("vectorized box_blur radius 0", vec_blur.box_blur,
         (vec_image, 200, 150, 0), vec_blur.box_blur_bytes(200, 150, 0)),
        ("reference box_blur", ref_blur.box_blur,
         (ref_image, 60, 40, 2), ref_blur.box_blur_bytes(60, 40, 2)),
        ("vectorized generate_test_image", vec_blur.generate_test_image,
         (200, 150), vec_blur.generate_test_image_bytes(200, 150)),
        ("reference generate_test_image", ref_blur.generate_test_image,
         (60, 40), ref_blur.generate_test_image_bytes(60, 40)),
    ]


class TestWorkingSetBudget(unittest.TestCase):
    def test_peak_within_estimate(self):
        for name, func, args, estimate in _budget_cases():
            with self.subTest(kernel=name):
                # first call outside tracing, so one-time setup is not counted
                func(*args)
                with mock.patch.dict(os.environ, {"KERNELBENCH_MAX_ALLOC_BYTES": str(estimate)}):
                    peak = _peak_bytes(func, args)
                assert peak <= estimate, f"{name} peaked at {peak} bytes, budget {estimate}"

    def test_just_below_estimate_fails(self):
        for name, func, args, estimate in _budget_cases():
            with self.subTest(kernel=name):
                with mock.patch.dict(os.environ, {"KERNELBENCH_MAX_ALLOC_BYTES": str(estimate - 1)}):
                    with self.assertRaises(ResourceExhaustedError):
                        func(*args)

    def test_estimates_scale_with_input(self):
        # a large render must be refused long before it allocates
        with mock.patch.dict(os.environ, {"KERNELBENCH_MAX_ALLOC_BYTES": "4000000"}):
            with self.assertRaises(ResourceExhaustedError):
                vec_fractal.render_fractal(1000, 1000, -0.5, 0.0, 1.0, 2)
            with self.assertRaises(ResourceExhaustedError):
                vec_primes.enumerate_primes(60_000_000)
            with self.assertRaises(ResourceExhaustedError):
                ref_fractal.render_fractal(1000, 1000, -0.5, 0.0, 1.0, 2)
            with self.assertRaises(ResourceExhaustedError):
                vec_blur.box_blur(bytes(500 * 500 * 4), 500, 500, 1)
