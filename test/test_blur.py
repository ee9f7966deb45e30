import unittest

import numpy as np

import kernelbench.reference as ref
import kernelbench.vectorized as vec
from kernelbench.errors import InvalidArgumentError, ShapeMismatchError
from kernelbench.testutils import all_providers


def _box_blur_numpy(pixels, width, height, radius):
    # window sums via edge padding, truncated mean
    image = pixels.reshape(height, width, 4).astype(np.int64)
    padded = np.pad(image, ((radius, radius), (radius, radius), (0, 0)), mode="edge")
    k = 2 * radius + 1
    sums = np.zeros_like(image)
    for dy in range(k):
        for dx in range(k):
            sums += padded[dy : dy + height, dx : dx + width]
    return (sums // (k * k)).astype(np.uint8).reshape(-1)


class TestGenerateTestImage(unittest.TestCase):
    def test_shape_and_alpha(self):
        for provider in all_providers():
            image = np.asarray(provider.generate_test_image(40, 30))
            assert image.dtype == np.uint8
            assert image.shape == (40 * 30 * 4,)
            assert np.all(image.reshape(-1, 4)[:, 3] == 255)

    def test_providers_byte_identical(self):
        for width, height in [(1, 1), (3, 7), (64, 48), (100, 37)]:
            with self.subTest(width=width, height=height):
                assert ref.generate_test_image(width, height).tobytes() == (
                    vec.generate_test_image(width, height).tobytes()
                )

    def test_pattern(self):
        width, height = 80, 60
        image = vec.generate_test_image(width, height).reshape(height, width, 4)
        # center of the disc is white
        assert image[30, 40].tolist() == [255, 255, 255, 255]
        # (0, 0) lies on a stripe
        assert image[0, 0].tolist() == [50, 50, 50, 255]
        # gradient elsewhere
        x, y = 10, 5
        assert image[y, x].tolist() == [
            int(x / width * 255),
            int(y / height * 255),
            int((x + y) / (width + height) * 255),
            255,
        ]

    def test_deterministic(self):
        assert np.array_equal(vec.generate_test_image(16, 16), vec.generate_test_image(16, 16))

    def test_invalid_size_fails(self):
        for provider in all_providers():
            with self.assertRaises(InvalidArgumentError):
                provider.generate_test_image(0, 10)
            with self.assertRaises(InvalidArgumentError):
                provider.generate_test_image(10, -1)


class TestBoxBlur(unittest.TestCase):
    def setUp(self):
        self.width = 23
        self.height = 17
        self.image = vec.generate_test_image(self.width, self.height)

    def test_radius_zero_is_identity(self):
        for provider in all_providers():
            out = np.asarray(provider.box_blur(self.image, self.width, self.height, 0))
            assert np.array_equal(out, self.image)
            assert out is not self.image

    def test_matches_padded_window_mean(self):
        for radius in (1, 2, 5, 12):
            expected = _box_blur_numpy(self.image, self.width, self.height, radius)
            for provider in all_providers():
                with self.subTest(provider=provider.name, radius=radius):
                    out = provider.box_blur(self.image, self.width, self.height, radius)
                    assert np.array_equal(np.asarray(out), expected)

    def test_providers_byte_identical(self):
        for radius in (1, 3):
            out_ref = ref.box_blur(self.image, self.width, self.height, radius)
            out_vec = vec.box_blur(self.image, self.width, self.height, radius)
            assert out_ref.tobytes() == out_vec.tobytes()

    def test_constant_image_unchanged(self):
        image = np.full(6 * 5 * 4, 77, dtype=np.uint8)
        for provider in all_providers():
            assert np.array_equal(provider.box_blur(image, 6, 5, 2), image)

    def test_input_not_modified(self):
        before = self.image.copy()
        for provider in all_providers():
            provider.box_blur(self.image, self.width, self.height, 2)
        assert np.array_equal(self.image, before)

    def test_read_only_and_bytes_input(self):
        readonly = self.image.copy()
        readonly.flags.writeable = False
        expected = ref.box_blur(self.image, self.width, self.height, 1)
        for provider in all_providers():
            assert np.array_equal(provider.box_blur(readonly, self.width, self.height, 1), expected)
            assert np.array_equal(
                provider.box_blur(self.image.tobytes(), self.width, self.height, 1), expected
            )

    def test_negative_radius_fails(self):
        for provider in all_providers():
            with self.assertRaises(InvalidArgumentError):
                provider.box_blur(self.image, self.width, self.height, -1)

    def test_zero_width_fails(self):
        for provider in all_providers():
            with self.assertRaises(InvalidArgumentError):
                provider.box_blur(self.image, 0, self.height, 1)

    def test_wrong_length_fails(self):
        for provider in all_providers():
            with self.assertRaises(ShapeMismatchError):
                provider.box_blur(bytes(10), 2, 2, 1)

    def test_wrong_dtype_fails(self):
        for provider in all_providers():
            with self.assertRaises(InvalidArgumentError):
                provider.box_blur(np.zeros(16, dtype=np.float32), 2, 2, 1)
