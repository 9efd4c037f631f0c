import unittest

import numpy as np

from planextract.services.kernels import (
    SOBEL_X,
    SOBEL_Y,
    gaussian_blur,
    generate_gaussian_kernel,
    sobel_gradient,
    to_pixel_buffer,
)


class TestPixelBuffer(unittest.TestCase):

    def test_reshapes_flat_data(self):
        buffer = to_pixel_buffer([1, 2, 3, 4, 5, 6], width=3, height=2)
        self.assertEqual(buffer.shape, (2, 3))
        self.assertEqual(buffer.dtype, np.uint8)
        self.assertEqual(buffer[1, 0], 4)

    def test_size_mismatch(self):
        with self.assertRaises(ValueError):
            to_pixel_buffer([1, 2, 3], width=2, height=2)


def reference_blur(buffer, radius):
    """Direct weighted sum over replicated-edge neighbourhoods."""
    kernel = generate_gaussian_kernel(radius)
    height, width = buffer.shape[:2]
    pad = [(radius, radius), (radius, radius)] + [(0, 0)] * (buffer.ndim - 2)
    padded = np.pad(buffer.astype(np.float64), pad, mode="edge")

    output = np.zeros(buffer.shape, dtype=np.float64)
    for ky in range(2 * radius + 1):
        for kx in range(2 * radius + 1):
            output += kernel[ky, kx] * padded[ky:ky + height, kx:kx + width]
    return np.clip(np.rint(output), 0, 255).astype(np.uint8)


def reference_sobel(buffer):
    pixels = buffer.astype(np.float64)
    height, width = pixels.shape
    gx = np.zeros((height - 2, width - 2))
    gy = np.zeros((height - 2, width - 2))
    for ky in range(3):
        for kx in range(3):
            window = pixels[ky:ky + height - 2, kx:kx + width - 2]
            gx += SOBEL_X[ky, kx] * window
            gy += SOBEL_Y[ky, kx] * window

    edges = np.zeros((height, width), dtype=np.uint8)
    edges[1:-1, 1:-1] = np.clip(np.rint(np.sqrt(gx * gx + gy * gy)), 0, 255)
    return edges

class TestGaussianKernel(unittest.TestCase):

    def test_normalized_and_symmetric(self):
        for radius in (1, 2, 3):
            kernel = generate_gaussian_kernel(radius)
            self.assertEqual(kernel.shape, (2 * radius + 1, 2 * radius + 1))
            self.assertAlmostEqual(kernel.sum(), 1.0)
            np.testing.assert_allclose(kernel, kernel.T)
            np.testing.assert_allclose(kernel, kernel[::-1, ::-1])
            self.assertEqual(kernel.argmax(), kernel.size // 2)

    def test_rejects_zero_radius(self):
        with self.assertRaises(ValueError):
            generate_gaussian_kernel(0)


class TestGaussianBlur(unittest.TestCase):

    def test_uniform_image_unchanged(self):
        buffer = np.full((6, 7), 128, dtype=np.uint8)
        gaussian_blur(buffer, 2)
        self.assertTrue((buffer == 128).all())

    def test_blurs_in_place(self):
        buffer = np.zeros((7, 7), dtype=np.uint8)
        buffer[3, 3] = 255

        result = gaussian_blur(buffer, 1)

        self.assertIs(result, buffer)
        self.assertLess(buffer[3, 3], 255)
        self.assertGreater(buffer[3, 4], 0)
        self.assertEqual(buffer[0, 0], 0)
        self.assertEqual(buffer[3, 4], buffer[4, 3])

    def test_matches_direct_weighted_sum(self):
        rng = np.random.default_rng(7)
        for radius in (1, 2, 3):
            buffer = rng.integers(0, 256, size=(13, 17), dtype=np.uint8)
            expected = reference_blur(buffer, radius)

            np.testing.assert_array_equal(gaussian_blur(buffer, radius), expected)

    def test_multichannel_matches_direct_weighted_sum(self):
        rng = np.random.default_rng(11)
        buffer = rng.integers(0, 256, size=(9, 10, 4), dtype=np.uint8)
        expected = reference_blur(buffer, 1)

        np.testing.assert_array_equal(gaussian_blur(buffer, 1), expected)

    def test_blurs_every_channel(self):
        buffer = np.zeros((5, 5, 4), dtype=np.uint8)
        buffer[2, 2, :] = 200

        gaussian_blur(buffer, 1)

        for channel in range(1, 4):
            np.testing.assert_array_equal(buffer[..., 0], buffer[..., channel])


class TestSobelGradient(unittest.TestCase):

    def test_vertical_step(self):
        buffer = np.zeros((5, 8), dtype=np.uint8)
        buffer[:, 4:] = 255

        gradient = sobel_gradient(buffer)

        self.assertEqual(gradient.shape, (5, 8))
        self.assertTrue((gradient[1:-1, 3] == 255).all())
        self.assertTrue((gradient[1:-1, 4] == 255).all())
        self.assertTrue((gradient[1:-1, 1] == 0).all())
        self.assertTrue((gradient[1:-1, 6] == 0).all())

    def test_border_is_zero(self):
        rng = np.random.default_rng(0)
        buffer = rng.integers(0, 256, size=(6, 9), dtype=np.uint8)

        gradient = sobel_gradient(buffer)

        self.assertTrue((gradient[0, :] == 0).all())
        self.assertTrue((gradient[-1, :] == 0).all())
        self.assertTrue((gradient[:, 0] == 0).all())
        self.assertTrue((gradient[:, -1] == 0).all())

    def test_matches_direct_weighted_sum(self):
        rng = np.random.default_rng(3)
        buffer = rng.integers(0, 256, size=(12, 15), dtype=np.uint8)

        np.testing.assert_array_equal(sobel_gradient(buffer), reference_sobel(buffer))

    def test_tiny_image(self):
        gradient = sobel_gradient(np.full((2, 10), 255, dtype=np.uint8))
        self.assertTrue((gradient == 0).all())

    def test_uses_first_channel(self):
        buffer = np.zeros((5, 5, 3), dtype=np.uint8)
        buffer[:, 3:, 1] = 255

        self.assertTrue((sobel_gradient(buffer) == 0).all())


if __name__ == '__main__':
    unittest.main()
