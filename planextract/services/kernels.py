"""Convolution kernels used by the edge detector and preprocessing.

Buffers are uint8 numpy arrays of shape (H, W) or (H, W, C). Functions
that modify their input say so; everything else returns a new array.
"""

import cv2
import numpy as np

SOBEL_X = np.array([[-1, 0, 1],
                    [-2, 0, 2],
                    [-1, 0, 1]], dtype=np.float64)

SOBEL_Y = np.array([[-1, -2, -1],
                    [0, 0, 0],
                    [1, 2, 1]], dtype=np.float64)


def to_pixel_buffer(data, width: int, height: int) -> np.ndarray:
    """
    Wrap a flat one-byte-per-pixel array as a (height, width) buffer.

    Args:
        data: Sequence or array of width * height intensity values
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        Owned uint8 array of shape (height, width)
    """
    buffer = np.array(data, dtype=np.uint8).reshape(-1)
    if buffer.size != width * height:
        raise ValueError(
            f"Buffer has {buffer.size} pixels, expected {width}x{height}={width * height}"
        )
    return buffer.reshape(height, width)


def generate_gaussian_kernel(radius: int) -> np.ndarray:
    """
    Build a normalized (2r+1) x (2r+1) Gaussian kernel with sigma = r / 2.

    Args:
        radius: Kernel radius, at least 1

    Returns:
        Kernel whose weights sum to 1
    """
    if radius < 1:
        raise ValueError(f"Blur radius must be >= 1, got {radius}")

    sigma = radius / 2
    offsets = np.arange(-radius, radius + 1, dtype=np.float64)
    dy, dx = np.meshgrid(offsets, offsets, indexing="ij")
    kernel = np.exp(-(dx * dx + dy * dy) / (2 * sigma * sigma))

    return kernel / kernel.sum()


def gaussian_blur(buffer: np.ndarray, radius: int) -> np.ndarray:
    """
    Blur a buffer in place (destructive).

    Every channel is convolved with the Gaussian kernel using replicated
    edges. The result is computed into a separate float buffer and only
    copied back once complete.

    Args:
        buffer: uint8 array of shape (H, W) or (H, W, C)
        radius: Blur radius (typically 1-3)

    Returns:
        The same buffer, for chaining
    """
    if buffer.ndim not in (2, 3):
        raise ValueError(f"Expected a 2D or 3D buffer, got shape {buffer.shape}")

    kernel = generate_gaussian_kernel(radius)

    output = cv2.filter2D(
        buffer.astype(np.float64), cv2.CV_64F, kernel,
        borderType=cv2.BORDER_REPLICATE
    )
    output = output.reshape(buffer.shape)

    buffer[...] = np.clip(np.rint(output), 0, 255).astype(buffer.dtype)
    return buffer


def sobel_gradient(buffer: np.ndarray) -> np.ndarray:
    """
    Sobel gradient magnitude of the first channel.

    Args:
        buffer: uint8 array of shape (H, W) or (H, W, C)

    Returns:
        uint8 (H, W) magnitude map clamped to 255, with a zero 1-pixel border
    """
    channel = buffer if buffer.ndim == 2 else buffer[..., 0]
    height, width = channel.shape
    edges = np.zeros((height, width), dtype=np.uint8)

    if height < 3 or width < 3:
        return edges

    pixels = channel.astype(np.float64)
    gx = cv2.filter2D(pixels, cv2.CV_64F, SOBEL_X)[1:-1, 1:-1]
    gy = cv2.filter2D(pixels, cv2.CV_64F, SOBEL_Y)[1:-1, 1:-1]

    magnitude = np.sqrt(gx * gx + gy * gy)
    edges[1:-1, 1:-1] = np.clip(np.rint(magnitude), 0, 255).astype(np.uint8)

    return edges
