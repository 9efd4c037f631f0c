"""Simplified Canny edge detection.

Blur, Sobel magnitude and a double threshold with one step of 8-connected
hysteresis. There is no non-maximum suppression, so ridges along thick
strokes stay several pixels wide; the Hough voting and line merging
thresholds are tuned for that.
"""

import logging

import cv2
import numpy as np

from planextract.services.kernels import gaussian_blur, sobel_gradient

logger = logging.getLogger(__name__)

# 8-connected neighbourhood, excluding the pixel itself
NEIGHBOR_KERNEL = np.ones((3, 3), dtype=np.uint8)
NEIGHBOR_KERNEL[1, 1] = 0


def _has_neighbor(mask: np.ndarray) -> np.ndarray:
    """True where any 8-connected neighbour of a pixel is set in mask."""
    dilated = cv2.dilate(
        mask.astype(np.uint8), NEIGHBOR_KERNEL,
        borderType=cv2.BORDER_CONSTANT, borderValue=0
    )
    return dilated > 0


def canny_edge_detection(
    buffer: np.ndarray,
    low_threshold: int = 50,
    high_threshold: int = 100
) -> np.ndarray:
    """
    Detect edges in a grayscale or multi-channel buffer.

    Gradients above high_threshold are strong edges. Gradients in
    (low_threshold, high_threshold] are kept only when an 8-connected
    neighbour is strong. The input buffer is not modified.

    Args:
        buffer: uint8 array of shape (H, W) or (H, W, C)
        low_threshold: Gradients at or below this are dropped
        high_threshold: Gradients above this are strong edges

    Returns:
        Binary edge map (0/255) of shape (H, W)
    """
    blurred = np.array(buffer, dtype=np.uint8, copy=True)
    gaussian_blur(blurred, 1)

    gradients = sobel_gradient(blurred)

    suppressed = np.where(gradients > low_threshold, gradients, 0)

    strong = suppressed > high_threshold
    weak = (suppressed > low_threshold) & ~strong

    edges = np.zeros(gradients.shape, dtype=np.uint8)
    edges[strong | (weak & _has_neighbor(strong))] = 255

    logger.debug(
        f"Edge detection: {int(strong.sum())} strong, "
        f"{int((edges > 0).sum())} total edge pixels"
    )

    return edges
