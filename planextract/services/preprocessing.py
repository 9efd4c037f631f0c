"""Image preprocessing for OCR and wall detection."""

import logging
from dataclasses import dataclass

import cv2
import numpy as np

from planextract.services.kernels import gaussian_blur

logger = logging.getLogger(__name__)


@dataclass
class PreprocessedImage:
    """Grayscale image for OCR and its binary version for detection."""
    processed: np.ndarray  # uint8 grayscale
    binary: np.ndarray     # uint8, ink 255, background 0
    width: int
    height: int
    threshold: float


def decode_image(data: bytes) -> np.ndarray:
    """Decode an encoded image (PNG, JPEG, ...) to a BGR array."""
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None
    if image is None:
        raise ValueError("Could not decode image")
    return image


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert a BGR/BGRA image to grayscale; grayscale input is copied."""
    if image.ndim == 2:
        return image.copy()
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)


def preprocess_image(
    image: np.ndarray,
    max_dimension: int = 2000,
    enable_denoising: bool = True,
    enable_contrast: bool = True
) -> PreprocessedImage:
    """
    Prepare a floor plan image for OCR and wall detection.

    Args:
        image: Input image (BGR, BGRA or grayscale)
        max_dimension: Longer side is scaled down to this size
        enable_denoising: Apply a radius 1 Gaussian blur
        enable_contrast: Apply histogram equalization

    Returns:
        PreprocessedImage with an Otsu-thresholded binary image where dark
        strokes (walls, text) are 255 and the background is 0
    """
    gray = to_grayscale(image)

    height, width = gray.shape
    if max(width, height) > max_dimension:
        scale = max_dimension / max(width, height)
        width = int(width * scale)
        height = int(height * scale)
        gray = cv2.resize(gray, (width, height), interpolation=cv2.INTER_AREA)
        logger.info(f"Downscaled image to {width}x{height}")

    if enable_contrast:
        gray = cv2.equalizeHist(gray)

    if enable_denoising:
        gaussian_blur(gray, 1)

    threshold, binary = cv2.threshold(
        gray, 0, 255, cv2.THRESH_BINARY_INV + cv2.THRESH_OTSU
    )

    return PreprocessedImage(
        processed=gray,
        binary=binary,
        width=width,
        height=height,
        threshold=float(threshold)
    )
