"""Synthetic floor plans shared by the tests."""

import cv2
import numpy as np

from planextract.services.floor_plan_extractor import FloorPlanExtractor
from planextract.services.ocr_service import OCRService, RecognizedWord

PLAN_WIDTH = 400
PLAN_HEIGHT = 300


def make_floor_plan(width: int = PLAN_WIDTH, height: int = PLAN_HEIGHT) -> np.ndarray:
    """
    Grayscale plan: black walls on white paper.

    An outer wall along the image border and a vertical divider at
    x = width / 2 enclose two rooms.
    """
    image = np.full((height, width), 255, dtype=np.uint8)
    cv2.rectangle(image, (0, 0), (width - 1, height - 1), 0, thickness=8)
    cv2.line(image, (width // 2, 0), (width // 2, height - 1), 0, thickness=6)
    return image


def make_binary_plan(width: int = PLAN_WIDTH, height: int = PLAN_HEIGHT) -> np.ndarray:
    """Binary version of make_floor_plan: walls 255, background 0."""
    binary = np.zeros((height, width), dtype=np.uint8)
    binary[:4, :] = 255
    binary[-4:, :] = 255
    binary[:, :4] = 255
    binary[:, -4:] = 255
    binary[:, width // 2 - 3:width // 2 + 3] = 255
    return binary


def encode_png(image: np.ndarray) -> bytes:
    ok, buffer = cv2.imencode(".png", image)
    assert ok
    return buffer.tobytes()


def word(text: str, confidence: float, center_x: float, center_y: float,
         width: float = 40, height: float = 12) -> RecognizedWord:
    return RecognizedWord(
        text=text,
        confidence=confidence,
        x0=center_x - width / 2,
        y0=center_y - height / 2,
        x1=center_x + width / 2,
        y1=center_y + height / 2
    )


class FakeRecognizer:
    """Recognizer returning fixed words."""

    def __init__(self, words=None, error=None):
        self.words = list(words or [])
        self.error = error
        self.closed = False
        self.images = []

    def recognize(self, image):
        self.images.append(image)
        if self.error is not None:
            raise self.error
        return self.words

    def close(self):
        self.closed = True


# Labels placed for make_floor_plan: a name in each room and a length
# label beside the top and bottom walls
PLAN_WORDS = [
    word("KÜCHE", 92, 100, 150),
    word("Bad", 88, 300, 150),
    word("4,00", 90, 100, 20),
    word("4,00", 85, 300, 280),
]


def make_extractor(words=PLAN_WORDS, error=None, config=None):
    """Extractor whose OCR returns fixed words (or raises error)."""
    service = OCRService(lambda: FakeRecognizer(words, error=error))
    if config is None:
        return FloorPlanExtractor(ocr_service=service)
    return FloorPlanExtractor(ocr_service=service, config=config)
