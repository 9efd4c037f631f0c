"""OCR service for extracting labels from floor plan images."""

import logging
from typing import Callable, List, Optional, Protocol
from dataclasses import dataclass, field

import numpy as np

from planextract.core.exceptions import OCRError
from planextract.services.text_parsing import (
    BoundingBox,
    TextToken,
    TokenType,
    SUPERSCRIPTS,
    make_token,
)

logger = logging.getLogger(__name__)

# Lazy import for the heavy library
_pytesseract = None

CHAR_WHITELIST = (
    "0123456789.,/" + SUPERSCRIPTS +
    "ABCDEFGHIJKLMNOPQRSTUVWXYZÄÖÜß"
    "abcdefghijklmnopqrstuvwxyzäöü "
)


def get_pytesseract():
    """Lazy import of pytesseract."""
    global _pytesseract
    if _pytesseract is None:
        try:
            import pytesseract
            _pytesseract = pytesseract
        except ImportError:
            raise ImportError("pytesseract is required. Install with: pip install pytesseract")
    return _pytesseract


@dataclass
class RecognizedWord:
    """Raw word from a text recognizer."""
    text: str
    confidence: float  # 0-100
    x0: float
    y0: float
    x1: float
    y1: float


class TextRecognizer(Protocol):
    def recognize(self, image: np.ndarray) -> List[RecognizedWord]: ...

    def close(self) -> None: ...


class TesseractRecognizer:
    """Text recognizer backed by the Tesseract CLI."""

    def __init__(
        self,
        languages: str = "deu+eng",
        page_seg_mode: int = 11,  # Sparse text mode
        char_whitelist: str = CHAR_WHITELIST
    ):
        self.languages = languages
        self.page_seg_mode = page_seg_mode
        self.char_whitelist = char_whitelist

    @property
    def config(self) -> str:
        # Spaces cannot be passed through the CLI config string
        whitelist = self.char_whitelist.replace(" ", "")
        return f"--psm {self.page_seg_mode} -c tessedit_char_whitelist={whitelist}"

    def recognize(self, image: np.ndarray) -> List[RecognizedWord]:
        pytesseract = get_pytesseract()

        data = pytesseract.image_to_data(
            image,
            lang=self.languages,
            config=self.config,
            output_type=pytesseract.Output.DICT
        )
        return self.words_from_data(data)

    @staticmethod
    def words_from_data(data: dict) -> List[RecognizedWord]:
        """Convert pytesseract image_to_data output to words."""
        words = []

        for i in range(len(data["text"])):
            text = str(data["text"][i]).strip()
            conf = float(data["conf"][i])

            # Layout rows (blocks, lines) carry conf -1
            if not text or conf < 0:
                continue

            left, top = data["left"][i], data["top"][i]
            words.append(RecognizedWord(
                text=text,
                confidence=conf,
                x0=left,
                y0=top,
                x1=left + data["width"][i],
                y1=top + data["height"][i]
            ))

        return words

    def close(self) -> None:
        # Each call runs its own tesseract process
        pass


@dataclass
class OCRResult:
    """Classified text found on a floor plan."""
    full_text: str = ""
    words: List[TextToken] = field(default_factory=list)

    @property
    def dimensions(self) -> List[TextToken]:
        return [w for w in self.words if w.type is TokenType.DIMENSION]

    @property
    def room_names(self) -> List[TextToken]:
        return [w for w in self.words if w.type is TokenType.ROOM_NAME]

    @property
    def areas(self) -> List[TextToken]:
        return [w for w in self.words if w.type is TokenType.AREA]


class OCRService:
    """Run a text recognizer and classify what it finds."""

    def __init__(self, recognizer_factory: Optional[Callable[[], TextRecognizer]] = None):
        """
        Args:
            recognizer_factory: Creates a recognizer per extraction;
                defaults to TesseractRecognizer
        """
        self.recognizer_factory = recognizer_factory or TesseractRecognizer

    def extract_text(self, image: np.ndarray) -> OCRResult:
        """
        Recognize and classify text.

        Args:
            image: Preprocessed grayscale image

        Returns:
            OCRResult with tokens tagged as dimension, room name, area or unknown

        Raises:
            OCRError: If the recognizer fails
        """
        recognizer = None
        try:
            recognizer = self.recognizer_factory()
            raw_words = recognizer.recognize(image)
        except Exception as e:
            raise OCRError(str(e)) from e
        finally:
            if recognizer is not None:
                try:
                    recognizer.close()
                except Exception as e:
                    logger.warning(f"Failed to close OCR recognizer: {e}")

        words = [
            make_token(
                w.text,
                w.confidence,
                BoundingBox.from_corners(w.x0, w.y0, w.x1, w.y1)
            )
            for w in raw_words
            if w.text.strip()
        ]

        result = OCRResult(
            full_text=" ".join(w.text for w in words),
            words=words
        )

        logger.info(
            f"OCR: {len(words)} words, {len(result.dimensions)} dimensions, "
            f"{len(result.room_names)} room names, {len(result.areas)} areas"
        )

        return result
