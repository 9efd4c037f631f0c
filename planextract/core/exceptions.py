"""Typed errors raised by the extraction pipeline."""


class ExtractionError(Exception):
    """Fatal extraction failure with a stable machine-readable code."""

    NO_WALLS_DETECTED = "no_walls_detected"
    NO_ROOMS_DETECTED = "no_rooms_detected"
    OCR_FAILED = "ocr_failed"

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.message


class OCRError(ExtractionError):
    """Text recognition failed; wraps the recognizer's error."""

    def __init__(self, message: str):
        super().__init__(f"OCR failed: {message}", self.OCR_FAILED)
