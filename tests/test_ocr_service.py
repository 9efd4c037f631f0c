import unittest

import numpy as np

from planextract.core.exceptions import ExtractionError, OCRError
from planextract.services.ocr_service import OCRService, TesseractRecognizer
from planextract.services.text_parsing import TokenType
from tests.fixtures import FakeRecognizer, PLAN_WORDS, word

IMAGE = np.zeros((20, 20), dtype=np.uint8)


class TestTesseractRecognizer(unittest.TestCase):

    def test_words_from_data(self):
        data = {
            "text": ["", "KÜCHE", " ", "3,80", "noise"],
            "conf": ["-1", "91.5", "-1", 88, -1],
            "left": [0, 10, 0, 50, 0],
            "top": [0, 20, 0, 60, 0],
            "width": [100, 40, 0, 30, 5],
            "height": [100, 12, 0, 10, 5],
        }

        words = TesseractRecognizer.words_from_data(data)

        self.assertEqual([w.text for w in words], ["KÜCHE", "3,80"])
        self.assertEqual(words[0].confidence, 91.5)
        self.assertEqual((words[0].x0, words[0].y0, words[0].x1, words[0].y1), (10, 20, 50, 32))

    def test_config(self):
        recognizer = TesseractRecognizer(page_seg_mode=6, char_whitelist="AB C")
        self.assertEqual(recognizer.config, "--psm 6 -c tessedit_char_whitelist=ABC")


class TestOCRService(unittest.TestCase):

    def test_classifies_words(self):
        recognizer = FakeRecognizer(PLAN_WORDS + [word("19.26 m²", 80, 100, 180), word("  ", 90, 0, 0)])
        service = OCRService(lambda: recognizer)

        result = service.extract_text(IMAGE)

        self.assertEqual(len(result.words), 5)
        self.assertEqual([t.text for t in result.room_names], ["KÜCHE", "Bad"])
        self.assertEqual([t.length_cm for t in result.dimensions], [400, 400])
        self.assertEqual([t.area_m2 for t in result.areas], [19.26])
        self.assertEqual(result.full_text, "KÜCHE Bad 4,00 4,00 19.26 m²")
        self.assertTrue(recognizer.closed)
        self.assertIs(recognizer.images[0], IMAGE)

    def test_token_boxes(self):
        service = OCRService(lambda: FakeRecognizer([word("KELLER", 90, 100, 50, width=40, height=10)]))

        token = service.extract_text(IMAGE).words[0]

        self.assertIs(token.type, TokenType.ROOM_NAME)
        self.assertEqual((token.bbox.x, token.bbox.y), (80, 45))
        self.assertEqual((token.bbox.center_x, token.bbox.center_y), (100, 50))

    def test_recognizer_failure(self):
        recognizer = FakeRecognizer(error=RuntimeError("tesseract is not installed"))
        service = OCRService(lambda: recognizer)

        with self.assertRaises(OCRError) as ctx:
            service.extract_text(IMAGE)

        self.assertIsInstance(ctx.exception, ExtractionError)
        self.assertEqual(ctx.exception.code, ExtractionError.OCR_FAILED)
        self.assertEqual(str(ctx.exception), "OCR failed: tesseract is not installed")
        self.assertTrue(recognizer.closed)

    def test_factory_failure(self):
        def factory():
            raise RuntimeError("no language data")

        with self.assertRaises(OCRError):
            OCRService(factory).extract_text(IMAGE)

    def test_close_failure_is_logged(self):
        class BrokenClose(FakeRecognizer):
            def close(self):
                raise RuntimeError("already closed")

        service = OCRService(lambda: BrokenClose(PLAN_WORDS))

        with self.assertLogs("planextract.services.ocr_service", level="WARNING"):
            result = service.extract_text(IMAGE)

        self.assertEqual(len(result.words), 4)


if __name__ == '__main__':
    unittest.main()
