"""Example recognition adapter.

Use this module as a reference when adding engines: implement
BaseRecognitionAdapter, build a raw payload and let validate_and_build_page
turn it into the typed result. Register the engine in RecognizerFactory.
"""

from typing import Any, ClassVar

from PIL import Image, UnidentifiedImageError

from docscan.ocr.base import BaseRecognitionAdapter
from docscan.ocr.exceptions import RecognitionEngineError
from docscan.ocr.models import OcrPageResult, RecognitionTier
from docscan.ocr.validator import validate_and_build_page


class ExampleRecognitionAdapter(BaseRecognitionAdapter):
    """Lays out a fixed line of words near the top of the page.

    No engine involved. Useful for local development and tests.
    """

    DEFAULT_WORDS: ClassVar[tuple[str, ...]] = ("Example", "scanned", "text")

    def __init__(self, words: tuple[str, ...] | None = None) -> None:
        self._words = words if words is not None else self.DEFAULT_WORDS

    def recognize(self, image_path: str) -> OcrPageResult:
        try:
            with Image.open(image_path) as img:
                width, height = img.size
        except (OSError, UnidentifiedImageError) as exc:
            raise RecognitionEngineError(f"Cannot load image at {image_path}: {exc}") from exc
        return validate_and_build_page(self._payload(width, height), RecognitionTier.BOXES)

    def _payload(self, width: int, height: int) -> dict[str, Any]:
        line_height = max(height // 30, 1)
        word_width = max(width // (len(self._words) + 2), 1) if self._words else 0
        words = [
            {
                "text": text,
                "x": word_width * (i + 1),
                "y": line_height,
                "width": word_width - 4 if word_width > 4 else word_width,
                "height": line_height,
                "conf": 1.0,
            }
            for i, text in enumerate(self._words)
        ]
        return {"imgW": width, "imgH": height, "words": words}
