from pathlib import Path

import pytest
from PIL import Image, ImageDraw, ImageFont

from docscan.ocr.models import RecognitionTier
from docscan.ocr.tesseract_adapter import TesseractRecognitionAdapter

pytestmark = pytest.mark.integration


def _text_image(path: Path, text: str) -> Path:
    image = Image.new("RGB", (1200, 300), "white")
    draw = ImageDraw.Draw(image)
    draw.text((60, 100), text, fill="black", font=ImageFont.load_default(size=80))
    image.save(path, format="PNG")
    return path


class TestTesseractRecognition:
    def test_recognizes_words_with_boxes(self, tmp_path: Path, tesseract_available: None) -> None:
        image = _text_image(tmp_path / "invoice.png", "INVOICE 2024")

        result = TesseractRecognitionAdapter(languages="eng").recognize(str(image))

        assert result.tier is RecognitionTier.BOXES
        assert "INVOICE" in result.full_text.upper()
        word = next(w for w in result.words if "INVOICE" in w.text.upper())
        assert (word.image_width, word.image_height) == (1200, 300)
        assert 0 < word.box.x < 600
        assert 50 < word.box.y + word.box.height < 250
