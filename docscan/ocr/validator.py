"""Parses raw recognition payloads into the typed OCR result model.

Adapters hand back plain dicts shaped like::

    {"imgW": 1000, "imgH": 1400,
     "words": [{"text": "Hello", "x": 100, "y": 50, "width": 200, "height": 40, "conf": 0.98}],
     "fullText": "Hello"}

``fullText`` is optional; when absent it is the word texts joined by spaces.
"""

import math
from typing import Any

from docscan.geometry.transform import Rect
from docscan.ocr.exceptions import RecognitionValidationError
from docscan.ocr.models import OcrPageResult, OcrWord, RecognitionTier

_BOX_FIELDS = ("x", "y", "width", "height")


def validate_and_build_page(
    data: dict[str, Any],
    tier: RecognitionTier = RecognitionTier.BOXES,
) -> OcrPageResult:
    """Validate a raw adapter payload and build an OcrPageResult.

    Raises:
        RecognitionValidationError: on any shape or value violation.
    """
    if not isinstance(data, dict):
        raise RecognitionValidationError("Recognition payload must be an object")
    image_width = _build_dimension(data.get("imgW"), "imgW")
    image_height = _build_dimension(data.get("imgH"), "imgH")
    words = _build_words(data.get("words", []), image_width, image_height)
    if tier is RecognitionTier.TEXT_ONLY and words:
        raise RecognitionValidationError("Text-only results must not carry word boxes")
    full_text = data.get("fullText")
    if full_text is None:
        full_text = " ".join(w.text for w in words)
    if not isinstance(full_text, str):
        raise RecognitionValidationError("'fullText' must be a string")
    return OcrPageResult(
        full_text=full_text,
        words=words,
        image_width=image_width,
        image_height=image_height,
        tier=tier,
    )


def _build_dimension(raw: Any, name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or not math.isfinite(raw):
        raise RecognitionValidationError(f"'{name}' must be a number")
    if raw < 0:
        raise RecognitionValidationError(f"'{name}' must not be negative")
    return int(round(raw))


def _build_words(raw: Any, image_width: int, image_height: int) -> list[OcrWord]:
    if not isinstance(raw, list):
        raise RecognitionValidationError("'words' must be a list")
    return [_build_word(item, i, image_width, image_height) for i, item in enumerate(raw)]


def _build_word(raw: Any, index: int, image_width: int, image_height: int) -> OcrWord:
    if not isinstance(raw, dict):
        raise RecognitionValidationError(f"Word at index {index} must be an object")
    text = raw.get("text")
    if not isinstance(text, str):
        raise RecognitionValidationError(f"Word at index {index}: 'text' must be a string")
    values: dict[str, float] = {}
    for name in _BOX_FIELDS:
        value = raw.get(name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise RecognitionValidationError(
                f"Word at index {index}: '{name}' must be a finite number"
            )
        values[name] = float(value)
    if values["width"] < 0 or values["height"] < 0:
        raise RecognitionValidationError(f"Word at index {index}: box size must not be negative")
    conf = raw.get("conf", 0.0)
    if conf is None:
        conf = 0.0
    if isinstance(conf, bool) or not isinstance(conf, (int, float)):
        raise RecognitionValidationError(f"Word at index {index}: 'conf' must be a number")
    return OcrWord(
        text=text,
        box=Rect(values["x"], values["y"], values["width"], values["height"]),
        confidence=float(conf),
        image_width=image_width,
        image_height=image_height,
    )
