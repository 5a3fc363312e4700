from collections import OrderedDict
from typing import Any

import pytesseract
from PIL import Image, UnidentifiedImageError

from docscan.logging.logger import Log
from docscan.ocr.base import BaseRecognitionAdapter
from docscan.ocr.exceptions import (
    RecognitionEngineError,
    RecognitionTimeoutError,
    UnsupportedLanguageError,
)
from docscan.ocr.models import OcrPageResult, RecognitionTier
from docscan.ocr.validator import validate_and_build_page

_LANGUAGE_ERROR_MARKERS = ("Failed loading language", "Error opening data file")


class TesseractRecognitionAdapter(BaseRecognitionAdapter):
    """Word-level recognition with pixel boxes using Tesseract."""

    def __init__(
        self,
        *,
        languages: str = "eng",
        tesseract_cmd: str = "",
        timeout_seconds: int = 30,
        config: str = "--oem 3 --psm 3",
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self._languages = "+".join(part for part in languages.replace(",", "+").split("+") if part)
        self._timeout_seconds = timeout_seconds
        self._config = config

    def recognize(self, image_path: str) -> OcrPageResult:
        image = self._open(image_path)
        data = self._image_to_data(image)
        payload = self._to_payload(data, image.width, image.height)
        result = validate_and_build_page(payload, RecognitionTier.BOXES)
        Log.debug(
            "Tesseract recognized page",
            image=image_path,
            words=len(result.words),
            chars=len(result.full_text),
        )
        return result

    @staticmethod
    def _open(image_path: str) -> Image.Image:
        try:
            with Image.open(image_path) as img:
                return img.convert("RGB")
        except (OSError, UnidentifiedImageError) as exc:
            raise RecognitionEngineError(f"Cannot load image at {image_path}: {exc}") from exc

    def _image_to_data(self, image: Image.Image) -> dict[str, list[Any]]:
        try:
            return pytesseract.image_to_data(
                image,
                lang=self._languages,
                config=self._config,
                timeout=self._timeout_seconds,
                output_type=pytesseract.Output.DICT,
            )
        except pytesseract.TesseractError as exc:
            if any(marker in exc.message for marker in _LANGUAGE_ERROR_MARKERS):
                raise UnsupportedLanguageError(
                    f"Tesseract has no model for '{self._languages}': {exc.message}"
                ) from exc
            raise RecognitionEngineError(f"Tesseract failed: {exc.message}") from exc
        except pytesseract.TesseractNotFoundError as exc:
            raise RecognitionEngineError(f"Tesseract is not installed: {exc}") from exc
        except RuntimeError as exc:
            if "timeout" in str(exc).lower():
                raise RecognitionTimeoutError(
                    f"Tesseract timed out after {self._timeout_seconds}s"
                ) from exc
            raise RecognitionEngineError(f"Tesseract failed: {exc}") from exc

    @staticmethod
    def _to_payload(data: dict[str, list[Any]], width: int, height: int) -> dict[str, Any]:
        words: list[dict[str, Any]] = []
        lines: OrderedDict[tuple[int, int, int], list[str]] = OrderedDict()
        for i, raw_text in enumerate(data.get("text", [])):
            text = str(raw_text).strip()
            conf = float(data["conf"][i])
            if not text or conf < 0:
                continue
            words.append(
                {
                    "text": text,
                    "x": int(data["left"][i]),
                    "y": int(data["top"][i]),
                    "width": int(data["width"][i]),
                    "height": int(data["height"][i]),
                    "conf": conf / 100.0,
                }
            )
            key = (int(data["block_num"][i]), int(data["par_num"][i]), int(data["line_num"][i]))
            lines.setdefault(key, []).append(text)
        return {
            "imgW": width,
            "imgH": height,
            "words": words,
            "fullText": "\n".join(" ".join(tokens) for tokens in lines.values()),
        }
