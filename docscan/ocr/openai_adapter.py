import base64
from pathlib import Path

import httpx
import openai
from PIL import Image, UnidentifiedImageError

from docscan.ocr.base import BaseRecognitionAdapter
from docscan.ocr.exceptions import (
    RecognitionEngineError,
    RecognitionError,
    RecognitionTimeoutError,
)
from docscan.ocr.models import OcrPageResult, RecognitionTier
from docscan.ocr.validator import validate_and_build_page

_TRANSCRIBE_PROMPT = (
    "Transcribe all text visible in this scanned page. "
    "Return only the text, preserving line breaks. Return nothing if there is no text."
)
_MIME_TYPES = {".png": "image/png", ".webp": "image/webp", ".gif": "image/gif"}


class OpenAITextRecognitionAdapter(BaseRecognitionAdapter):
    """Text-only recognition through an OpenAI-compatible vision chat API.

    The model gives no word positions, so results are tagged text-only and
    never produce an invisible overlay.
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )
        self._model = model

    def recognize(self, image_path: str) -> OcrPageResult:
        width, height = self._image_size(image_path)
        text = self._transcribe(image_path)
        return validate_and_build_page(
            {"imgW": width, "imgH": height, "words": [], "fullText": text},
            RecognitionTier.TEXT_ONLY,
        )

    @staticmethod
    def _image_size(image_path: str) -> tuple[int, int]:
        try:
            with Image.open(image_path) as img:
                return img.size
        except (OSError, UnidentifiedImageError) as exc:
            raise RecognitionEngineError(f"Cannot load image at {image_path}: {exc}") from exc

    def _transcribe(self, image_path: str) -> str:
        path = Path(image_path)
        mime = _MIME_TYPES.get(path.suffix.lower(), "image/jpeg")
        encoded = base64.b64encode(path.read_bytes()).decode("ascii")
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                temperature=0.0,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": _TRANSCRIBE_PROMPT},
                            {
                                "type": "image_url",
                                "image_url": {"url": f"data:{mime};base64,{encoded}"},
                            },
                        ],
                    }
                ],
            )
        except (openai.APITimeoutError, httpx.TimeoutException) as exc:
            raise RecognitionTimeoutError(f"OCR provider timed out: {exc}") from exc
        except (openai.APIConnectionError, httpx.ConnectError) as exc:
            raise RecognitionEngineError(f"OCR provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise RecognitionEngineError(f"OCR provider API error: {exc}") from exc

        if not response.choices:
            raise RecognitionError("OCR provider returned no choices")
        return (response.choices[0].message.content or "").strip()
