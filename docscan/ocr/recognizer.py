import asyncio
import dataclasses

from docscan.logging.logger import Log
from docscan.ocr.base import BaseRecognitionAdapter
from docscan.ocr.exceptions import (
    NoRecognizerAvailableError,
    RecognitionEngineError,
    RecognitionError,
    RecognitionTimeoutError,
)
from docscan.ocr.models import OcrPageResult, RecognitionTier

DEFAULT_TIMEOUT_SECONDS = 30.0


class TieredRecognizer:
    """Runs the box-producing engine first and a text-only engine as fallback.

    Each adapter call runs in a worker thread capped by ``timeout_seconds``.
    On timeout the thread is left to finish and its result is dropped.
    """

    def __init__(
        self,
        primary: BaseRecognitionAdapter | None,
        fallback: BaseRecognitionAdapter | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._primary = primary
        self._fallback = fallback
        self._timeout_seconds = timeout_seconds

    async def recognize(self, image_path: str) -> OcrPageResult:
        """Recognize one page image.

        Raises:
            RecognitionError: the primary tier's error when every tier failed.
        """
        primary_error: RecognitionError | None = None
        if self._primary is not None:
            try:
                return await self._run(self._primary, image_path)
            except RecognitionError as exc:
                Log.warning(f"Primary OCR failed, trying fallback: {exc}", image=image_path)
                primary_error = exc

        if self._fallback is None:
            raise primary_error or NoRecognizerAvailableError("No OCR engine configured")

        try:
            result = await self._run(self._fallback, image_path)
        except RecognitionError as exc:
            Log.warning(f"Fallback OCR failed: {exc}", image=image_path)
            if primary_error is None:
                raise
            raise primary_error from exc
        Log.info("Fallback OCR produced text without word boxes", image=image_path)
        return dataclasses.replace(result, words=[], tier=RecognitionTier.TEXT_ONLY)

    async def _run(self, adapter: BaseRecognitionAdapter, image_path: str) -> OcrPageResult:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(adapter.recognize, image_path),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise RecognitionTimeoutError(
                f"{type(adapter).__name__} timed out after {self._timeout_seconds}s"
            ) from exc
        except RecognitionError:
            raise
        except Exception as exc:
            raise RecognitionEngineError(f"{type(adapter).__name__} failed: {exc}") from exc
