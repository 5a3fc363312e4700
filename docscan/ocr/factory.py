from docscan.config.settings import Settings
from docscan.ocr.base import BaseRecognitionAdapter
from docscan.ocr.example_adapter import ExampleRecognitionAdapter
from docscan.ocr.openai_adapter import OpenAITextRecognitionAdapter
from docscan.ocr.recognizer import TieredRecognizer
from docscan.ocr.tesseract_adapter import TesseractRecognitionAdapter


class RecognizerFactory:
    """Creates the two-tier recognizer from settings."""

    PRIMARY_ENGINES = ("tesseract", "example", "none")
    FALLBACK_ENGINES = ("openai", "example", "none")

    @classmethod
    def create(cls, settings: Settings) -> TieredRecognizer:
        return TieredRecognizer(
            primary=cls._create_primary(settings),
            fallback=cls._create_fallback(settings),
            timeout_seconds=float(settings.ocr_timeout_seconds),
        )

    @classmethod
    def _create_primary(cls, settings: Settings) -> BaseRecognitionAdapter | None:
        engine = settings.ocr_primary_engine.lower()
        if engine == "tesseract":
            return TesseractRecognitionAdapter(
                languages=settings.ocr_languages,
                tesseract_cmd=settings.tesseract_cmd,
                timeout_seconds=settings.ocr_timeout_seconds,
            )
        if engine == "example":
            return ExampleRecognitionAdapter()
        if engine == "none":
            return None
        raise ValueError(
            f"Unknown OCR engine '{engine}'. Choose from: {list(cls.PRIMARY_ENGINES)}"
        )

    @classmethod
    def _create_fallback(cls, settings: Settings) -> BaseRecognitionAdapter | None:
        engine = settings.ocr_fallback_engine.lower()
        if engine == "openai":
            if not settings.openai_api_key:
                raise ValueError("openai_api_key is required for ocr_fallback_engine=openai")
            return OpenAITextRecognitionAdapter(
                api_key=settings.openai_api_key,
                model=settings.openai_model_name,
                timeout_seconds=settings.openai_timeout_seconds,
            )
        if engine == "example":
            return ExampleRecognitionAdapter()
        if engine == "none":
            return None
        raise ValueError(
            f"Unknown OCR fallback engine '{engine}'. Choose from: {list(cls.FALLBACK_ENGINES)}"
        )
