from abc import ABC, abstractmethod

from docscan.ocr.models import OcrPageResult


class BaseRecognitionAdapter(ABC):
    """Contract for all OCR engine adapters.

    Adapters are synchronous and may block; callers run them in a worker
    thread under a timeout.
    """

    @abstractmethod
    def recognize(self, image_path: str) -> OcrPageResult:
        """Recognize the text on one page image.

        Args:
            image_path: Filesystem path of the image to read.

        Returns:
            OcrPageResult parsed from the engine output.

        Raises:
            RecognitionError: or one of its subclasses on any failure.
        """
