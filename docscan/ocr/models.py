from dataclasses import dataclass, field
from enum import Enum

from docscan.geometry.transform import Rect


class RecognitionTier(str, Enum):
    """Which recognition tier produced a page result."""

    BOXES = "boxes"
    TEXT_ONLY = "text_only"


@dataclass(frozen=True)
class OcrWord:
    """A recognized token located on the raster it was recognized from.

    ``image_width``/``image_height`` are the size of that raster, which may
    differ from the page image at export time.
    """

    text: str
    box: Rect
    confidence: float
    image_width: int
    image_height: int


@dataclass(frozen=True)
class OcrPageResult:
    """Output of recognizing one page image."""

    full_text: str
    words: list[OcrWord] = field(default_factory=list)
    image_width: int = 0
    image_height: int = 0
    tier: RecognitionTier = RecognitionTier.BOXES

    @property
    def has_boxes(self) -> bool:
        return self.tier is RecognitionTier.BOXES and bool(self.words)
