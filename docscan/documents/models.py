import time
import uuid
from dataclasses import dataclass, field
from enum import Enum

from docscan.documents.naming import default_doc_title
from docscan.ocr.models import OcrWord

ROTATIONS = (0, 90, 180, 270)


class OcrStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


class PageFilter(str, Enum):
    COLOR = "color"
    GRAYSCALE = "grayscale"
    BW = "bw"


class ExportQuality(str, Enum):
    COLOR_HIGH = "color-high"
    COLOR_MEDIUM = "color-medium"
    GRAYSCALE = "grayscale"


@dataclass(frozen=True)
class OcrProgress:
    processed: int
    total: int

    def __post_init__(self) -> None:
        if self.processed < 0 or self.total < 0 or self.processed > self.total:
            raise ValueError(
                f"Invalid OCR progress {self.processed}/{self.total}"
            )


@dataclass
class Page:
    """One scanned or imported page of a document."""

    id: str
    uri: str
    rotation: int = 0
    filter: PageFilter = PageFilter.COLOR
    auto_contrast: bool = False
    width: int | None = None
    height: int | None = None
    ocr_text: str | None = None
    ocr_boxes: list[OcrWord] | None = None
    processed_uri: str | None = None
    source_page_index: int | None = None

    def __post_init__(self) -> None:
        if self.rotation not in ROTATIONS:
            raise ValueError(f"Rotation must be one of {ROTATIONS}, got {self.rotation}")

    @property
    def image_path(self) -> str:
        """Image used for both OCR and export; the processed copy wins when present."""
        return self.processed_uri or self.uri

    @property
    def has_visual_edits(self) -> bool:
        return self.rotation != 0 or self.filter is not PageFilter.COLOR or self.auto_contrast


@dataclass
class Document:
    """A multi-page scanned document and its OCR state."""

    id: str
    title: str
    created_at: int
    pages: list[Page] = field(default_factory=list)
    folder_id: str | None = None
    ocr_status: OcrStatus = OcrStatus.IDLE
    ocr_progress: OcrProgress | None = None
    ocr_excerpt: str | None = None
    original_pdf_path: str | None = None
    original_page_count: int | None = None
    export_quality: ExportQuality | None = None

    def find_page(self, page_id: str) -> Page | None:
        return next((p for p in self.pages if p.id == page_id), None)


def new_document(title: str | None = None) -> Document:
    now_ms = int(time.time() * 1000)
    return Document(
        id=uuid.uuid4().hex,
        title=title or default_doc_title(now_ms),
        created_at=now_ms,
    )


def new_page(uri: str, width: int | None = None, height: int | None = None) -> Page:
    return Page(id=uuid.uuid4().hex, uri=uri, width=width, height=height)
