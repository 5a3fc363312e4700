"""Builds searchable PDFs from scanned pages.

Imported PDFs without visual or structural edits are returned untouched.
Everything else is rebuilt with PyMuPDF: one page per final raster (one
pixel per point) and, once OCR is done, an almost transparent text layer
placed over each recognized word.
"""

import asyncio
import io
import os
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path

import pymupdf
from PIL import Image, UnidentifiedImageError

from docscan.documents.models import Document, OcrStatus, Page
from docscan.documents.naming import to_fs_path
from docscan.geometry.transform import OverlayPlacement, Rect, image_box_to_pdf_rect
from docscan.imaging.base import FilterOptions
from docscan.imaging.exceptions import ImageFilterError
from docscan.imaging.page_processor import PageImageProcessor
from docscan.logging.logger import Log
from docscan.pdf.exceptions import (
    EmptyDocumentError,
    ImageEmbedError,
    MissingSourceImageError,
    PdfWriteError,
)
from docscan.pdf.quality import ExportProfile, get_export_profile

DEFAULT_OVERLAY_OPACITY = 0.01
# Noto Sans from pymupdf-fonts; covers Latin, Greek and Cyrillic.
DEFAULT_OVERLAY_FONT = "notos"
FALLBACK_OVERLAY_FONT = "helv"
OVERLAY_FONT_ALIAS = "ocr-text"


@dataclass(frozen=True)
class PageRaster:
    path: Path
    width: int
    height: int


@dataclass(frozen=True)
class OverlayFont:
    """Font used for the text layer; ``buffer`` is None for base-14 fonts."""

    name: str
    font: pymupdf.Font
    buffer: bytes | None = None


def fallback_overlay_font() -> OverlayFont:
    return OverlayFont(FALLBACK_OVERLAY_FONT, pymupdf.Font(FALLBACK_OVERLAY_FONT))


def has_visual_edits(document: Document) -> bool:
    return any(page.has_visual_edits for page in document.pages)


def has_structural_edits(document: Document) -> bool:
    """True when pages were removed, added or reordered since the PDF was imported."""
    if document.original_page_count is None:
        return False
    indices = [page.source_page_index for page in document.pages]
    return indices != list(range(document.original_page_count))


def should_draw_overlay(document: Document) -> bool:
    """Only accurate word boxes get an overlay; text-only results never do."""
    return document.ocr_status is OcrStatus.DONE and any(
        page.ocr_boxes for page in document.pages
    )


class PdfAssembler:
    """Produces the PDF for the current visual state of a document."""

    def __init__(
        self,
        page_processor: PageImageProcessor,
        *,
        overlay_opacity: float = DEFAULT_OVERLAY_OPACITY,
        overlay_font: str = DEFAULT_OVERLAY_FONT,
        overlay_font_file: str = "",
    ) -> None:
        self._page_processor = page_processor
        self._overlay_opacity = overlay_opacity
        self._overlay_font = overlay_font
        self._overlay_font_file = overlay_font_file

    async def assemble(self, document: Document, output_path: Path) -> Path:
        """Return the path of a PDF for ``document``.

        This is either the untouched imported PDF or ``output_path`` holding a
        freshly built one. Page rasters rendered for the export live in a
        scratch directory that is removed before returning.

        Raises:
            PdfAssemblyError: or a subclass when the PDF cannot be produced.
        """
        original = self.reusable_original(document)
        if original is not None:
            Log.info("Returning original imported PDF", document_id=document.id, path=original)
            return original

        if not document.pages:
            raise EmptyDocumentError(f"Document '{document.title}' has no pages to export")

        profile = get_export_profile(document.export_quality)
        overlay = should_draw_overlay(document)
        with tempfile.TemporaryDirectory(prefix="docscan-export-") as scratch:
            rasters = [
                await self._resolve_page_image(page, profile, Path(scratch))
                for page in document.pages
            ]
            Log.info(
                "Building PDF from page images",
                document_id=document.id,
                pages=len(rasters),
                overlay=overlay,
            )
            await asyncio.to_thread(self._build, document.pages, rasters, overlay, output_path)
        return output_path

    def reusable_original(self, document: Document) -> Path | None:
        if not document.original_pdf_path:
            return None
        if has_visual_edits(document):
            Log.info("Visual edits present, rebuilding PDF", document_id=document.id)
            return None
        if has_structural_edits(document):
            Log.info("Pages changed since import, rebuilding PDF", document_id=document.id)
            return None
        path = Path(to_fs_path(document.original_pdf_path))
        if not path.is_file():
            Log.warning(
                "Original PDF missing, falling back to image export",
                document_id=document.id,
                path=path,
            )
            return None
        return path

    # ------------------------------------------------------------------
    # Page images
    # ------------------------------------------------------------------

    async def _resolve_page_image(
        self, page: Page, profile: ExportProfile, scratch_dir: Path
    ) -> PageRaster:
        if page.processed_uri:
            processed = Path(to_fs_path(page.processed_uri))
            if processed.is_file():
                return await asyncio.to_thread(_measure, processed)
            Log.warning("Processed image missing, rendering from source", page_id=page.id)

        source = Path(to_fs_path(page.uri))
        if not source.is_file():
            raise MissingSourceImageError(f"Page image not found: {source}")
        try:
            rendered = await asyncio.to_thread(
                self._page_processor.render,
                str(source),
                FilterOptions.for_page(page),
                profile,
                scratch_dir,
            )
        except ImageFilterError as exc:
            Log.warning(f"Image filter failed, using original image: {exc}", page_id=page.id)
            return await asyncio.to_thread(_measure, source)
        return PageRaster(rendered.path, rendered.width, rendered.height)

    # ------------------------------------------------------------------
    # PDF construction
    # ------------------------------------------------------------------

    def _build(
        self,
        pages: list[Page],
        rasters: list[PageRaster],
        overlay: bool,
        output_path: Path,
    ) -> None:
        font = self._load_overlay_font() if overlay else None
        with pymupdf.open() as pdf:  # type: ignore[no-untyped-call]
            for page, raster in zip(pages, rasters):
                pdf_page = pdf.new_page(width=raster.width, height=raster.height)
                _insert_image(pdf_page, raster)
                if font is not None and page.ocr_boxes:
                    font = self._draw_overlay(pdf_page, page, Rect(0, 0, raster.width, raster.height), font)
            _write(pdf, output_path)

    def _load_overlay_font(self) -> OverlayFont:
        try:
            if self._overlay_font_file:
                font = pymupdf.Font(fontfile=self._overlay_font_file)
            else:
                font = pymupdf.Font(self._overlay_font)
            return OverlayFont(OVERLAY_FONT_ALIAS, font, font.buffer)
        except Exception as exc:
            Log.warning(f"Overlay font unavailable, using {FALLBACK_OVERLAY_FONT}: {exc}")
            return fallback_overlay_font()

    def _draw_overlay(
        self, pdf_page: pymupdf.Page, page: Page, dest: Rect, font: OverlayFont
    ) -> OverlayFont:
        """Draw the page's words and return the font to use for later pages."""
        drawn = 0
        try:
            font = _embed_font(pdf_page, font)
            for word in page.ocr_boxes or []:
                text = word.text.strip()
                if not text:
                    continue
                try:
                    placement = image_box_to_pdf_rect(
                        word.box, word.image_width, word.image_height, dest
                    )
                    self._draw_word(pdf_page, text, placement, font)
                    drawn += 1
                except Exception as exc:
                    Log.warning(f"Skipping overlay word {text!r}: {exc}", page_id=page.id)
        except Exception as exc:
            Log.warning(f"Overlay failed for page: {exc}", page_id=page.id)
        Log.debug("Overlay drawn", page_id=page.id, words=drawn, font=font.name)
        return font

    def _draw_word(
        self, pdf_page: pymupdf.Page, text: str, placement: OverlayPlacement, font: OverlayFont
    ) -> None:
        # placement is in PDF space (bottom-left origin); MuPDF draws top-left.
        origin = pymupdf.Point(placement.x, placement.baseline_y) * pdf_page.transformation_matrix
        text_width = font.font.text_length(text, fontsize=placement.font_size)
        morph = None
        if text_width > 0 and placement.width > 0:
            morph = (origin, pymupdf.Matrix(placement.width / text_width, 1))
        pdf_page.insert_text(
            origin,
            text,
            fontsize=placement.font_size,
            fontname=font.name,
            color=(0, 0, 0),
            fill_opacity=self._overlay_opacity,
            stroke_opacity=self._overlay_opacity,
            morph=morph,
        )


def _embed_font(pdf_page: pymupdf.Page, font: OverlayFont) -> OverlayFont:
    if font.buffer is None:
        return font
    try:
        pdf_page.insert_font(fontname=font.name, fontbuffer=font.buffer)
    except Exception as exc:
        Log.warning(f"Embedding overlay font failed, using {FALLBACK_OVERLAY_FONT}: {exc}")
        return fallback_overlay_font()
    return font


def _measure(path: Path) -> PageRaster:
    try:
        with Image.open(path) as img:
            width, height = img.size
    except (OSError, UnidentifiedImageError) as exc:
        raise ImageEmbedError(f"Cannot read page image {path}: {exc}") from exc
    return PageRaster(path, width, height)


def _insert_image(pdf_page: pymupdf.Page, raster: PageRaster) -> None:
    try:
        pdf_page.insert_image(pdf_page.rect, filename=str(raster.path))
        return
    except Exception as exc:
        Log.warning(f"Embedding {raster.path} failed, retrying as PNG: {exc}")
    try:
        pdf_page.insert_image(pdf_page.rect, stream=_reencode_png(raster.path))
    except Exception as exc:
        raise ImageEmbedError(f"Could not embed page image {raster.path.name}: {exc}") from exc


def _reencode_png(path: Path) -> bytes:
    with Image.open(path) as img:
        buffer = io.BytesIO()
        img.convert("RGB").save(buffer, format="PNG")
    return buffer.getvalue()


def _write(pdf: pymupdf.Document, output_path: Path) -> None:
    tmp_path = output_path.with_name(f".{output_path.name}.{uuid.uuid4().hex}.tmp")
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        pdf.save(str(tmp_path), garbage=3, deflate=True)
        os.replace(tmp_path, output_path)
    except Exception as exc:
        tmp_path.unlink(missing_ok=True)
        raise PdfWriteError(f"Could not write PDF to {output_path}: {exc}") from exc
