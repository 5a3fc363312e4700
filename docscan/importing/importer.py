import shutil
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from docscan.documents.models import Document, ExportQuality, new_document, new_page
from docscan.documents.naming import filename_from_uri, strip_extension
from docscan.imaging.base import BasePdfRasterizer
from docscan.imaging.page_processor import PageImageProcessor
from docscan.importing.exceptions import DocumentImportError
from docscan.logging.logger import Log
from docscan.store.base import BaseDocumentStore

DEFAULT_IMPORT_DPI = 250


def document_dir(work_dir: Path, document_id: str) -> Path:
    """Directory holding a document's copied sources: {work_dir}/documents/{id}"""
    return work_dir / "documents" / document_id


class DocumentImporter:
    """Turns PDFs and image files into stored documents."""

    def __init__(
        self,
        store: BaseDocumentStore,
        rasterizer: BasePdfRasterizer,
        page_processor: PageImageProcessor,
        work_dir: Path,
        import_dpi: int = DEFAULT_IMPORT_DPI,
        export_quality: ExportQuality | None = None,
    ) -> None:
        self._store = store
        self._rasterizer = rasterizer
        self._page_processor = page_processor
        self._work_dir = work_dir
        self._import_dpi = import_dpi
        self._export_quality = export_quality

    def import_pdf(self, pdf_path: Path, title: str | None = None) -> Document:
        """Copy a PDF, rasterize every page and store the new document.

        The copy is kept as the document's original so an unedited export
        can hand it back untouched.

        Raises:
            DocumentImportError: if the file is missing or cannot be copied.
            RasterizationError: if the PDF cannot be rendered.
        """
        if not pdf_path.is_file():
            raise DocumentImportError(f"File not found: {pdf_path}")

        document = new_document(title or strip_extension(filename_from_uri(str(pdf_path))))
        document.export_quality = self._export_quality
        target_dir = document_dir(self._work_dir, document.id)
        original = self._copy(pdf_path, target_dir / "original.pdf")

        rasters = self._rasterizer.rasterize(original, self._import_dpi)
        for index, raster in enumerate(rasters):
            width, height = _image_size(raster)
            page = new_page(str(raster), width, height)
            page.source_page_index = index
            document.pages.append(page)

        document.original_pdf_path = str(original)
        document.original_page_count = len(rasters)
        self._store.put(document)
        Log.info(
            "Imported PDF",
            document_id=document.id,
            pages=len(rasters),
            dpi=self._import_dpi,
        )
        return document

    def import_images(self, image_paths: list[Path], title: str | None = None) -> Document:
        """Create an image-based document with one page per file, in the given order.

        Raises:
            DocumentImportError: if an image is missing or unreadable.
        """
        document = new_document(title)
        document.export_quality = self._export_quality
        target_dir = document_dir(self._work_dir, document.id)
        for index, image_path in enumerate(image_paths):
            if not image_path.is_file():
                raise DocumentImportError(f"File not found: {image_path}")
            copy = self._copy(image_path, target_dir / f"page-{index}{image_path.suffix.lower()}")
            width, height = _image_size(copy)
            page = new_page(str(copy), width, height)
            document.pages.append(self._page_processor.apply_final_filter(page, document))

        self._store.put(document)
        Log.info("Imported images", document_id=document.id, pages=len(document.pages))
        return document

    @staticmethod
    def _copy(source: Path, target: Path) -> Path:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
        except OSError as exc:
            raise DocumentImportError(f"Could not copy {source}: {exc}") from exc
        return target


def _image_size(path: Path) -> tuple[int, int]:
    try:
        with Image.open(path) as img:
            return img.size
    except (OSError, UnidentifiedImageError) as exc:
        raise DocumentImportError(f"Cannot read image {path}: {exc}") from exc
