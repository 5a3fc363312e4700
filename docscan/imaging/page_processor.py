import dataclasses
import uuid
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from docscan.documents.models import Document, Page
from docscan.documents.naming import to_fs_path
from docscan.imaging.base import BaseImageFilter, FilterOptions
from docscan.imaging.exceptions import ImageFilterError
from docscan.logging.logger import Log
from docscan.pdf.quality import ExportProfile, get_export_profile


@dataclass(frozen=True)
class RenderedImage:
    path: Path
    width: int
    height: int


class PageImageProcessor:
    """Produces the final page raster shared by OCR and PDF export.

    Filtering goes through the image filter collaborator; resizing and JPEG
    encoding follow the document's export quality profile.
    """

    def __init__(self, image_filter: BaseImageFilter, output_dir: Path) -> None:
        self._image_filter = image_filter
        self._output_dir = output_dir

    def render(
        self,
        image_path: str,
        options: FilterOptions,
        profile: ExportProfile,
        output_dir: Path | None = None,
    ) -> RenderedImage:
        """Filter, bound and encode one page image.

        The result is written to ``output_dir`` (the processor's own directory
        by default). The filter's intermediate file is removed once read.

        Raises:
            ImageFilterError: if any stage fails.
        """
        filtered = self._image_filter.process(image_path, options)
        try:
            with Image.open(filtered) as img:
                image = img.convert("L") if profile.grayscale else img.convert("RGB")
        except (OSError, UnidentifiedImageError) as exc:
            raise ImageFilterError(f"Cannot load filtered image {filtered}: {exc}") from exc
        finally:
            if Path(filtered) != Path(image_path):
                Path(filtered).unlink(missing_ok=True)

        image.thumbnail((profile.max_width, profile.max_height), Image.Resampling.LANCZOS)
        target_dir = output_dir or self._output_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        out_path = target_dir / f"page-{uuid.uuid4().hex}.jpg"
        try:
            image.save(out_path, format="JPEG", quality=profile.pillow_quality)
        except OSError as exc:
            raise ImageFilterError(f"Cannot write page image {out_path}: {exc}") from exc
        return RenderedImage(path=out_path, width=image.width, height=image.height)

    def apply_final_filter(self, page: Page, document: Document) -> Page:
        """Return a copy of ``page`` with ``processed_uri`` set to its final raster.

        Pages of imported PDFs and pages already processed are returned as is.
        A processing failure is logged and the page is returned unchanged.
        """
        if document.original_pdf_path:
            Log.debug("Skipping final filter for imported PDF page", page_id=page.id)
            return page
        if page.processed_uri:
            return page

        profile = get_export_profile(document.export_quality)
        try:
            rendered = self.render(to_fs_path(page.uri), FilterOptions.for_page(page), profile)
        except ImageFilterError as exc:
            Log.warning(f"Final filter failed, keeping original image: {exc}", page_id=page.id)
            return page

        Log.info(
            "Processed page image",
            page_id=page.id,
            width=rendered.width,
            height=rendered.height,
            quality=profile.jpeg_quality,
        )
        return dataclasses.replace(
            page,
            processed_uri=str(rendered.path),
            width=rendered.width,
            height=rendered.height,
        )
