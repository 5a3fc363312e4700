import uuid
from pathlib import Path

import pymupdf

from docscan.imaging.base import BasePdfRasterizer
from docscan.imaging.exceptions import RasterizationError

JPEG_QUALITY = 85


class PyMuPdfRasterizer(BasePdfRasterizer):
    """Renders PDF pages to JPEG using PyMuPDF."""

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir

    def rasterize(self, pdf_path: Path, dpi: int) -> list[Path]:
        if not pdf_path.exists():
            raise RasterizationError(f"PDF file not found at path: {pdf_path}")
        self._output_dir.mkdir(parents=True, exist_ok=True)
        prefix = uuid.uuid4().hex
        try:
            with pymupdf.open(pdf_path) as doc:  # type: ignore[no-untyped-call]
                paths = []
                for index, page in enumerate(doc):
                    pixmap = page.get_pixmap(dpi=dpi, alpha=False)
                    out_path = self._output_dir / f"raster-{prefix}-{index}.jpg"
                    pixmap.save(str(out_path), jpg_quality=JPEG_QUALITY)
                    paths.append(out_path)
            return paths
        except RasterizationError:
            raise
        except Exception as exc:
            raise RasterizationError(f"pymupdf rasterization failed: {exc}") from exc
