import uuid
from pathlib import Path

import pdfplumber

from docscan.imaging.base import BasePdfRasterizer
from docscan.imaging.exceptions import RasterizationError

JPEG_QUALITY = 85


class PdfPlumberRasterizer(BasePdfRasterizer):
    """Renders PDF pages to JPEG using pdfplumber's page images."""

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir

    def rasterize(self, pdf_path: Path, dpi: int) -> list[Path]:
        if not pdf_path.exists():
            raise RasterizationError(f"PDF file not found at path: {pdf_path}")
        self._output_dir.mkdir(parents=True, exist_ok=True)
        prefix = uuid.uuid4().hex
        try:
            with pdfplumber.open(pdf_path) as pdf:
                paths = []
                for index, page in enumerate(pdf.pages):
                    image = page.to_image(resolution=dpi).original.convert("RGB")
                    out_path = self._output_dir / f"raster-{prefix}-{index}.jpg"
                    image.save(out_path, format="JPEG", quality=JPEG_QUALITY)
                    paths.append(out_path)
            return paths
        except RasterizationError:
            raise
        except Exception as exc:
            raise RasterizationError(f"pdfplumber rasterization failed: {exc}") from exc
