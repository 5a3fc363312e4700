from pathlib import Path

from docscan.config.settings import Settings
from docscan.imaging.base import BasePdfRasterizer
from docscan.imaging.pdfplumber_rasterizer import PdfPlumberRasterizer
from docscan.imaging.pymupdf_rasterizer import PyMuPdfRasterizer


class PdfRasterizerFactory:
    """Creates the correct PDF rasterizer based on settings."""

    ADAPTERS: dict[str, type[BasePdfRasterizer]] = {
        "pdfplumber": PdfPlumberRasterizer,
        "pymupdf": PyMuPdfRasterizer,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfRasterizer:
        engine = settings.pdf_rasterizer.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF rasterizer '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls(Path(settings.work_dir) / "rasters")
