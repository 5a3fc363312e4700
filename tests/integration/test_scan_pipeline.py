import asyncio
from collections.abc import Callable
from pathlib import Path

import pdfplumber
import pytest

from docscan.config.settings import Settings
from docscan.documents.models import OcrStatus
from docscan.main import run_ocr
from docscan.pipeline import build_pipeline

pytestmark = pytest.mark.integration


def _settings(tmp_path: Path) -> Settings:
    return Settings(  # type: ignore[call-arg]
        _env_file=None,
        work_dir=str(tmp_path / "work"),
        store_path=str(tmp_path / "work" / "documents.json"),
        ocr_primary_engine="example",
        import_dpi=72,
    )


class TestScanPipeline:
    def test_images_to_searchable_pdf(self, tmp_path: Path, make_image: Callable[..., Path]) -> None:
        pipeline = build_pipeline(_settings(tmp_path))
        document = pipeline.importer.import_images(
            [make_image("one.jpg", 800, 1100), make_image("two.jpg", 800, 1100)], title="Lease"
        )

        assert asyncio.run(run_ocr(pipeline, [document.id]))

        stored = pipeline.store.get(document.id)
        assert stored.ocr_status is OcrStatus.DONE
        assert stored.ocr_excerpt
        assert all(page.ocr_boxes for page in stored.pages)

        path = asyncio.run(pipeline.exporter.export(document.id, tmp_path / "out"))

        assert path == tmp_path / "out" / "Lease.pdf"
        with pdfplumber.open(path) as pdf:
            assert len(pdf.pages) == 2
            assert "Example" in (pdf.pages[1].extract_text() or "")

    def test_recognized_pdf_with_reordered_pages_is_rebuilt(
        self, tmp_path: Path, multi_page_pdf_path: Path
    ) -> None:
        pipeline = build_pipeline(_settings(tmp_path))
        document = pipeline.importer.import_pdf(multi_page_pdf_path)
        pipeline.store.update(document.id, lambda doc: doc.pages.reverse())

        assert asyncio.run(run_ocr(pipeline, [document.id]))
        path = asyncio.run(pipeline.exporter.export(document.id, tmp_path / "out"))

        assert path.name == "Quarterly Report.pdf"
        assert path.read_bytes() != multi_page_pdf_path.read_bytes()
        with pdfplumber.open(path) as pdf:
            assert len(pdf.pages) == 2
            assert "Example" in (pdf.pages[0].extract_text() or "")
