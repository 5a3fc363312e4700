from dataclasses import dataclass
from pathlib import Path

from docscan.config.settings import Settings
from docscan.documents.models import ExportQuality
from docscan.imaging.factory import PdfRasterizerFactory
from docscan.imaging.page_processor import PageImageProcessor
from docscan.imaging.pillow_filter import PillowImageFilter
from docscan.importing.importer import DocumentImporter
from docscan.ocr.events import OcrEventBus
from docscan.ocr.factory import RecognizerFactory
from docscan.ocr.queue import OcrQueue
from docscan.pdf.assembler import PdfAssembler
from docscan.pdf.export import ExportService
from docscan.store.base import BaseDocumentStore
from docscan.store.factory import DocumentStoreFactory


@dataclass
class Pipeline:
    store: BaseDocumentStore
    importer: DocumentImporter
    queue: OcrQueue
    exporter: ExportService


def build_pipeline(settings: Settings) -> Pipeline:
    """Build the store, OCR queue, importer and exporter with the configured adapters.

    The queue binds to the running event loop on first use, so callers
    should enqueue from inside ``asyncio.run``.
    """
    work_dir = Path(settings.work_dir)
    store = DocumentStoreFactory.create(settings)
    page_processor = PageImageProcessor(
        PillowImageFilter(work_dir / "filtered"),
        work_dir / "processed",
    )
    importer = DocumentImporter(
        store=store,
        rasterizer=PdfRasterizerFactory.create(settings),
        page_processor=page_processor,
        work_dir=work_dir,
        import_dpi=settings.import_dpi,
        export_quality=ExportQuality(settings.default_export_quality),
    )
    queue = OcrQueue(store, RecognizerFactory.create(settings), OcrEventBus())
    assembler = PdfAssembler(
        page_processor,
        overlay_opacity=settings.overlay_opacity,
        overlay_font=settings.overlay_font,
        overlay_font_file=settings.overlay_font_file,
    )
    return Pipeline(
        store=store,
        importer=importer,
        queue=queue,
        exporter=ExportService(store, assembler),
    )
