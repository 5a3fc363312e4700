"""Command-line entry point.

Usage:
    docscan import scan.pdf
    docscan import page1.jpg page2.jpg --title "Lease"
    docscan ocr <document-id> [<document-id> ...]
    docscan export <document-id> --output ./out
    docscan list
"""

import argparse
import asyncio
from pathlib import Path

from docscan.config.settings import Settings
from docscan.database.connection import close_pool
from docscan.documents.exceptions import DocumentError
from docscan.imaging.exceptions import ImagingError
from docscan.logging.logger import Log
from docscan.ocr.events import OcrCompleteEvent, OcrProgressEvent
from docscan.pdf.exceptions import PdfAssemblyError
from docscan.pipeline import Pipeline, build_pipeline

PDF_SUFFIX = ".pdf"


def setup_argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docscan",
        description="Scan documents into searchable PDFs.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    import_cmd = commands.add_parser("import", help="Import a PDF or a set of page images")
    import_cmd.add_argument("paths", nargs="+", type=Path, help="One PDF, or image files in page order")
    import_cmd.add_argument("--title", default=None, help="Document title")
    import_cmd.add_argument("--ocr", action="store_true", help="Run OCR right after importing")

    ocr_cmd = commands.add_parser("ocr", help="Run OCR for documents")
    ocr_cmd.add_argument("document_ids", nargs="+")

    export_cmd = commands.add_parser("export", help="Export a document as PDF")
    export_cmd.add_argument("document_id")
    export_cmd.add_argument("--output", "-o", type=Path, default=Path("."), help="Output directory")

    commands.add_parser("list", help="List stored documents")
    return parser


def run_import(pipeline: Pipeline, paths: list[Path], title: str | None) -> str:
    if len(paths) == 1 and paths[0].suffix.lower() == PDF_SUFFIX:
        document = pipeline.importer.import_pdf(paths[0], title)
    elif any(p.suffix.lower() == PDF_SUFFIX for p in paths):
        raise DocumentError("Import either a single PDF or image files, not both")
    else:
        document = pipeline.importer.import_images(paths, title)
    print(f"{document.id}\t{document.title}\t{len(document.pages)} pages")
    return document.id


async def run_ocr(pipeline: Pipeline, document_ids: list[str]) -> bool:
    """Recognize the documents one after another; True when all succeeded."""
    failures: list[OcrCompleteEvent] = []

    def on_progress(event: OcrProgressEvent) -> None:
        print(f"{event.document_id}: {event.processed}/{event.total}")

    def on_complete(event: OcrCompleteEvent) -> None:
        if not event.success:
            failures.append(event)

    queue = pipeline.queue
    with queue.events.subscribe_progress(on_progress), queue.events.subscribe_complete(on_complete):
        for document_id in document_ids:
            queue.enqueue(document_id)
        await queue.join()
        await queue.aclose()

    for event in failures:
        print(f"{event.document_id}: OCR failed: {event.error}")
    return not failures


def run_export(pipeline: Pipeline, document_id: str, output_dir: Path) -> None:
    path = asyncio.run(pipeline.exporter.export(document_id, output_dir))
    print(path)


def run_list(pipeline: Pipeline) -> None:
    for document in pipeline.store.load():
        print(
            f"{document.id}\t{document.title}\t{len(document.pages)} pages\t"
            f"ocr={document.ocr_status.value}"
        )


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> build pipeline -> run the sub-command."""
    args = setup_argparser().parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level, settings.log_file or None)

    try:
        pipeline = build_pipeline(settings)
        if args.command == "import":
            document_id = run_import(pipeline, args.paths, args.title)
            if args.ocr:
                return 0 if asyncio.run(run_ocr(pipeline, [document_id])) else 1
        elif args.command == "ocr":
            return 0 if asyncio.run(run_ocr(pipeline, args.document_ids)) else 1
        elif args.command == "export":
            run_export(pipeline, args.document_id, args.output)
        elif args.command == "list":
            run_list(pipeline)
    except (DocumentError, ImagingError, PdfAssemblyError) as exc:
        Log.error(f"{args.command} failed: {exc}")
        return 1
    finally:
        close_pool()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
