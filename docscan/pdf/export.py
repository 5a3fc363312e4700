import os
import shutil
import uuid
from pathlib import Path

from docscan.documents.naming import export_filename
from docscan.logging.logger import Log
from docscan.pdf.assembler import PdfAssembler
from docscan.pdf.exceptions import PdfWriteError
from docscan.store.base import BaseDocumentStore


class ExportService:
    """Writes a document's PDF under its sanitized title."""

    def __init__(self, store: BaseDocumentStore, assembler: PdfAssembler) -> None:
        self._store = store
        self._assembler = assembler

    async def export(self, document_id: str, output_dir: Path) -> Path:
        """Export one document into ``output_dir`` and return the written path.

        Raises:
            DocumentNotFoundError: if the document is not stored.
            PdfAssemblyError: if the PDF cannot be produced.
        """
        document = self._store.get(document_id)
        target = output_dir / export_filename(document.title)
        result = await self._assembler.assemble(document, target)
        if result != target:
            _copy_atomic(result, target)
        Log.info("Exported document", document_id=document_id, path=target)
        return target


def _copy_atomic(source: Path, target: Path) -> None:
    tmp_path = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, tmp_path)
        os.replace(tmp_path, target)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise PdfWriteError(f"Could not copy {source} to {target}: {exc}") from exc
