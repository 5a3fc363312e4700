import json
import os
from pathlib import Path

from docscan.documents.exceptions import DocumentStoreError
from docscan.documents.models import Document
from docscan.documents.serialization import document_from_dict, document_to_dict
from docscan.store.base import BaseDocumentStore


class JsonFileDocumentStore(BaseDocumentStore):
    """Keeps the whole documents index in a single JSON file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> list[Document]:
        if not self._path.exists():
            return []
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise DocumentStoreError(f"Failed to read documents index {self._path}: {exc}") from exc
        if not isinstance(raw, list):
            raise DocumentStoreError("Documents index must be a JSON list")
        return [document_from_dict(item) for item in raw]

    def save(self, documents: list[Document]) -> None:
        payload = json.dumps([document_to_dict(d) for d in documents], ensure_ascii=False)
        tmp_path = self._path.with_name(f".{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise DocumentStoreError(f"Failed to write documents index {self._path}: {exc}") from exc
