import io
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from docscan.documents.models import Document, Page
from docscan.store.json_store import JsonFileDocumentStore


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_path(tmp_path: Path, multi_page_pdf_bytes: bytes) -> Path:
    path = tmp_path / "Quarterly Report.pdf"
    path.write_bytes(multi_page_pdf_bytes)
    return path


@pytest.fixture()
def make_image(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a solid JPEG page image, e.g. make_image("p1.jpg", 1000, 1400)."""

    def _make(name: str = "page.jpg", width: int = 100, height: int = 140, color: str = "white") -> Path:
        path = tmp_path / name
        Image.new("RGB", (width, height), color).save(path, format="JPEG")
        return path

    return _make


@pytest.fixture()
def store(tmp_path: Path) -> JsonFileDocumentStore:
    return JsonFileDocumentStore(tmp_path / "index" / "documents.json")


@pytest.fixture()
def make_document(make_image: Callable[..., Path]) -> Callable[..., Document]:
    """Factory for an image-based document with ``page_count`` real page images."""

    def _make(doc_id: str = "doc-1", page_count: int = 2, **fields: object) -> Document:
        pages = [
            Page(id=f"{doc_id}-p{i}", uri=str(make_image(f"{doc_id}-{i}.jpg")), width=100, height=140)
            for i in range(page_count)
        ]
        return Document(id=doc_id, title="Scan", created_at=0, pages=pages, **fields)  # type: ignore[arg-type]

    return _make
