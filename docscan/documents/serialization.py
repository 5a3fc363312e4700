"""Conversion between documents and the JSON payloads kept by the stores.

Keys are camelCase to stay compatible with the existing documents index.
"""

from typing import Any

from docscan.documents.exceptions import DocumentStoreError
from docscan.documents.models import (
    Document,
    ExportQuality,
    OcrProgress,
    OcrStatus,
    Page,
    PageFilter,
)
from docscan.geometry.transform import Rect
from docscan.ocr.models import OcrWord


def word_to_dict(word: OcrWord) -> dict[str, Any]:
    return {
        "text": word.text,
        "box": {
            "x": word.box.x,
            "y": word.box.y,
            "width": word.box.width,
            "height": word.box.height,
        },
        "conf": word.confidence,
        "imgW": word.image_width,
        "imgH": word.image_height,
    }


def word_from_dict(data: dict[str, Any]) -> OcrWord:
    box = data["box"]
    return OcrWord(
        text=data["text"],
        box=Rect(float(box["x"]), float(box["y"]), float(box["width"]), float(box["height"])),
        confidence=float(data.get("conf") or 0.0),
        image_width=int(data["imgW"]),
        image_height=int(data["imgH"]),
    )


def page_to_dict(page: Page) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": page.id,
        "uri": page.uri,
        "rotation": page.rotation,
        "filter": page.filter.value,
        "autoContrast": page.auto_contrast,
    }
    optional = {
        "width": page.width,
        "height": page.height,
        "ocrText": page.ocr_text,
        "processedUri": page.processed_uri,
        "sourcePageIndex": page.source_page_index,
    }
    payload.update({k: v for k, v in optional.items() if v is not None})
    if page.ocr_boxes is not None:
        payload["ocrBoxes"] = [word_to_dict(w) for w in page.ocr_boxes]
    return payload


def page_from_dict(data: dict[str, Any]) -> Page:
    boxes = data.get("ocrBoxes")
    return Page(
        id=data["id"],
        uri=data["uri"],
        rotation=int(data.get("rotation") or 0),
        filter=PageFilter(data.get("filter") or PageFilter.COLOR.value),
        auto_contrast=bool(data.get("autoContrast", False)),
        width=data.get("width"),
        height=data.get("height"),
        ocr_text=data.get("ocrText"),
        ocr_boxes=[word_from_dict(w) for w in boxes] if boxes is not None else None,
        processed_uri=data.get("processedUri"),
        source_page_index=data.get("sourcePageIndex"),
    )


def document_to_dict(document: Document) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": document.id,
        "title": document.title,
        "createdAt": document.created_at,
        "pages": [page_to_dict(p) for p in document.pages],
        "folderId": document.folder_id,
        "ocrStatus": document.ocr_status.value,
    }
    if document.ocr_progress is not None:
        payload["ocrProgress"] = {
            "processed": document.ocr_progress.processed,
            "total": document.ocr_progress.total,
        }
    optional = {
        "ocrExcerpt": document.ocr_excerpt,
        "originalPdfPath": document.original_pdf_path,
        "originalPageCount": document.original_page_count,
        "exportQuality": document.export_quality.value if document.export_quality else None,
    }
    payload.update({k: v for k, v in optional.items() if v is not None})
    return payload


def document_from_dict(data: dict[str, Any]) -> Document:
    """Build a Document from a stored payload.

    Raises:
        DocumentStoreError: if the payload is missing fields or has invalid values.
    """
    try:
        progress = data.get("ocrProgress")
        quality = data.get("exportQuality")
        return Document(
            id=data["id"],
            title=data.get("title", ""),
            created_at=int(data.get("createdAt") or 0),
            pages=[page_from_dict(p) for p in data.get("pages", [])],
            folder_id=data.get("folderId"),
            ocr_status=OcrStatus(data.get("ocrStatus") or OcrStatus.IDLE.value),
            ocr_progress=(
                OcrProgress(int(progress["processed"]), int(progress["total"]))
                if progress is not None
                else None
            ),
            ocr_excerpt=data.get("ocrExcerpt"),
            original_pdf_path=data.get("originalPdfPath"),
            original_page_count=data.get("originalPageCount"),
            export_quality=ExportQuality(quality) if quality else None,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise DocumentStoreError(f"Invalid document payload: {exc}") from exc
