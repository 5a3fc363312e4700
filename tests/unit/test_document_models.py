from unittest.mock import patch

import pytest

from docscan.documents.models import (
    Document,
    OcrProgress,
    OcrStatus,
    Page,
    PageFilter,
    new_document,
    new_page,
)
from docscan.documents.naming import (
    default_doc_title,
    export_filename,
    filename_from_uri,
    sanitize_filename,
    strip_extension,
    to_fs_path,
)


class TestOcrProgress:
    def test_accepts_processed_up_to_total(self) -> None:
        assert OcrProgress(3, 3).processed == 3

    @pytest.mark.parametrize(("processed", "total"), [(4, 3), (-1, 3), (0, -1)])
    def test_rejects_inconsistent_counts(self, processed: int, total: int) -> None:
        with pytest.raises(ValueError, match="Invalid OCR progress"):
            OcrProgress(processed, total)


class TestPage:
    def test_rejects_unsupported_rotation(self) -> None:
        with pytest.raises(ValueError, match="Rotation"):
            Page(id="p", uri="/tmp/p.jpg", rotation=45)

    def test_image_path_prefers_processed_image(self) -> None:
        page = Page(id="p", uri="/raw.jpg", processed_uri="/processed.jpg")
        assert page.image_path == "/processed.jpg"

    def test_image_path_falls_back_to_raw(self) -> None:
        assert Page(id="p", uri="/raw.jpg").image_path == "/raw.jpg"

    @pytest.mark.parametrize(
        "fields",
        [{"rotation": 90}, {"filter": PageFilter.GRAYSCALE}, {"filter": PageFilter.BW}, {"auto_contrast": True}],
    )
    def test_visual_edits(self, fields: dict) -> None:
        assert Page(id="p", uri="/raw.jpg", **fields).has_visual_edits

    def test_untouched_page_has_no_visual_edits(self) -> None:
        assert not Page(id="p", uri="/raw.jpg").has_visual_edits


class TestDocument:
    def test_find_page(self) -> None:
        page = Page(id="p2", uri="/b.jpg")
        document = Document(id="d", title="t", created_at=0, pages=[Page(id="p1", uri="/a.jpg"), page])
        assert document.find_page("p2") is page
        assert document.find_page("missing") is None

    def test_new_document_defaults(self) -> None:
        with patch("docscan.documents.models.time.time", return_value=1761523200.0):
            document = new_document()
        assert document.created_at == 1761523200000
        assert document.title == default_doc_title(1761523200000)
        assert document.title.endswith(" Scan")
        assert document.ocr_status is OcrStatus.IDLE
        assert document.pages == []

    def test_new_document_keeps_given_title(self) -> None:
        assert new_document("Lease").title == "Lease"

    def test_new_page_defaults(self) -> None:
        page = new_page("/a.jpg", 10, 20)
        assert page.rotation == 0
        assert page.filter is PageFilter.COLOR
        assert (page.width, page.height) == (10, 20)
        assert page.id


class TestNaming:
    def test_sanitize_filename_replaces_unsafe_characters(self) -> None:
        assert sanitize_filename('Tax: 2024/Q1 <draft>?') == "Tax- 2024-Q1 -draft--"

    def test_sanitize_filename_collapses_whitespace(self) -> None:
        assert sanitize_filename("  My \t  Scan \n ") == "My Scan"

    def test_sanitize_filename_truncates(self) -> None:
        assert len(sanitize_filename("a" * 500)) == 200

    def test_export_filename_uses_title(self) -> None:
        assert export_filename("Lease | 2024") == "Lease - 2024.pdf"

    @pytest.mark.parametrize("title", [None, "", "   "])
    def test_export_filename_defaults_to_scan(self, title: str | None) -> None:
        assert export_filename(title) == "Scan.pdf"

    def test_filename_from_uri_decodes(self) -> None:
        assert filename_from_uri("file:///data/My%20Report.pdf?x=1") == "My Report.pdf"

    def test_strip_extension(self) -> None:
        assert strip_extension("report.final.pdf") == "report.final"
        assert strip_extension(".hidden") == ".hidden"

    def test_to_fs_path(self) -> None:
        assert to_fs_path("file:///data/My%20Scan.jpg") == "/data/My Scan.jpg"
        assert to_fs_path("/data/scan.jpg") == "/data/scan.jpg"
