from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from docscan.main import main, setup_argparser


@pytest.fixture()
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the CLI at a throwaway work dir with the example OCR engine."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("WORK_DIR", str(tmp_path / "work"))
    monkeypatch.setenv("STORE_PATH", str(tmp_path / "work" / "documents.json"))
    monkeypatch.setenv("STORE_BACKEND", "json")
    monkeypatch.setenv("OCR_PRIMARY_ENGINE", "example")
    monkeypatch.setenv("OCR_FALLBACK_ENGINE", "none")
    monkeypatch.setenv("IMPORT_DPI", "72")
    with patch("docscan.main.Log.configure"):
        yield tmp_path


def _last_output_line(capsys: pytest.CaptureFixture[str]) -> str:
    return capsys.readouterr().out.strip().splitlines()[-1]


class TestArgparser:
    def test_import_options(self) -> None:
        args = setup_argparser().parse_args(["import", "a.jpg", "b.jpg", "--title", "Lease", "--ocr"])
        assert args.command == "import"
        assert args.paths == [Path("a.jpg"), Path("b.jpg")]
        assert args.title == "Lease"
        assert args.ocr is True

    def test_export_defaults_to_current_dir(self) -> None:
        args = setup_argparser().parse_args(["export", "doc-1"])
        assert args.output == Path(".")

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            setup_argparser().parse_args([])


class TestMain:
    def test_import_pdf_then_export_original(
        self,
        cli_env: Path,
        multi_page_pdf_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(["import", str(multi_page_pdf_path)]) == 0
        document_id, title, pages = _last_output_line(capsys).split("\t")
        assert title == "Quarterly Report"
        assert pages == "2 pages"

        assert main(["export", document_id, "-o", str(cli_env / "out")]) == 0
        exported = Path(_last_output_line(capsys))
        assert exported == cli_env / "out" / "Quarterly Report.pdf"
        assert exported.read_bytes() == multi_page_pdf_path.read_bytes()

    def test_import_images_with_ocr_and_list(
        self,
        cli_env: Path,
        make_image: Callable[..., Path],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        images = [str(make_image("one.jpg", 400, 600)), str(make_image("two.jpg", 400, 600))]

        assert main(["import", *images, "--title", "Receipts", "--ocr"]) == 0
        output = capsys.readouterr().out
        assert "Receipts\t2 pages" in output
        assert output.strip().splitlines()[-1].endswith(": 2/2")

        assert main(["list"]) == 0
        assert _last_output_line(capsys).endswith("\tReceipts\t2 pages\tocr=done")

    def test_mixed_pdf_and_images_fails(
        self, cli_env: Path, multi_page_pdf_path: Path, make_image: Callable[..., Path]
    ) -> None:
        assert main(["import", str(multi_page_pdf_path), str(make_image())]) == 1

    def test_export_unknown_document_fails(self, cli_env: Path) -> None:
        assert main(["export", "ghost", "-o", str(cli_env)]) == 1

    def test_ocr_failure_returns_error_code(
        self, cli_env: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        from docscan.documents.models import Document
        from docscan.store.json_store import JsonFileDocumentStore

        JsonFileDocumentStore(cli_env / "work" / "documents.json").put(
            Document(id="empty", title="Empty", created_at=0)
        )

        assert main(["ocr", "empty"]) == 1
        assert "empty: OCR failed" in capsys.readouterr().out
