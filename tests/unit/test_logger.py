import logging
from pathlib import Path

import pytest

from docscan.logging.logger import Log


@pytest.fixture()
def clean_logger():
    logger = logging.getLogger("docscan")
    saved_handlers = list(logger.handlers)
    saved_level = logger.level
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved_handlers
    logger.setLevel(saved_level)


class TestLog:
    def test_appends_context_fields(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="docscan"):
            Log.info("Page recognized", document_id="d1", page=2)
        assert caplog.records[-1].getMessage() == "Page recognized [document_id=d1 page=2]"

    def test_plain_message_without_context(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="docscan"):
            Log.warning("Original PDF missing")
        assert caplog.records[-1].getMessage() == "Original PDF missing"
        assert caplog.records[-1].levelname == "WARNING"

    def test_configure_adds_stdout_and_file_handlers(self, clean_logger: logging.Logger, tmp_path: Path) -> None:
        log_file = tmp_path / "docscan.log"
        Log.configure("debug", str(log_file))
        assert clean_logger.level == logging.DEBUG
        assert len(clean_logger.handlers) == 2

        Log.debug("written", run=1)
        for handler in clean_logger.handlers:
            handler.flush()
        assert "written [run=1]" in log_file.read_text(encoding="utf-8")

    def test_configure_twice_keeps_handlers(self, clean_logger: logging.Logger) -> None:
        Log.configure("INFO")
        Log.configure("WARNING")
        assert len(clean_logger.handlers) == 1
        assert clean_logger.level == logging.WARNING

    def test_exception_keeps_traceback(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="docscan"):
            try:
                raise ValueError("bad payload")
            except ValueError:
                Log.exception("Run failed", document_id="d1")
        record = caplog.records[-1]
        assert record.getMessage() == "Run failed [document_id=d1]"
        assert record.exc_info is not None
        assert record.exc_info[0] is ValueError
