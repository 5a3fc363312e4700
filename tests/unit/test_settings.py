import pytest
from pydantic import ValidationError

from docscan.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_db_port(self) -> None:
        s = Settings()
        assert s.db_port == 5432

    def test_default_store_backend(self) -> None:
        s = Settings()
        assert s.store_backend == "json"

    def test_default_ocr_engines(self) -> None:
        s = Settings()
        assert s.ocr_primary_engine == "tesseract"
        assert s.ocr_fallback_engine == "none"

    def test_default_ocr_timeout(self) -> None:
        s = Settings()
        assert s.ocr_timeout_seconds == 30

    def test_default_import_dpi(self) -> None:
        s = Settings()
        assert s.import_dpi == 250

    def test_default_overlay(self) -> None:
        s = Settings()
        assert s.overlay_opacity == 0.01
        assert s.overlay_font == "notos"
        assert s.overlay_font_file == ""

    def test_default_export_quality(self) -> None:
        s = Settings()
        assert s.default_export_quality == "color-medium"


class TestSettingsFromEnv:
    def test_loads_app_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_ENV", "production")
        s = Settings()
        assert s.app_env == "production"

    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        s = Settings()
        assert s.log_level == "DEBUG"

    def test_loads_db_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_HOST", "db.example.com")
        s = Settings()
        assert s.db_host == "db.example.com"

    def test_loads_ocr_languages(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OCR_LANGUAGES", "eng+deu")
        s = Settings()
        assert s.ocr_languages == "eng+deu"

    def test_loads_overlay_opacity(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OVERLAY_OPACITY", "0.05")
        s = Settings()
        assert s.overlay_opacity == 0.05


class TestSettingsValidation:
    def test_invalid_db_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_ocr_timeout_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OCR_TIMEOUT_SECONDS", "soon")
        with pytest.raises(ValidationError):
            Settings()
