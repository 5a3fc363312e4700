from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    log_file: str = ""

    work_dir: str = "./data"

    store_backend: str = "json"
    store_path: str = "./data/documents.json"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docscan"
    db_username: str = "docscan"
    db_password: str = "secret"

    ocr_primary_engine: str = "tesseract"
    ocr_fallback_engine: str = "none"
    ocr_timeout_seconds: int = 30
    ocr_languages: str = "eng"
    tesseract_cmd: str = ""

    openai_api_key: str = ""
    openai_model_name: str = "gpt-4o-mini"
    openai_timeout_seconds: int = 30

    pdf_rasterizer: str = "pymupdf"
    import_dpi: int = 250

    overlay_opacity: float = 0.01
    overlay_font: str = "notos"
    overlay_font_file: str = ""
    default_export_quality: str = "color-medium"
