import os
import shutil
from collections.abc import Generator

import pytest

from docscan.config.settings import Settings
from docscan.database.connection import close_pool, get_connection, init_pool
from docscan.store.postgres_store import PostgresDocumentStore


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docscan_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute("SELECT 1")
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run these tests")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def postgres_store(integration_pool: None) -> Generator[PostgresDocumentStore, None, None]:
    store = PostgresDocumentStore()
    store.ensure_schema()
    store.save([])
    try:
        yield store
    finally:
        store.save([])


@pytest.fixture
def tesseract_available() -> None:
    if shutil.which("tesseract") is None:
        pytest.skip("tesseract binary not installed")
