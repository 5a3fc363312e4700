from pathlib import Path

from docscan.config.settings import Settings
from docscan.database.connection import init_pool
from docscan.store.base import BaseDocumentStore
from docscan.store.json_store import JsonFileDocumentStore
from docscan.store.postgres_store import PostgresDocumentStore


class DocumentStoreFactory:
    """Creates the configured document store."""

    BACKENDS = ("json", "postgres")

    @classmethod
    def create(cls, settings: Settings) -> BaseDocumentStore:
        backend = settings.store_backend.lower()
        if backend == "json":
            return JsonFileDocumentStore(Path(settings.store_path))
        if backend == "postgres":
            init_pool(settings)
            store = PostgresDocumentStore()
            store.ensure_schema()
            return store
        raise ValueError(
            f"Unknown store backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
