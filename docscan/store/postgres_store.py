import psycopg
from psycopg.types.json import Jsonb

from docscan.database.connection import get_connection
from docscan.documents.exceptions import DocumentStoreError
from docscan.documents.models import Document
from docscan.documents.serialization import document_from_dict, document_to_dict
from docscan.store.base import BaseDocumentStore

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS scan_documents (
    id TEXT PRIMARY KEY,
    payload JSONB NOT NULL,
    position INTEGER NOT NULL DEFAULT 0,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""


class PostgresDocumentStore(BaseDocumentStore):
    """Documents index stored as one JSONB row per document in scan_documents."""

    def ensure_schema(self) -> None:
        with get_connection() as conn:
            conn.execute(CREATE_TABLE_SQL)
            conn.commit()

    def load(self) -> list[Document]:
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT payload FROM scan_documents ORDER BY position, id")
                    rows = cur.fetchall()
        except psycopg.Error as exc:
            raise DocumentStoreError(f"Failed to load documents: {exc}") from exc
        return [document_from_dict(row[0]) for row in rows]

    def save(self, documents: list[Document]) -> None:
        """Upsert every given document and delete rows that are no longer present."""
        ids = [d.id for d in documents]
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    for position, document in enumerate(documents):
                        cur.execute(
                            """
                            INSERT INTO scan_documents (id, payload, position, updated_at)
                            VALUES (%s, %s, %s, NOW())
                            ON CONFLICT (id) DO UPDATE
                            SET payload = EXCLUDED.payload,
                                position = EXCLUDED.position,
                                updated_at = NOW()
                            """,
                            (document.id, Jsonb(document_to_dict(document)), position),
                        )
                    cur.execute(
                        "DELETE FROM scan_documents WHERE NOT (id = ANY(%s))",
                        (ids,),
                    )
                conn.commit()
        except psycopg.Error as exc:
            raise DocumentStoreError(f"Failed to save documents: {exc}") from exc
