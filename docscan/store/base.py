from abc import ABC, abstractmethod
from collections.abc import Callable

from docscan.documents.exceptions import DocumentNotFoundError
from docscan.documents.models import Document


class BaseDocumentStore(ABC):
    """Contract for document index persistence.

    Implementations persist the whole index; the helpers below are
    read-modify-write cycles over ``load``/``save`` with last-write-wins
    semantics and no await between the read and the write.
    """

    @abstractmethod
    def load(self) -> list[Document]:
        """Return every stored document, freshly decoded.

        Raises:
            DocumentStoreError: if the index cannot be read or decoded.
        """

    @abstractmethod
    def save(self, documents: list[Document]) -> None:
        """Replace the stored index with ``documents``.

        Raises:
            DocumentStoreError: if the index cannot be written.
        """

    def get(self, document_id: str) -> Document:
        """Raises DocumentNotFoundError if the document is not stored."""
        for document in self.load():
            if document.id == document_id:
                return document
        raise DocumentNotFoundError(f"Document {document_id} not found")

    def find(self, document_id: str) -> Document | None:
        return next((d for d in self.load() if d.id == document_id), None)

    def put(self, document: Document) -> None:
        documents = self.load()
        for i, existing in enumerate(documents):
            if existing.id == document.id:
                documents[i] = document
                break
        else:
            documents.append(document)
        self.save(documents)

    def update(self, document_id: str, mutate: Callable[[Document], None]) -> Document:
        """Apply ``mutate`` to the stored document and persist it.

        Raises:
            DocumentNotFoundError: if the document is not stored.
        """
        documents = self.load()
        for document in documents:
            if document.id == document_id:
                mutate(document)
                self.save(documents)
                return document
        raise DocumentNotFoundError(f"Document {document_id} not found")

    def delete(self, document_id: str) -> None:
        documents = self.load()
        remaining = [d for d in documents if d.id != document_id]
        if len(remaining) == len(documents):
            raise DocumentNotFoundError(f"Document {document_id} not found")
        self.save(remaining)
