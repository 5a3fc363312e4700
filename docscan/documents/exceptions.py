class DocumentError(Exception):
    """Base exception for document and store errors."""


class DocumentNotFoundError(DocumentError):
    """Raised when a document cannot be found in the store."""


class DocumentStoreError(DocumentError):
    """Raised when the store cannot be read, written or decoded."""
