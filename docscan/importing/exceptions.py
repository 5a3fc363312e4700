from docscan.documents.exceptions import DocumentError


class DocumentImportError(DocumentError):
    """Raised when source files cannot be brought into the work directory."""
