class PdfAssemblyError(Exception):
    """Base exception for PDF export failures; the message is user-facing."""


class EmptyDocumentError(PdfAssemblyError):
    """Raised when a document without pages is exported."""


class MissingSourceImageError(PdfAssemblyError):
    """Raised when a page image cannot be found on disk."""


class ImageEmbedError(PdfAssemblyError):
    """Raised when a page image cannot be embedded, even after re-encoding."""


class PdfWriteError(PdfAssemblyError):
    """Raised when the finished PDF cannot be written to its destination."""
