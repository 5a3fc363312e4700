class RecognitionError(Exception):
    """Base exception for a failed page recognition."""


class RecognitionTimeoutError(RecognitionError):
    """Raised when the engine did not answer within the per-page timeout."""


class RecognitionEngineError(RecognitionError):
    """Raised when the OCR engine itself failed or is unreachable."""


class UnsupportedLanguageError(RecognitionError):
    """Raised when the engine has no model for a requested language."""


class RecognitionValidationError(RecognitionError):
    """Raised when an adapter payload does not match the OCR result model."""


class NoRecognizerAvailableError(RecognitionError):
    """Raised when no configured tier could be used for a page."""
