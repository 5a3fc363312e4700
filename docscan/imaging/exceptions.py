class ImagingError(Exception):
    """Base exception for image and raster collaborators."""


class ImageFilterError(ImagingError):
    """Raised when a page image cannot be filtered, rotated or re-encoded."""


class RasterizationError(ImagingError):
    """Raised when a PDF cannot be rendered into page images."""
