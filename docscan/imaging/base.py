from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from docscan.documents.models import Page, PageFilter


@dataclass(frozen=True)
class FilterOptions:
    filter: PageFilter = PageFilter.COLOR
    rotation_degrees: int = 0
    auto_contrast: bool = False

    @classmethod
    def for_page(cls, page: Page) -> "FilterOptions":
        return cls(
            filter=page.filter,
            rotation_degrees=page.rotation,
            auto_contrast=page.auto_contrast,
        )


class BaseImageFilter(ABC):
    """Contract for the page image filter collaborator."""

    @abstractmethod
    def process(self, image_path: str, options: FilterOptions) -> Path:
        """Render the page image with its filter, rotation and contrast applied.

        Returns:
            Path of a new image file; the source image is never modified.

        Raises:
            ImageFilterError: if the image cannot be read or written.
        """


class BasePdfRasterizer(ABC):
    """Contract for rendering an imported PDF into page images."""

    @abstractmethod
    def rasterize(self, pdf_path: Path, dpi: int) -> list[Path]:
        """Render every page of the PDF at ``dpi``.

        Returns:
            One JPEG path per page, in page order.

        Raises:
            RasterizationError: if the PDF is missing, invalid or cannot be rendered.
        """
