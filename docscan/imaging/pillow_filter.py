import uuid
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from docscan.documents.models import PageFilter
from docscan.imaging.base import BaseImageFilter, FilterOptions
from docscan.imaging.exceptions import ImageFilterError

BW_THRESHOLD = 128
JPEG_QUALITY = 92


class PillowImageFilter(BaseImageFilter):
    """Applies page filters with Pillow and writes the result as JPEG."""

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir

    def process(self, image_path: str, options: FilterOptions) -> Path:
        try:
            with Image.open(image_path) as img:
                image = ImageOps.exif_transpose(img).convert("RGB")
        except (OSError, UnidentifiedImageError) as exc:
            raise ImageFilterError(f"Cannot load image at {image_path}: {exc}") from exc

        image = apply_filter(image, options)
        self._output_dir.mkdir(parents=True, exist_ok=True)
        out_path = self._output_dir / f"filtered-{uuid.uuid4().hex}.jpg"
        try:
            image.save(out_path, format="JPEG", quality=JPEG_QUALITY)
        except OSError as exc:
            raise ImageFilterError(f"Cannot write filtered image {out_path}: {exc}") from exc
        return out_path


def apply_filter(image: Image.Image, options: FilterOptions) -> Image.Image:
    """Rotate clockwise, then auto-contrast, then apply the color filter."""
    if options.rotation_degrees:
        image = image.rotate(-options.rotation_degrees, expand=True)
    if options.auto_contrast:
        image = ImageOps.autocontrast(image)
    if options.filter is PageFilter.GRAYSCALE:
        image = image.convert("L")
    elif options.filter is PageFilter.BW:
        gray = ImageOps.autocontrast(image.convert("L"))
        image = gray.point(lambda value: 255 if value >= BW_THRESHOLD else 0)
    return image
