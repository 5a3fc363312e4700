from dataclasses import dataclass

from docscan.documents.models import ExportQuality

DEFAULT_EXPORT_QUALITY = ExportQuality.COLOR_MEDIUM


@dataclass(frozen=True)
class ExportProfile:
    """Bounds and JPEG quality (0..1) used when pages are rebuilt from images."""

    max_width: int
    max_height: int
    jpeg_quality: float
    grayscale: bool = False

    @property
    def pillow_quality(self) -> int:
        return int(round(self.jpeg_quality * 100))


_PROFILES: dict[ExportQuality, ExportProfile] = {
    ExportQuality.COLOR_HIGH: ExportProfile(2500, 3500, 0.8),
    ExportQuality.COLOR_MEDIUM: ExportProfile(2000, 3000, 0.7),
    ExportQuality.GRAYSCALE: ExportProfile(2000, 3000, 0.7, grayscale=True),
}


def get_export_profile(quality: ExportQuality | str | None = None) -> ExportProfile:
    """Profile for a quality name; unknown or missing names get the medium profile."""
    if quality is None:
        return _PROFILES[DEFAULT_EXPORT_QUALITY]
    try:
        return _PROFILES[ExportQuality(quality)]
    except ValueError:
        return _PROFILES[DEFAULT_EXPORT_QUALITY]
