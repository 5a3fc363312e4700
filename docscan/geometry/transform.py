"""Coordinate conversions between pixel, normalized and page spaces.

Spaces used across the pipeline:

* pixel space: origin top-left, y grows downward, units are raster pixels.
* normalized space: the same orientation scaled to [0, 1] on both axes.
* PDF space: origin bottom-left, y grows upward, units are points.

Every function here is pure. Divisions guard against zero-sized inputs and
fall back to a scale of 1 instead of producing NaN or infinity.
"""

import math
from dataclasses import dataclass
from typing import Sequence

OVERLAY_FONT_SCALE = 0.9
OVERLAY_MIN_FONT_SIZE = 6.0
OVERLAY_BASELINE_RATIO = 0.2


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle given by its origin corner and size."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class OverlayPlacement:
    """Where and how large to draw one word of the invisible text layer.

    ``x``/``y`` is the bottom-left corner of the word box in PDF space and
    ``baseline_y`` is where the text baseline goes so glyphs sit inside it.
    """

    x: float
    y: float
    width: float
    height: float
    font_size: float
    baseline_offset: float

    @property
    def baseline_y(self) -> float:
        return self.y + self.baseline_offset


@dataclass(frozen=True)
class SegmentProjection:
    point: Point
    within_bounds: bool


def _safe_scale(target: float, source: float) -> float:
    if not source or not math.isfinite(source) or not math.isfinite(target) or target <= 0:
        return 1.0
    return target / source


def image_box_to_pdf_rect(
    box: Rect,
    source_image_width: float,
    source_image_height: float,
    dest_rect: Rect,
) -> OverlayPlacement:
    """Map a pixel box measured on a source raster into the drawn image area of a PDF page.

    Args:
        box: Word box in pixel space of the source raster.
        source_image_width: Width of the raster the box was measured against.
        source_image_height: Height of the raster the box was measured against.
        dest_rect: Region (PDF space) the image occupies on the page.

    Returns:
        OverlayPlacement in PDF space. X and Y are scaled independently and
        the Y axis is flipped. A zero-sized source or destination degrades
        to an unscaled mapping.
    """
    scale_x = _safe_scale(dest_rect.width, source_image_width)
    scale_y = _safe_scale(dest_rect.height, source_image_height)
    dest_height = dest_rect.height if dest_rect.height > 0 else source_image_height

    x_pdf = dest_rect.x + box.x * scale_x
    y_pdf = dest_rect.y + (dest_height - (box.y + box.height) * scale_y)
    font_size = max(box.height * scale_y * OVERLAY_FONT_SCALE, OVERLAY_MIN_FONT_SIZE)
    return OverlayPlacement(
        x=x_pdf,
        y=y_pdf,
        width=box.width * scale_x,
        height=box.height * scale_y,
        font_size=font_size,
        baseline_offset=font_size * OVERLAY_BASELINE_RATIO,
    )


def contain_rect(content_width: float, content_height: float, box_width: float, box_height: float) -> Rect:
    """Fit content into a box preserving aspect ratio, centered."""
    if content_width <= 0 or content_height <= 0:
        return Rect(0.0, 0.0, max(box_width, 0.0), max(box_height, 0.0))
    scale = min(box_width / content_width, box_height / content_height)
    if not math.isfinite(scale) or scale <= 0:
        scale = 1.0
    width = content_width * scale
    height = content_height * scale
    return Rect(
        x=(box_width - width) / 2,
        y=(box_height - height) / 2,
        width=width,
        height=height,
    )


def pixel_box_to_normalized(box: Rect, image_width: float, image_height: float) -> Rect:
    sx = 1.0 / image_width if image_width > 0 else 1.0
    sy = 1.0 / image_height if image_height > 0 else 1.0
    return Rect(box.x * sx, box.y * sy, box.width * sx, box.height * sy)


def normalized_box_to_pixel(box: Rect, image_width: float, image_height: float) -> Rect:
    return Rect(
        box.x * image_width,
        box.y * image_height,
        box.width * image_width,
        box.height * image_height,
    )


def normalized_bottom_left_to_pixel_box(box: Rect, image_width: float, image_height: float) -> Rect:
    """Convert a normalized box with bottom-left origin into a top-left pixel box.

    ``box.y`` is the bottom edge, so the distance from the top of the raster
    is ``1 - (y + height)``.
    """
    return Rect(
        x=round(box.x * image_width),
        y=round((1.0 - (box.y + box.height)) * image_height),
        width=round(box.width * image_width),
        height=round(box.height * image_height),
    )


def map_norm_to_preview(point: Point, container: Rect) -> Point:
    return Point(
        container.x + point.x * container.width,
        container.y + point.y * container.height,
    )


def map_preview_to_norm(point: Point, container: Rect) -> Point:
    sx = container.width if container.width else 1.0
    sy = container.height if container.height else 1.0
    return Point((point.x - container.x) / sx, (point.y - container.y) / sy)


def clamp_norm_point(point: Point) -> Point:
    return Point(max(0.0, min(1.0, point.x)), max(0.0, min(1.0, point.y)))


def distance(a: Point, b: Point) -> float:
    return math.hypot(b.x - a.x, b.y - a.y)


def project_to_line_segment(point: Point, start: Point, end: Point) -> SegmentProjection:
    """Project a point onto the segment ``start``-``end``.

    The projected point is clamped to the segment; ``within_bounds`` reports
    whether the unclamped projection already fell on it.
    """
    dx = end.x - start.x
    dy = end.y - start.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return SegmentProjection(point=start, within_bounds=True)

    t = ((point.x - start.x) * dx + (point.y - start.y) * dy) / length_sq
    clamped = max(0.0, min(1.0, t))
    return SegmentProjection(
        point=Point(start.x + clamped * dx, start.y + clamped * dy),
        within_bounds=0.0 <= t <= 1.0,
    )


def polygon_area(points: Sequence[Point]) -> float:
    """Shoelace area of a simple polygon; orientation independent."""
    if len(points) < 3:
        return 0.0
    total = 0.0
    for i, p in enumerate(points):
        q = points[(i + 1) % len(points)]
        total += p.x * q.y - q.x * p.y
    return abs(total) / 2
