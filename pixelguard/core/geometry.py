"""
Conversion between document space and device space.

Document space is the page's own coordinate system: PDF points, origin at the
bottom-left corner, y growing upward. Device space is the pixel grid of a
rendered raster: origin at the top-left corner, y growing downward, scaled by
the zoom factor.
"""

import math
from dataclasses import dataclass
from typing import Tuple

from .errors import TransformError

# Digits kept before snapping device coordinates to whole pixels
_SNAP_DIGITS = 6


# ==============================================================================
# Value types
# ==============================================================================


@dataclass(frozen=True)
class Point:
    """A point in either coordinate system."""

    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """A document-space rectangle anchored at its bottom-left corner."""

    x: float
    y: float
    width: float
    height: float

    @property
    def top(self) -> float:
        return self.y + self.height

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, point: Point) -> bool:
        return self.x <= point.x <= self.right and self.y <= point.y <= self.top

    def clamped(self, page_width: float, page_height: float) -> "Rect":
        """Intersect with the page box. The result may be empty."""
        x0 = max(0.0, self.x)
        y0 = max(0.0, self.y)
        x1 = min(page_width, self.right)
        y1 = min(page_height, self.top)
        return Rect(x0, y0, max(0.0, x1 - x0), max(0.0, y1 - y0))


@dataclass(frozen=True)
class DeviceRect:
    """A device-space rectangle anchored at its top-left corner."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


# ==============================================================================
# Viewport
# ==============================================================================


@dataclass(frozen=True)
class Viewport:
    """
    Mapping between document and device space for one page at one scale.

    Args:
        page_width: Page width in document units
        page_height: Page height in document units
        scale: Device pixels per document unit
    """

    page_width: float
    page_height: float
    scale: float

    def __post_init__(self):
        if self.scale <= 0:
            raise TransformError(f"Scale must be positive, got {self.scale}")
        if self.page_width <= 0 or self.page_height <= 0:
            raise TransformError(
                f"Page size must be positive, got {self.page_width}x{self.page_height}"
            )

    @property
    def pixel_width(self) -> float:
        return self.page_width * self.scale

    @property
    def pixel_height(self) -> float:
        return self.page_height * self.scale

    def to_device(self, point: Point) -> Point:
        return Point(point.x * self.scale, (self.page_height - point.y) * self.scale)

    def to_document(self, point: Point) -> Point:
        return Point(point.x / self.scale, self.page_height - point.y / self.scale)

    def rect_to_device(self, rect: Rect) -> DeviceRect:
        """
        Convert a document rectangle through its two extreme corners.

        The document top-left (x, y + height) and bottom-right (x + width, y)
        are mapped separately; min/max of the results form the device rect.
        """
        a = self.to_device(Point(rect.x, rect.top))
        b = self.to_device(Point(rect.right, rect.y))
        x0, x1 = min(a.x, b.x), max(a.x, b.x)
        y0, y1 = min(a.y, b.y), max(a.y, b.y)
        return DeviceRect(x0, y0, x1 - x0, y1 - y0)

    def rect_to_document(self, rect: DeviceRect) -> Rect:
        """Inverse of rect_to_device, also through the extreme corners."""
        a = self.to_document(Point(rect.x, rect.y))
        b = self.to_document(Point(rect.right, rect.bottom))
        x0, x1 = min(a.x, b.x), max(a.x, b.x)
        y0, y1 = min(a.y, b.y), max(a.y, b.y)
        return Rect(x0, y0, x1 - x0, y1 - y0)


# ==============================================================================
# Helpers
# ==============================================================================


def drag_to_device_rect(start: Point, end: Point) -> DeviceRect:
    """Normalize a drag between two device points into a rectangle."""
    x = min(start.x, end.x)
    y = min(start.y, end.y)
    return DeviceRect(x, y, abs(end.x - start.x), abs(end.y - start.y))


def is_degenerate(rect: DeviceRect, min_size: float = 5.0) -> bool:
    """True when the rectangle is too small to count as a deliberate drag."""
    return rect.width <= min_size or rect.height <= min_size


def pixel_bounds(rect: DeviceRect, width: int, height: int) -> Tuple[int, int, int, int]:
    """
    Snap a device rectangle outward to whole pixels and clamp it to a raster.

    Returns:
        (x0, y0, x1, y1) with x1/y1 exclusive. May describe an empty area.
    """
    x0 = math.floor(round(rect.x, _SNAP_DIGITS))
    y0 = math.floor(round(rect.y, _SNAP_DIGITS))
    x1 = math.ceil(round(rect.right, _SNAP_DIGITS))
    y1 = math.ceil(round(rect.bottom, _SNAP_DIGITS))

    x0 = min(max(x0, 0), width)
    y0 = min(max(y0, 0), height)
    x1 = min(max(x1, x0), width)
    y1 = min(max(y1, y0), height)
    return x0, y0, x1, y1
