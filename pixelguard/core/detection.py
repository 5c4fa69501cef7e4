"""
Interface for automatic sensitive-region detection.

Detectors look at a page raster and return boxes normalized to 0-1000 with a
top-left origin. They are converted to document rectangles and appended like
user-drawn redactions.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List

from .document.renderer import RasterPage
from .geometry import Rect

NORMALIZED_EXTENT = 1000.0


@dataclass(frozen=True)
class DetectedBox:
    """A candidate region, normalized to 0-1000, top-left origin."""

    xmin: float
    ymin: float
    xmax: float
    ymax: float
    label: str = ""


class SensitiveRegionDetector(ABC):
    """Finds faces, plates, e-mail addresses and similar on a page."""

    @abstractmethod
    def detect(self, raster: RasterPage) -> List[DetectedBox]:
        """Return candidate boxes for one rendered page."""


def box_to_rect(box: DetectedBox, page_width: float, page_height: float) -> Rect:
    """
    Convert a normalized top-left box to a bottom-left document rectangle.

    The box's ymax is its visual bottom edge, which becomes the rectangle's y.
    """
    x0, x1 = sorted((box.xmin, box.xmax))
    y0, y1 = sorted((box.ymin, box.ymax))
    return Rect(
        x=x0 / NORMALIZED_EXTENT * page_width,
        y=page_height - y1 / NORMALIZED_EXTENT * page_height,
        width=(x1 - x0) / NORMALIZED_EXTENT * page_width,
        height=(y1 - y0) / NORMALIZED_EXTENT * page_height,
    )


def boxes_to_rects(boxes: Iterable[DetectedBox], page_width: float, page_height: float) -> List[Rect]:
    return [box_to_rect(box, page_width, page_height) for box in boxes]
