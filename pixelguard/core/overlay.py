"""
Non-destructive preview of a page with its annotations.

The base raster is never modified: effects are applied to a copy, in
insertion order, so later annotations cover earlier ones.
"""
import logging
from typing import List, Optional, Sequence

import numpy as np
from PyQt5.QtCore import QRectF, Qt
from PyQt5.QtGui import QBrush, QColor, QImage, QPainter, QPainterPath, QPen

from ..config import Settings
from .annotations.models import Annotation
from .document.renderer import RasterPage
from .effects.painter import array_to_qimage, paint_vector_annotation, paint_vectors_into, qcolor
from .effects.raster import apply_raster_effect
from .geometry import Viewport, drag_to_device_rect, pixel_bounds
from .gesture import GesturePreview, ToolType

logger = logging.getLogger(__name__)

PREVIEW_OUTLINE = QColor(37, 99, 235)  # #2563eb
PREVIEW_STROKE_WIDTH = 2.0


class OverlayCompositor:
    """Builds the on-screen image of one page."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()

    def compose(self, base: RasterPage, annotations: Sequence[Annotation],
                preview: Optional[GesturePreview] = None) -> QImage:
        """
        Draw the page raster, its committed annotations and the pending gesture.

        Args:
            base: Rendered page at the view scale
            annotations: Annotations of this page in insertion order
            preview: Shape of the drag in progress, if any

        Returns:
            A new QImage the size of the base raster
        """
        viewport = base.viewport()
        pixels = np.array(base.pixels, dtype=np.uint8, copy=True)
        pending: List[Annotation] = []

        for ann in annotations:
            if ann.destructive:
                # Vectors drawn earlier must be under this effect
                if pending:
                    pixels = paint_vectors_into(pixels, pending, viewport)
                    pending = []
                self._apply_destructive(pixels, ann, viewport)
            else:
                pending.append(ann)

        image = array_to_qimage(pixels)
        painter = QPainter(image)
        painter.setRenderHint(QPainter.Antialiasing)
        for ann in pending:
            paint_vector_annotation(painter, ann, viewport)
        if preview is not None:
            self._paint_preview(painter, preview)
        painter.end()

        return image

    def _apply_destructive(self, pixels: np.ndarray, annotation: Annotation, viewport: Viewport):
        height, width = pixels.shape[:2]
        x0, y0, x1, y1 = pixel_bounds(viewport.rect_to_device(annotation.rect), width, height)
        if x1 <= x0 or y1 <= y0:
            return
        pixels[y0:y1, x0:x1] = apply_raster_effect(
            pixels[y0:y1, x0:x1], annotation, viewport.scale, self.settings
        )

    def _paint_preview(self, painter: QPainter, preview: GesturePreview):
        """Paint the current drawing in progress."""
        painter.save()

        if preview.tool == ToolType.PEN:
            if len(preview.path) >= 2:
                pen = QPen(qcolor(self.settings.stroke_color), PREVIEW_STROKE_WIDTH)
                pen.setCapStyle(Qt.RoundCap)
                pen.setJoinStyle(Qt.RoundJoin)
                painter.setPen(pen)
                painter.setBrush(Qt.NoBrush)

                path = QPainterPath()
                path.moveTo(preview.path[0].x, preview.path[0].y)
                for point in preview.path[1:]:
                    path.lineTo(point.x, point.y)
                painter.drawPath(path)

        elif preview.tool.is_box_tool:
            r = drag_to_device_rect(preview.start, preview.current)
            rect = QRectF(r.x, r.y, r.width, r.height)

            if preview.tool == ToolType.RECTANGLE:
                painter.setPen(QPen(qcolor(self.settings.stroke_color), PREVIEW_STROKE_WIDTH))
                painter.setBrush(Qt.NoBrush)
                painter.drawRect(rect)
            else:
                pen = QPen(PREVIEW_OUTLINE, PREVIEW_STROKE_WIDTH)
                pen.setDashPattern([2.5, 2.5])
                painter.setPen(pen)
                painter.setBrush(QBrush(self._preview_fill(preview.tool)))
                painter.drawRect(rect)

        painter.restore()

    @staticmethod
    def _preview_fill(tool: ToolType) -> QColor:
        if tool == ToolType.BLACKOUT:
            return QColor(0, 0, 0, 128)
        if tool == ToolType.WHITEOUT:
            return QColor(255, 255, 255, 128)
        return QColor(0, 0, 0, 26)
