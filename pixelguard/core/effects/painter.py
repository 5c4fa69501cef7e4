"""
QPainter drawing for the non-destructive annotation kinds, plus conversion
between numpy rasters and QImage.
"""
from typing import Sequence

import numpy as np
from PyQt5.QtCore import QPointF, QRectF, Qt
from PyQt5.QtGui import QBrush, QColor, QFont, QImage, QPainter, QPainterPath, QPen

from ..annotations.models import Annotation, FreehandStroke, StrokeRect, TextLabel
from ..geometry import Viewport

TEXT_FONT_FAMILY = "Helvetica"


def array_to_qimage(pixels: np.ndarray) -> QImage:
    """Copy an H x W x 3 uint8 array into a standalone RGB888 QImage."""
    pixels = np.ascontiguousarray(pixels, dtype=np.uint8)
    height, width = pixels.shape[:2]
    image = QImage(pixels.tobytes(), width, height, width * 3, QImage.Format_RGB888)
    return image.copy()


def qimage_to_array(image: QImage) -> np.ndarray:
    """Copy a QImage into an H x W x 3 uint8 array."""
    image = image.convertToFormat(QImage.Format_RGB888)
    width, height = image.width(), image.height()
    stride = image.bytesPerLine()

    ptr = image.constBits()
    data = np.frombuffer(ptr.asstring(stride * height), dtype=np.uint8)
    return data.reshape(height, stride)[:, : width * 3].reshape(height, width, 3).copy()


def qcolor(color, alpha: int = 255) -> QColor:
    return QColor(color[0], color[1], color[2], alpha)


def paint_stroke_rect(painter: QPainter, annotation: StrokeRect, viewport: Viewport):
    """Paint a rectangle outline."""
    r = viewport.rect_to_device(annotation.rect)
    pen = QPen(qcolor(annotation.color), annotation.width * viewport.scale)
    pen.setJoinStyle(Qt.MiterJoin)
    painter.setPen(pen)
    painter.setBrush(Qt.NoBrush)
    painter.drawRect(QRectF(r.x, r.y, r.width, r.height))


def paint_freehand(painter: QPainter, annotation: FreehandStroke, viewport: Viewport):
    """Paint a freehand pen path."""
    pen = QPen(qcolor(annotation.color), annotation.width * viewport.scale)
    pen.setCapStyle(Qt.RoundCap)
    pen.setJoinStyle(Qt.RoundJoin)
    painter.setPen(pen)
    painter.setBrush(Qt.NoBrush)

    points = [viewport.to_device(p) for p in annotation.points]
    path = QPainterPath()
    path.moveTo(points[0].x, points[0].y)
    for point in points[1:]:
        path.lineTo(point.x, point.y)

    painter.drawPath(path)


def paint_text(painter: QPainter, annotation: TextLabel, viewport: Viewport):
    """Paint a text label with its first baseline one font size below the box top."""
    r = viewport.rect_to_device(annotation.rect)
    size = annotation.font_size * viewport.scale

    font = QFont(TEXT_FONT_FAMILY)
    font.setPixelSize(max(1, int(round(size))))
    painter.setFont(font)
    painter.setPen(QPen(qcolor(annotation.color)))
    painter.setBrush(QBrush(Qt.NoBrush))
    painter.drawText(QPointF(r.x, r.y + size), annotation.text)


def paint_vector_annotation(painter: QPainter, annotation: Annotation, viewport: Viewport):
    """
    Paint one non-destructive annotation.

    Raises:
        TypeError: The annotation is destructive or unknown
    """
    if isinstance(annotation, StrokeRect):
        paint_stroke_rect(painter, annotation, viewport)
    elif isinstance(annotation, FreehandStroke):
        paint_freehand(painter, annotation, viewport)
    elif isinstance(annotation, TextLabel):
        paint_text(painter, annotation, viewport)
    else:
        raise TypeError(f"{type(annotation).__name__} is not a vector annotation")


def paint_vectors_into(pixels: np.ndarray, annotations: Sequence[Annotation],
                       viewport: Viewport) -> np.ndarray:
    """Flatten vector annotations into a copy of a raster."""
    image = array_to_qimage(pixels)
    painter = QPainter(image)
    painter.setRenderHint(QPainter.Antialiasing)
    for ann in annotations:
        paint_vector_annotation(painter, ann, viewport)
    painter.end()
    return qimage_to_array(image)
