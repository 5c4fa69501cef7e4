"""
Annotation records, the per-document store and JSON persistence.
"""
from .models import (
    Annotation,
    AnnotationKind,
    Blur,
    Color,
    FreehandStroke,
    OpaqueFill,
    Pixelate,
    StrokeRect,
    TextLabel,
    BLACK,
    WHITE,
    RED,
)
from .store import AnnotationStore
from .persistence import AnnotationPersistence

__all__ = [
    'Annotation',
    'AnnotationKind',
    'Blur',
    'Color',
    'FreehandStroke',
    'OpaqueFill',
    'Pixelate',
    'StrokeRect',
    'TextLabel',
    'BLACK',
    'WHITE',
    'RED',
    'AnnotationStore',
    'AnnotationPersistence',
]
