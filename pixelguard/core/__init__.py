"""
Core business logic for PixelGuard PDF.
"""
from .annotations import Annotation, AnnotationKind, AnnotationStore
from .errors import (
    EncodeError,
    ExportConflict,
    LoadError,
    PixelGuardError,
    RenderError,
    TransformError,
)
from .geometry import DeviceRect, Point, Rect, Viewport
from .gesture import GestureMachine, ToolType
from .session import DocumentSession, SessionManager

__all__ = [
    'Annotation',
    'AnnotationKind',
    'AnnotationStore',
    'EncodeError',
    'ExportConflict',
    'LoadError',
    'PixelGuardError',
    'RenderError',
    'TransformError',
    'DeviceRect',
    'Point',
    'Rect',
    'Viewport',
    'GestureMachine',
    'ToolType',
    'DocumentSession',
    'SessionManager',
]
