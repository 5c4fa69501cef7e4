"""
Annotation records. One dataclass per effect kind; all geometry is stored in
document space.
"""
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple

from ..geometry import Point, Rect

Color = Tuple[int, int, int]  # RGB (0-255)

BLACK: Color = (0, 0, 0)
WHITE: Color = (255, 255, 255)
RED: Color = (239, 68, 68)


class AnnotationKind(Enum):
    PIXELATE = "pixelate"
    BLUR = "blur"
    OPAQUE_FILL = "opaque_fill"
    STROKE_RECT = "stroke_rect"
    FREEHAND = "freehand"
    TEXT = "text"


def new_annotation_id() -> str:
    return uuid.uuid4().hex


def _rect_to_list(rect: Rect) -> list:
    return [rect.x, rect.y, rect.width, rect.height]


def _rect_from_list(data) -> Rect:
    x, y, w, h = data
    return Rect(float(x), float(y), float(w), float(h))


# ==============================================================================
# Base
# ==============================================================================


@dataclass
class Annotation:
    """Common part of every annotation: the page it belongs to."""

    page_index: int  # 0-based page index

    kind: ClassVar[AnnotationKind]
    destructive: ClassVar[bool] = False

    @property
    def bounds(self) -> Rect:
        """Document-space box covered by this annotation."""
        return self.rect

    def _extra_dict(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert annotation to dictionary for JSON serialization."""
        data = {
            'id': self.id,
            'page_index': self.page_index,
            'type': self.kind.value,
        }
        data.update(self._extra_dict())
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Annotation":
        """Create an annotation of the right variant from a dictionary."""
        kind = AnnotationKind(data['type'])
        cls = _VARIANTS[kind]
        return cls._from_dict(data)


# ==============================================================================
# Destructive variants
# ==============================================================================


@dataclass
class Pixelate(Annotation):
    rect: Rect
    id: str = field(default_factory=new_annotation_id)

    kind: ClassVar[AnnotationKind] = AnnotationKind.PIXELATE
    destructive: ClassVar[bool] = True

    def _extra_dict(self):
        return {'rect': _rect_to_list(self.rect)}

    @classmethod
    def _from_dict(cls, data):
        return cls(page_index=data['page_index'], rect=_rect_from_list(data['rect']),
                   id=data.get('id') or new_annotation_id())


@dataclass
class Blur(Annotation):
    rect: Rect
    id: str = field(default_factory=new_annotation_id)

    kind: ClassVar[AnnotationKind] = AnnotationKind.BLUR
    destructive: ClassVar[bool] = True

    def _extra_dict(self):
        return {'rect': _rect_to_list(self.rect)}

    @classmethod
    def _from_dict(cls, data):
        return cls(page_index=data['page_index'], rect=_rect_from_list(data['rect']),
                   id=data.get('id') or new_annotation_id())


@dataclass
class OpaqueFill(Annotation):
    rect: Rect
    color: Color = BLACK
    id: str = field(default_factory=new_annotation_id)

    kind: ClassVar[AnnotationKind] = AnnotationKind.OPAQUE_FILL
    destructive: ClassVar[bool] = True

    def _extra_dict(self):
        return {'rect': _rect_to_list(self.rect), 'color': list(self.color)}

    @classmethod
    def _from_dict(cls, data):
        return cls(page_index=data['page_index'], rect=_rect_from_list(data['rect']),
                   color=tuple(data.get('color', BLACK)),
                   id=data.get('id') or new_annotation_id())


# ==============================================================================
# Vector variants
# ==============================================================================


@dataclass
class StrokeRect(Annotation):
    rect: Rect
    color: Color = RED
    width: float = 2.0
    id: str = field(default_factory=new_annotation_id)

    kind: ClassVar[AnnotationKind] = AnnotationKind.STROKE_RECT

    def _extra_dict(self):
        return {'rect': _rect_to_list(self.rect), 'color': list(self.color),
                'width': self.width}

    @classmethod
    def _from_dict(cls, data):
        return cls(page_index=data['page_index'], rect=_rect_from_list(data['rect']),
                   color=tuple(data.get('color', RED)),
                   width=data.get('width', 2.0),
                   id=data.get('id') or new_annotation_id())


@dataclass
class FreehandStroke(Annotation):
    """A pen path. Needs at least two points."""

    points: Tuple[Point, ...]
    color: Color = RED
    width: float = 2.0
    id: str = field(default_factory=new_annotation_id)

    kind: ClassVar[AnnotationKind] = AnnotationKind.FREEHAND

    def __post_init__(self):
        self.points = tuple(self.points)
        if len(self.points) < 2:
            raise ValueError("A freehand stroke needs at least two points")

    @property
    def bounds(self) -> Rect:
        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]
        return Rect(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))

    def _extra_dict(self):
        return {'points': [[p.x, p.y] for p in self.points],
                'color': list(self.color), 'width': self.width}

    @classmethod
    def _from_dict(cls, data):
        return cls(page_index=data['page_index'],
                   points=tuple(Point(float(x), float(y)) for x, y in data['points']),
                   color=tuple(data.get('color', RED)),
                   width=data.get('width', 2.0),
                   id=data.get('id') or new_annotation_id())


@dataclass
class TextLabel(Annotation):
    """Literal text drawn at the top-left of its box."""

    rect: Rect
    text: str
    font_size: float = 14.0
    color: Color = BLACK
    id: str = field(default_factory=new_annotation_id)

    kind: ClassVar[AnnotationKind] = AnnotationKind.TEXT

    def _extra_dict(self):
        return {'rect': _rect_to_list(self.rect), 'text': self.text,
                'font_size': self.font_size, 'color': list(self.color)}

    @classmethod
    def _from_dict(cls, data):
        return cls(page_index=data['page_index'], rect=_rect_from_list(data['rect']),
                   text=data['text'], font_size=data.get('font_size', 14.0),
                   color=tuple(data.get('color', BLACK)),
                   id=data.get('id') or new_annotation_id())


_VARIANTS = {
    AnnotationKind.PIXELATE: Pixelate,
    AnnotationKind.BLUR: Blur,
    AnnotationKind.OPAQUE_FILL: OpaqueFill,
    AnnotationKind.STROKE_RECT: StrokeRect,
    AnnotationKind.FREEHAND: FreehandStroke,
    AnnotationKind.TEXT: TextLabel,
}


def find_text_label(annotations, point: Point) -> Optional[TextLabel]:
    """Topmost text label whose box contains the point."""
    for ann in reversed(list(annotations)):
        if isinstance(ann, TextLabel) and ann.rect.contains(point):
            return ann
    return None
