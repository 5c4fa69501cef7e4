"""
Drag gesture state machine: Idle -> Dragging -> Idle.

Points fed in are device coordinates of the current page view. A completed
drag becomes an annotation in document space; drags that are too small are
silently dropped.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..config import Settings
from .annotations.models import (
    BLACK,
    WHITE,
    Annotation,
    Blur,
    FreehandStroke,
    OpaqueFill,
    Pixelate,
    StrokeRect,
    TextLabel,
)
from .geometry import Point, Rect, Viewport, drag_to_device_rect, is_degenerate

logger = logging.getLogger(__name__)


class ToolType(Enum):
    PIXELATE = "pixelate"
    BLUR = "blur"
    BLACKOUT = "blackout"
    WHITEOUT = "whiteout"
    RECTANGLE = "rectangle"
    PEN = "pen"
    TEXT = "text"

    @property
    def is_box_tool(self) -> bool:
        return self not in (ToolType.PEN, ToolType.TEXT)

    @property
    def is_destructive(self) -> bool:
        return self in (ToolType.PIXELATE, ToolType.BLUR, ToolType.BLACKOUT, ToolType.WHITEOUT)


@dataclass
class Dragging:
    """A drag in progress."""

    start: Point
    current: Point
    tool: ToolType
    path: List[Point] = field(default_factory=list)


@dataclass(frozen=True)
class GesturePreview:
    """What the compositor needs to draw a pending shape."""

    tool: ToolType
    start: Point
    current: Point
    path: tuple = ()


def annotation_for_box(tool: ToolType, page_index: int, rect: Rect,
                       settings: Settings) -> Annotation:
    """Build the annotation a box tool produces for a document rectangle."""
    if tool == ToolType.PIXELATE:
        return Pixelate(page_index=page_index, rect=rect)
    if tool == ToolType.BLUR:
        return Blur(page_index=page_index, rect=rect)
    if tool == ToolType.BLACKOUT:
        return OpaqueFill(page_index=page_index, rect=rect, color=BLACK)
    if tool == ToolType.WHITEOUT:
        return OpaqueFill(page_index=page_index, rect=rect, color=WHITE)
    if tool == ToolType.RECTANGLE:
        return StrokeRect(page_index=page_index, rect=rect,
                          color=tuple(settings.stroke_color), width=settings.stroke_width)
    raise ValueError(f"{tool.value} is not a box tool")


def text_label_at(point: Point, viewport: Viewport, page_index: int, text: str,
                  settings: Optional[Settings] = None) -> Optional[TextLabel]:
    """
    Build a text label whose box hangs down-right from a clicked device point.

    Returns:
        The label, or None for empty text
    """
    if not text:
        return None

    settings = settings or Settings()
    anchor = viewport.to_document(point)
    width, height = settings.text_box
    return TextLabel(
        page_index=page_index,
        rect=Rect(anchor.x, anchor.y - height, width, height),
        text=text,
        font_size=settings.text_font_size,
        color=tuple(settings.text_color),
    )


class GestureMachine:
    """Tracks one in-progress drag for one document session."""

    def __init__(self):
        self.state: Optional[Dragging] = None

    @property
    def is_dragging(self) -> bool:
        return self.state is not None

    def press(self, point: Point, tool: ToolType) -> None:
        """Start a drag. The text tool is click based and never drags."""
        if tool == ToolType.TEXT:
            return
        self.state = Dragging(start=point, current=point, tool=tool,
                              path=[point] if tool == ToolType.PEN else [])

    def move(self, point: Point) -> None:
        if self.state is None:
            return
        self.state.current = point
        if self.state.tool == ToolType.PEN:
            self.state.path.append(point)

    def release(self, point: Point, viewport: Viewport, page_index: int,
                settings: Optional[Settings] = None) -> Optional[Annotation]:
        """
        Finish the drag.

        Returns:
            The new annotation, or None when nothing was dragging or the
            shape was rejected
        """
        drag = self.state
        self.state = None
        if drag is None:
            return None

        settings = settings or Settings()

        if drag.tool == ToolType.PEN:
            path = drag.path + ([point] if point != drag.path[-1] else [])
            if len(path) < 2:
                return None
            doc_points = tuple(viewport.to_document(p) for p in path)
            return FreehandStroke(page_index=page_index, points=doc_points,
                                  color=tuple(settings.stroke_color),
                                  width=settings.stroke_width)

        device_rect = drag_to_device_rect(drag.start, point)
        if is_degenerate(device_rect, settings.min_drag_px):
            logger.debug("Rejected %.1fx%.1f drag", device_rect.width, device_rect.height)
            return None

        rect = viewport.rect_to_document(device_rect)
        rect = rect.clamped(viewport.page_width, viewport.page_height)
        if rect.is_empty:
            return None
        return annotation_for_box(drag.tool, page_index, rect, settings)

    def cancel(self) -> None:
        if self.state is not None:
            logger.debug("Cancelled %s gesture", self.state.tool.value)
        self.state = None

    def preview(self) -> Optional[GesturePreview]:
        if self.state is None:
            return None
        return GesturePreview(
            tool=self.state.tool,
            start=self.state.start,
            current=self.state.current,
            path=tuple(self.state.path),
        )
