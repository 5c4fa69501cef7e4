"""
Document sessions: everything that belongs to one open document.

Sessions share no mutable state; the SessionManager maps ids to sessions and
tracks which one is active.
"""
import copy
import logging
import os
import threading
import uuid
from collections import OrderedDict
from typing import Dict, Iterator, List, Optional, Tuple

from PyQt5.QtGui import QImage

from ..config import Settings
from .annotations.models import Annotation, TextLabel
from .annotations.persistence import AnnotationPersistence
from .annotations.store import AnnotationStore
from .detection import SensitiveRegionDetector, boxes_to_rects
from .document.codec import DocumentCodec
from .document.renderer import PageRenderer, RasterPage
from .errors import ExportConflict, LoadError
from .export.burn_in import BurnInExporter, ProgressCallback
from .geometry import Point, Rect, Viewport, is_degenerate
from .gesture import GestureMachine, ToolType, annotation_for_box, text_label_at
from .overlay import OverlayCompositor

logger = logging.getLogger(__name__)


class DocumentSession:
    """
    One open document with its annotations, undo history and view state.

    Args:
        data: Original PDF bytes, kept unchanged for export
        name: Display name (usually the file name)
        settings: Shared settings

    Raises:
        LoadError: The bytes are not a readable PDF
    """

    def __init__(self, data: bytes, name: str, settings: Optional[Settings] = None,
                 session_id: Optional[str] = None):
        self.settings = settings or Settings()
        self.codec = DocumentCodec()
        self.renderer = PageRenderer()
        self.compositor = OverlayCompositor(self.settings)

        self.document = self.codec.decode(data)
        self._original = bytes(data)

        self.id = session_id or uuid.uuid4().hex[:12]
        self.name = name
        self.store = AnnotationStore()
        self.gesture = GestureMachine()

        self.current_page: int = 0
        self.scale: float = self.settings.default_scale

        self._raster_cache: "OrderedDict[Tuple[int, float], RasterPage]" = OrderedDict()
        self._export_lock = threading.Lock()

    # Document

    @property
    def original_bytes(self) -> bytes:
        return self._original

    @property
    def page_count(self) -> int:
        return self.document.page_count

    def page_size(self, page_index: int) -> Tuple[float, float]:
        """Page size in points."""
        rect = self.document[page_index].rect
        return rect.width, rect.height

    def viewport(self, page_index: Optional[int] = None) -> Viewport:
        page_index = self.current_page if page_index is None else page_index
        width, height = self.page_size(page_index)
        return Viewport(width, height, self.scale)

    def close(self) -> None:
        self.gesture.cancel()
        self._raster_cache.clear()
        self.document.close()

    # View state

    def go_to_page(self, page_index: int) -> int:
        """Switch page, clamped to the document. Cancels a pending drag."""
        page_index = max(0, min(self.page_count - 1, page_index))
        if page_index != self.current_page:
            self.gesture.cancel()
            self.current_page = page_index
        return self.current_page

    def set_scale(self, scale: float) -> float:
        """Set the zoom factor, clamped to the configured range."""
        scale = max(self.settings.zoom_min, min(self.settings.zoom_max, scale))
        if scale != self.scale:
            self.gesture.cancel()
            self.scale = scale
        return self.scale

    def zoom_in(self) -> float:
        return self.set_scale(self.scale + self.settings.zoom_step)

    def zoom_out(self) -> float:
        return self.set_scale(self.scale - self.settings.zoom_step)

    def base_raster(self, page_index: Optional[int] = None) -> RasterPage:
        """
        Rendered page at the current scale, cached for the last few
        (page, scale) pairs.
        """
        page_index = self.current_page if page_index is None else page_index
        cache_key = (page_index, self.scale)

        if cache_key in self._raster_cache:
            self._raster_cache.move_to_end(cache_key)
            return self._raster_cache[cache_key]

        raster = self.renderer.rasterize(self.document[page_index], self.scale)
        self._raster_cache[cache_key] = raster
        if len(self._raster_cache) > self.settings.raster_cache_size:
            self._raster_cache.popitem(last=False)
        return raster

    def compose(self) -> QImage:
        """Preview image of the current page."""
        return self.compositor.compose(
            self.base_raster(),
            self.store.for_page(self.current_page),
            self.gesture.preview(),
        )

    # Editing

    def press(self, point: Point, tool: ToolType) -> None:
        self.gesture.press(point, tool)

    def move(self, point: Point) -> None:
        self.gesture.move(point)

    def release(self, point: Point) -> Optional[Annotation]:
        """Finish the drag on the current page and append its annotation."""
        annotation = self.gesture.release(point, self.viewport(), self.current_page, self.settings)
        if annotation is not None:
            self.store.append(annotation)
        return annotation

    def place_text(self, point: Point, text: str) -> Optional[TextLabel]:
        """Add a text label at a clicked device point on the current page."""
        label = text_label_at(point, self.viewport(), self.current_page, text, self.settings)
        if label is not None:
            self.store.append(label)
        return label

    def text_label_at(self, point: Point) -> Optional[TextLabel]:
        """Topmost text label under a device point of the current page."""
        doc_point = self.viewport().to_document(point)
        return self.store.topmost_text_at(self.current_page, doc_point)

    def edit_text(self, annotation_id: str, new_text: str) -> None:
        self.store.edit_text(annotation_id, new_text)

    def undo(self) -> None:
        self.store.undo()

    def redo(self) -> None:
        self.store.redo()

    def clear_page(self, page_index: Optional[int] = None) -> None:
        self.store.clear_page(self.current_page if page_index is None else page_index)

    # Detection

    def apply_detections(self, page_index: int, rects: List[Rect],
                         tool: ToolType = ToolType.PIXELATE) -> List[Annotation]:
        """
        Append detector rectangles as destructive annotations.

        Rectangles that would be a degenerate drag at the current zoom are
        dropped, exactly like manual gestures.

        Returns:
            The annotations that were appended
        """
        if not tool.is_destructive:
            raise ValueError(f"{tool.value} is not a redaction tool")

        viewport = self.viewport(page_index)
        added = []
        for rect in rects:
            rect = rect.clamped(viewport.page_width, viewport.page_height)
            if rect.is_empty or is_degenerate(viewport.rect_to_device(rect), self.settings.min_drag_px):
                logger.debug("Dropped detected region %s", rect)
                continue
            annotation = annotation_for_box(tool, page_index, rect, self.settings)
            self.store.append(annotation)
            added.append(annotation)
        return added

    def detect(self, detector: SensitiveRegionDetector, page_index: Optional[int] = None,
               tool: ToolType = ToolType.PIXELATE) -> List[Annotation]:
        """Run a detector on a page and append what it finds."""
        page_index = self.current_page if page_index is None else page_index
        raster = self.base_raster(page_index)
        boxes = detector.detect(raster)
        rects = boxes_to_rects(boxes, raster.doc_width, raster.doc_height)
        logger.info("Detector returned %d region(s) on page %d", len(rects), page_index)
        return self.apply_detections(page_index, rects, tool)

    # Export

    @property
    def is_exporting(self) -> bool:
        return self._export_lock.locked()

    def export(self, progress: Optional[ProgressCallback] = None) -> bytes:
        """
        Burn all annotations into a new PDF.

        Raises:
            ExportConflict: Another export of this session is running
            LoadError, RenderError, EncodeError: The export failed
        """
        if not self._export_lock.acquire(blocking=False):
            raise ExportConflict(f"An export of {self.name} is already running")

        try:
            # Later edits must not leak into this export
            annotations = copy.deepcopy(self.store.annotations)
            exporter = BurnInExporter(self.settings, self.codec, PageRenderer())
            return exporter.export(self._original, annotations, progress)
        finally:
            self._export_lock.release()

    def suggested_export_name(self) -> str:
        stem = self.name[:-4] if self.name.lower().endswith(".pdf") else self.name
        return f"{self.settings.export_prefix}{stem}.pdf"

    # Saved work

    def save_annotations(self, persistence: AnnotationPersistence) -> bool:
        key = persistence.document_key(self._original)
        if len(self.store) == 0:
            return persistence.delete(key)
        return persistence.save(self.store.annotations, key, self.name)

    def load_annotations(self, persistence: AnnotationPersistence) -> int:
        """Restore saved annotations. Returns how many were loaded."""
        key = persistence.document_key(self._original)
        annotations, success = persistence.load(key)
        if not success:
            return 0
        valid = [a for a in annotations if 0 <= a.page_index < self.page_count]
        self.store.replace_all(valid)
        return len(valid)


class SessionManager:
    """All open documents and the one the user is working on."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self._sessions: Dict[str, DocumentSession] = {}
        self.active_id: Optional[str] = None

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[DocumentSession]:
        return iter(list(self._sessions.values()))

    @property
    def active(self) -> Optional[DocumentSession]:
        if self.active_id is None:
            return None
        return self._sessions.get(self.active_id)

    def get(self, session_id: str) -> DocumentSession:
        """
        Raises:
            KeyError: No open session has this id
        """
        return self._sessions[session_id]

    def open_bytes(self, data: bytes, name: str) -> DocumentSession:
        """Open a document from memory and make it active."""
        session = DocumentSession(data, name, self.settings)
        self._sessions[session.id] = session
        self.set_active(session.id)
        logger.info("Opened %s (%d pages) as session %s", name, session.page_count, session.id)
        return session

    def open_file(self, path: str) -> DocumentSession:
        """
        Raises:
            LoadError: The file cannot be read or is not a usable PDF
        """
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise LoadError(f"Cannot read {path}: {e}") from e
        return self.open_bytes(data, os.path.basename(path))

    def set_active(self, session_id: str) -> DocumentSession:
        """Activate a session; a drag on the previously active one is cancelled."""
        session = self.get(session_id)
        previous = self.active
        if previous is not None and previous.id != session_id:
            previous.gesture.cancel()
        self.active_id = session_id
        return session

    def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id)
        session.close()
        if self.active_id == session_id:
            self.active_id = list(self._sessions)[-1] if self._sessions else None

    def rename(self, session_id: str, name: str) -> DocumentSession:
        session = self.get(session_id)
        name = name.strip()
        if name:
            session.name = name
        return session

    def export_document(self, session_id: str) -> bytes:
        """
        Export a session's document with all annotations burned in.

        Raises:
            KeyError: Unknown session
            PixelGuardError: The export failed or one is already running
        """
        return self.get(session_id).export()
