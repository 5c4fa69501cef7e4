"""
Controller for managing annotation operations on the active document.
"""
import logging
from typing import Optional

from PyQt5.QtCore import QObject, pyqtSignal

from ..core.annotations.models import TextLabel
from ..core.export.export_worker import ExportWorker
from ..core.geometry import Point
from ..core.gesture import ToolType
from ..core.session import DocumentSession, SessionManager

logger = logging.getLogger(__name__)


class AnnotationController(QObject):
    """Routes user input to the active session and announces changes."""

    # Signals
    annotations_changed = pyqtSignal()  # committed annotations changed
    preview_changed = pyqtSignal()  # in-progress gesture moved
    view_changed = pyqtSignal()  # page, zoom or active document changed

    def __init__(self, sessions: SessionManager, parent=None):
        super().__init__(parent)
        self.sessions = sessions
        self.tool: Optional[ToolType] = None  # None = view mode
        self._export_workers = {}

    @property
    def session(self) -> Optional[DocumentSession]:
        return self.sessions.active

    def set_tool(self, tool: Optional[ToolType]) -> None:
        """Select an editing tool, or None for view mode."""
        self.tool = tool
        if self.session is not None:
            self.session.gesture.cancel()
            self.preview_changed.emit()

    def activate(self, session_id: str) -> None:
        self.sessions.set_active(session_id)
        self.view_changed.emit()

    # Gestures

    def press(self, x: float, y: float) -> None:
        if self.session is None or self.tool is None:
            return
        self.session.press(Point(x, y), self.tool)
        self.preview_changed.emit()

    def move(self, x: float, y: float) -> None:
        if self.session is None or not self.session.gesture.is_dragging:
            return
        self.session.move(Point(x, y))
        self.preview_changed.emit()

    def release(self, x: float, y: float) -> bool:
        """
        Finish a drag.

        Returns:
            True if an annotation was created
        """
        if self.session is None or not self.session.gesture.is_dragging:
            return False
        annotation = self.session.release(Point(x, y))
        if annotation is None:
            self.preview_changed.emit()
            return False
        self.annotations_changed.emit()
        return True

    def place_text(self, x: float, y: float, text: str) -> bool:
        if self.session is None:
            return False
        if self.session.place_text(Point(x, y), text) is None:
            return False
        self.annotations_changed.emit()
        return True

    def text_label_at(self, x: float, y: float) -> Optional[TextLabel]:
        if self.session is None:
            return None
        return self.session.text_label_at(Point(x, y))

    def edit_text(self, label: TextLabel, new_text: str) -> None:
        self.session.edit_text(label.id, new_text)
        self.annotations_changed.emit()

    # History

    def undo(self) -> bool:
        if self.session is None or not self.session.store.can_undo():
            return False
        self.session.undo()
        self.annotations_changed.emit()
        return True

    def redo(self) -> bool:
        if self.session is None or not self.session.store.can_redo():
            return False
        self.session.redo()
        self.annotations_changed.emit()
        return True

    def clear_page(self) -> None:
        if self.session is None:
            return
        self.session.clear_page()
        self.annotations_changed.emit()

    # View

    def go_to_page(self, page_index: int) -> None:
        if self.session is None:
            return
        self.session.go_to_page(page_index)
        self.view_changed.emit()

    def next_page(self) -> None:
        if self.session is not None:
            self.go_to_page(self.session.current_page + 1)

    def previous_page(self) -> None:
        if self.session is not None:
            self.go_to_page(self.session.current_page - 1)

    def zoom_in(self) -> None:
        if self.session is not None:
            self.session.zoom_in()
            self.view_changed.emit()

    def zoom_out(self) -> None:
        if self.session is not None:
            self.session.zoom_out()
            self.view_changed.emit()

    # Export

    def prepare_export(self) -> Optional[ExportWorker]:
        """
        Create a background export worker for the active document. The caller
        connects its signals and starts it.

        Returns:
            The worker, or None when there is no document or one of
            its exports is still running
        """
        session = self.session
        if session is None:
            return None
        if session.is_exporting or session.id in self._export_workers:
            logger.warning("Export of %s already in progress", session.name)
            return None

        worker = ExportWorker(session, self)
        self._export_workers[session.id] = worker
        worker.finished.connect(lambda ok, msg, sid=session.id: self._export_workers.pop(sid, None))
        return worker
