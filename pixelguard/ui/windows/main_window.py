"""
Main application window for PixelGuard PDF.
"""
import logging
import os
import shutil
import tempfile
from typing import Optional

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QKeySequence
from PyQt5.QtWidgets import (
    QAction,
    QActionGroup,
    QFileDialog,
    QInputDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QProgressDialog,
    QScrollArea,
    QTabBar,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from ...config import Settings
from ...controllers import AnnotationController
from ...core.annotations import AnnotationPersistence
from ...core.errors import LoadError
from ...core.gesture import ToolType
from ...core.session import SessionManager
from ..widgets import PageCanvas

logger = logging.getLogger(__name__)

TOOL_LABELS = [
    (ToolType.PIXELATE, "Mosaic"),
    (ToolType.BLUR, "Blur"),
    (ToolType.BLACKOUT, "Blackout"),
    (ToolType.WHITEOUT, "Whiteout"),
    (ToolType.RECTANGLE, "Rectangle"),
    (ToolType.PEN, "Pen"),
    (ToolType.TEXT, "Text"),
]


class MainWindow(QMainWindow):
    """Tabbed document editor with a redaction toolbar."""

    def __init__(self, settings: Optional[Settings] = None, file_path: Optional[str] = None):
        super().__init__()
        self.settings = settings or Settings()
        self.sessions = SessionManager(self.settings)
        self.persistence = AnnotationPersistence()
        self.controller = AnnotationController(self.sessions, self)

        self.setWindowTitle("PixelGuard PDF")
        self.resize(1100, 800)

        self._setup_toolbar()
        self._setup_central_widget()

        self.controller.annotations_changed.connect(self._update_status)
        self.controller.view_changed.connect(self._update_status)
        self._update_status()

        if file_path:
            self.open_path(file_path)

    # UI setup

    def _setup_toolbar(self):
        toolbar = QToolBar("Tools", self)
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        self._add_action(toolbar, "Open", self.open_pdf, QKeySequence.Open)
        self._add_action(toolbar, "Export", self.export_pdf, QKeySequence("Ctrl+E"))
        toolbar.addSeparator()

        group = QActionGroup(self)
        group.setExclusive(True)
        view_action = QAction("View", self, checkable=True)
        view_action.setChecked(True)
        view_action.triggered.connect(lambda checked=False: self.controller.set_tool(None))
        group.addAction(view_action)
        toolbar.addAction(view_action)

        for tool, label in TOOL_LABELS:
            action = QAction(label, self, checkable=True)
            action.triggered.connect(lambda checked, t=tool: self.controller.set_tool(t))
            group.addAction(action)
            toolbar.addAction(action)
        toolbar.addSeparator()

        self.undo_action = self._add_action(toolbar, "Undo", self.controller.undo, QKeySequence.Undo)
        self.redo_action = self._add_action(toolbar, "Redo", self.controller.redo, QKeySequence.Redo)
        self._add_action(toolbar, "Clear Page", self.clear_page)
        toolbar.addSeparator()

        self._add_action(toolbar, "Previous", self.controller.previous_page, QKeySequence(Qt.Key_PageUp))
        self._add_action(toolbar, "Next", self.controller.next_page, QKeySequence(Qt.Key_PageDown))
        self._add_action(toolbar, "Zoom Out", self.controller.zoom_out, QKeySequence.ZoomOut)
        self._add_action(toolbar, "Zoom In", self.controller.zoom_in, QKeySequence.ZoomIn)

    def _add_action(self, toolbar: QToolBar, text: str, slot, shortcut=None) -> QAction:
        action = QAction(text, self)
        if shortcut is not None:
            action.setShortcut(shortcut)
        action.triggered.connect(lambda checked=False: slot())
        toolbar.addAction(action)
        return action

    def _setup_central_widget(self):
        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        self.tab_bar = QTabBar(central)
        self.tab_bar.setTabsClosable(True)
        self.tab_bar.setExpanding(False)
        self.tab_bar.currentChanged.connect(self._on_tab_changed)
        self.tab_bar.tabCloseRequested.connect(self.close_tab)
        self.tab_bar.tabBarDoubleClicked.connect(self.rename_tab)
        layout.addWidget(self.tab_bar)

        self.canvas = PageCanvas(self.controller)
        self.scroll_area = QScrollArea(central)
        self.scroll_area.setAlignment(Qt.AlignCenter)
        self.scroll_area.setWidget(self.canvas)
        layout.addWidget(self.scroll_area, 1)

        self.setCentralWidget(central)

        self.page_label = QLabel(self)
        self.statusBar().addPermanentWidget(self.page_label)

    # Documents

    def open_pdf(self):
        """Open a PDF file dialog."""
        file_path, _ = QFileDialog.getOpenFileName(self, "Open PDF", "", "PDF Files (*.pdf)")
        if file_path:
            self.open_path(file_path)

    def open_path(self, file_path: str) -> bool:
        try:
            session = self.sessions.open_file(file_path)
        except LoadError as e:
            logger.warning("Could not open %s: %s", file_path, e)
            QMessageBox.critical(self, "Open Failed", str(e))
            return False

        restored = session.load_annotations(self.persistence)
        if restored > 0:
            QMessageBox.information(
                self,
                "Annotations Loaded",
                f"Loaded {restored} existing annotation(s) from previous session.",
            )

        index = self.tab_bar.addTab(session.name)
        self.tab_bar.setTabData(index, session.id)
        self.tab_bar.setCurrentIndex(index)
        self.controller.activate(session.id)
        return True

    def _on_tab_changed(self, index: int):
        if index < 0:
            self.controller.view_changed.emit()
            return
        self.controller.activate(self.tab_bar.tabData(index))

    def close_tab(self, index: int):
        session_id = self.tab_bar.tabData(index)
        session = self.sessions.get(session_id)
        if session.is_exporting:
            QMessageBox.warning(self, "Export Running", "Wait for the export to finish before closing.")
            return

        session.save_annotations(self.persistence)
        self.sessions.close(session_id)
        self.tab_bar.removeTab(index)

        # The manager picks the new active document; keep the tab bar in sync
        active = self.sessions.active
        if active is not None:
            for i in range(self.tab_bar.count()):
                if self.tab_bar.tabData(i) == active.id:
                    self.tab_bar.setCurrentIndex(i)
                    break
        self.controller.view_changed.emit()

    def rename_tab(self, index: int):
        if index < 0:
            return
        session = self.sessions.get(self.tab_bar.tabData(index))
        name, ok = QInputDialog.getText(self, "Rename Document", "Name:", text=session.name)
        if ok:
            self.sessions.rename(session.id, name)
            self.tab_bar.setTabText(index, session.name)

    def clear_page(self):
        if self.controller.session is None:
            return
        reply = QMessageBox.question(
            self,
            "Clear Page",
            "Remove all annotations from this page?",
            QMessageBox.Yes | QMessageBox.No,
        )
        if reply == QMessageBox.Yes:
            self.controller.clear_page()

    # Export

    def export_pdf(self) -> bool:
        """Burn the active document's annotations into a new PDF file."""
        session = self.controller.session
        if session is None:
            QMessageBox.warning(self, "No PDF", "No PDF document is currently loaded.")
            return False

        output_path, _ = QFileDialog.getSaveFileName(
            self, "Export Redacted PDF", session.suggested_export_name(), "PDF Files (*.pdf)"
        )
        if not output_path:
            return False

        worker = self.controller.prepare_export()
        if worker is None:
            QMessageBox.information(self, "Export Running", "This document is already being exported.")
            return False

        progress = QProgressDialog("Preparing export...", None, 0, 100, self)
        progress.setWindowTitle("Exporting PDF")
        progress.setMinimumDuration(0)
        progress.setCancelButton(None)
        progress.setAutoClose(False)
        progress.setAutoReset(False)
        progress.show()

        def on_progress(message):
            progress.setLabelText(message)

        def on_page_progress(current, total):
            if total > 0:
                progress.setValue(int((current / total) * 100))
                progress.setLabelText(f"Processing pages: {current}/{total}")

        def on_finished(success, message):
            progress.close()

            if success:
                try:
                    write_atomically(output_path, worker.result)
                except OSError as e:
                    logger.error("Could not write %s: %s", output_path, e)
                    QMessageBox.critical(self, "Export Failed", f"Could not write file: {e}")
                else:
                    QMessageBox.information(self, "Success", f"{message}\n{output_path}")
            else:
                QMessageBox.critical(self, "Export Failed", message)

            worker.deleteLater()

        worker.progress.connect(on_progress)
        worker.page_progress.connect(on_page_progress)
        worker.finished.connect(on_finished)
        worker.start()
        return True

    # Status

    def _update_status(self):
        session = self.controller.session
        if session is None:
            self.page_label.setText("No PDF Loaded")
            self.undo_action.setEnabled(False)
            self.redo_action.setEnabled(False)
            return

        self.page_label.setText(
            f"Page {session.current_page + 1} / {session.page_count}   {int(session.scale * 100)}%"
        )
        self.undo_action.setEnabled(session.store.can_undo())
        self.redo_action.setEnabled(session.store.can_redo())

    def closeEvent(self, event):
        if any(session.is_exporting for session in self.sessions):
            QMessageBox.warning(self, "Export Running", "Wait for running exports to finish.")
            event.ignore()
            return

        for session in self.sessions:
            session.save_annotations(self.persistence)
            self.sessions.close(session.id)
        super().closeEvent(event)


def write_atomically(path: str, data: bytes) -> None:
    """Write through a temp file in the target directory, then move it into place."""
    directory = os.path.dirname(os.path.abspath(path))
    fd, temp_path = tempfile.mkstemp(suffix=".pdf", dir=directory)
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
        shutil.move(temp_path, path)
    except OSError:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise
