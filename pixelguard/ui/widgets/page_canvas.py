"""
Widget showing the composed page of the active document.
"""
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QMouseEvent, QPixmap
from PyQt5.QtWidgets import QInputDialog, QLabel

from ...controllers.annotation_controller import AnnotationController
from ...core.gesture import ToolType


class PageCanvas(QLabel):
    """Displays the overlay image and feeds mouse input to the controller."""

    def __init__(self, controller: AnnotationController, parent=None):
        super().__init__(parent)
        self.controller = controller
        self.setAlignment(Qt.AlignLeft | Qt.AlignTop)
        self.setMouseTracking(False)

        controller.annotations_changed.connect(self.refresh)
        controller.preview_changed.connect(self.refresh)
        controller.view_changed.connect(self.refresh)

    def refresh(self):
        """Recompose and show the current page."""
        session = self.controller.session
        if session is None:
            self.clear()
            return

        image = session.compose()
        self.setPixmap(QPixmap.fromImage(image))
        self.setFixedSize(image.size())
        self.setCursor(Qt.ArrowCursor if self.controller.tool is None else Qt.CrossCursor)

    # Mouse event handlers

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() != Qt.LeftButton:
            return super().mousePressEvent(event)
        self.controller.press(event.x(), event.y())

    def mouseMoveEvent(self, event: QMouseEvent):
        if event.buttons() & Qt.LeftButton:
            self.controller.move(event.x(), event.y())

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() != Qt.LeftButton:
            return super().mouseReleaseEvent(event)

        if self.controller.tool == ToolType.TEXT:
            text, ok = QInputDialog.getText(self, "Add Text", "Text:")
            if ok and text:
                self.controller.place_text(event.x(), event.y(), text)
            return

        self.controller.release(event.x(), event.y())

    def mouseDoubleClickEvent(self, event: QMouseEvent):
        label = self.controller.text_label_at(event.x(), event.y())
        if label is None:
            return super().mouseDoubleClickEvent(event)

        text, ok = QInputDialog.getText(self, "Edit Text", "Text:", text=label.text)
        if ok:
            self.controller.edit_text(label, text)
