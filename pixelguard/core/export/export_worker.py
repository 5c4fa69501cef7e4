"""
Background export so the UI stays responsive.
"""
import logging
from typing import TYPE_CHECKING, Optional

from PyQt5.QtCore import QThread, pyqtSignal

from ..errors import PixelGuardError

if TYPE_CHECKING:
    from ..session import DocumentSession

logger = logging.getLogger(__name__)


class ExportWorker(QThread):
    """Worker thread that burns a session's annotations into new PDF bytes."""

    # Signals
    finished = pyqtSignal(bool, str)  # success, message
    progress = pyqtSignal(str)  # status message
    page_progress = pyqtSignal(int, int)  # current, total pages

    def __init__(self, session: "DocumentSession", parent=None):
        super().__init__(parent)
        self.session = session
        self._result: Optional[bytes] = None

    @property
    def result(self) -> Optional[bytes]:
        """Exported bytes once finished successfully, otherwise None."""
        return self._result

    def run(self):
        """Execute the export in a background thread."""
        self.progress.emit("Exporting annotations...")
        try:
            self._result = self.session.export(progress=self._on_page_progress)
        except PixelGuardError as e:
            logger.error("Export of %s failed: %s", self.session.name, e)
            self.finished.emit(False, f"Export failed: {e}")
            return
        except Exception as e:
            logger.exception("Unexpected error exporting %s", self.session.name)
            self.finished.emit(False, f"Error during export: {str(e)}")
            return

        self.finished.emit(True, "Document exported successfully.")

    def _on_page_progress(self, current, total):
        """Handle page-level progress updates."""
        self.page_progress.emit(current, total)
