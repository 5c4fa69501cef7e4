import pytest

from pixelguard.core.detection import DetectedBox, SensitiveRegionDetector, box_to_rect
from pixelguard.core.annotations import Blur, Pixelate
from pixelguard.core.geometry import Rect
from pixelguard.core.gesture import ToolType
from pixelguard.core.session import DocumentSession


class FixedDetector(SensitiveRegionDetector):
    def __init__(self, boxes):
        self.boxes = boxes
        self.seen = []

    def detect(self, raster):
        self.seen.append((raster.pixel_width, raster.pixel_height))
        return self.boxes


def test_box_to_rect_flips_origin():
    assert box_to_rect(DetectedBox(0, 0, 500, 500), 200, 400) == Rect(0, 200, 100, 200)


def test_box_to_rect_bottom_right():
    rect = box_to_rect(DetectedBox(500, 750, 1000, 1000), 200, 400)
    assert rect == Rect(100, 0, 100, 100)


def test_box_corners_normalized():
    assert box_to_rect(DetectedBox(500, 500, 0, 0), 200, 400) == Rect(0, 200, 100, 200)


@pytest.fixture
def session(three_page_pdf):
    session = DocumentSession(three_page_pdf, "scan.pdf")
    yield session
    session.close()


def test_detections_become_redactions(session):
    detector = FixedDetector([
        DetectedBox(100, 100, 400, 200, label="email"),
        DetectedBox(10, 10, 11, 11),  # well under the minimum drag size
    ])
    added = session.detect(detector, page_index=1)

    assert len(added) == 1
    assert isinstance(added[0], Pixelate)
    assert added[0].page_index == 1
    assert session.store.annotations == tuple(added)
    assert detector.seen == [(300, 400)]


def test_detections_with_other_tool(session):
    added = session.apply_detections(0, [Rect(10, 10, 100, 100)], ToolType.BLUR)
    assert isinstance(added[0], Blur)


def test_detections_require_redaction_tool(session):
    with pytest.raises(ValueError):
        session.apply_detections(0, [Rect(10, 10, 100, 100)], ToolType.RECTANGLE)
