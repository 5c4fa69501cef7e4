import pytest

from pixelguard.config import Settings
from pixelguard.core.annotations import AnnotationPersistence, OpaqueFill, Pixelate, TextLabel
from pixelguard.core.errors import ExportConflict, LoadError
from pixelguard.core.geometry import Point, Rect
from pixelguard.core.gesture import ToolType
from pixelguard.core.session import DocumentSession, SessionManager


@pytest.fixture
def session(three_page_pdf):
    session = DocumentSession(three_page_pdf, "report.pdf")
    yield session
    session.close()


class TestDocumentSession:
    def test_garbage_bytes_rejected(self):
        with pytest.raises(LoadError):
            DocumentSession(b"this is not a pdf", "bad.pdf")

    def test_page_navigation_clamped(self, session):
        assert session.page_count == 3
        assert session.go_to_page(7) == 2
        assert session.go_to_page(-1) == 0

    def test_zoom_clamped(self, session):
        assert session.zoom_in() == 1.25
        assert session.set_scale(10) == 3.0
        assert session.set_scale(0.1) == 0.5

    def test_zoom_cancels_drag(self, session):
        session.press(Point(10, 10), ToolType.PIXELATE)
        session.zoom_in()
        assert not session.gesture.is_dragging

    def test_drag_appends_annotation(self, session):
        session.go_to_page(1)
        session.press(Point(10, 10), ToolType.BLACKOUT)
        session.move(Point(60, 60))
        ann = session.release(Point(60, 60))

        assert isinstance(ann, OpaqueFill)
        assert ann.page_index == 1
        assert session.store.annotations == (ann,)

    def test_compose_matches_raster_size(self, session):
        session.set_scale(1.5)
        image = session.compose()
        raster = session.base_raster()
        assert (image.width(), image.height()) == (raster.pixel_width, raster.pixel_height)

    def test_raster_cache_bounded(self, session):
        for scale in (0.5, 1.0, 1.5, 2.0):
            session.set_scale(scale)
            session.base_raster()
        assert len(session._raster_cache) == session.settings.raster_cache_size

    def test_text_placement_and_lookup(self, session):
        label = session.place_text(Point(20, 20), "note")
        assert isinstance(label, TextLabel)
        assert session.text_label_at(Point(25, 25)) is label
        assert session.text_label_at(Point(250, 350)) is None

        session.edit_text(label.id, "changed")
        assert label.text == "changed"

    def test_export_conflict(self, session):
        session._export_lock.acquire()
        try:
            assert session.is_exporting
            with pytest.raises(ExportConflict):
                session.export()
        finally:
            session._export_lock.release()

    def test_export_releases_lock(self, session):
        session.store.append(Pixelate(page_index=0, rect=Rect(10, 10, 50, 50)))
        data = session.export()
        assert data.startswith(b"%PDF")
        assert not session.is_exporting

    def test_suggested_export_name(self, session):
        assert session.suggested_export_name() == "pixelguard_report.pdf"

    def test_saved_work_round_trip(self, session, three_page_pdf, tmp_path):
        persistence = AnnotationPersistence(str(tmp_path / "saved"))
        session.store.append(Pixelate(page_index=2, rect=Rect(1, 2, 30, 40)))
        session.place_text(Point(20, 20), "note")
        assert session.save_annotations(persistence)

        reopened = DocumentSession(three_page_pdf, "copy.pdf")
        try:
            assert reopened.load_annotations(persistence) == 2
            assert [a.to_dict() for a in reopened.store.annotations] == \
                [a.to_dict() for a in session.store.annotations]
        finally:
            reopened.close()


class TestSessionManager:
    def test_open_activates(self, three_page_pdf, one_page_pdf):
        manager = SessionManager()
        first = manager.open_bytes(three_page_pdf, "a.pdf")
        second = manager.open_bytes(one_page_pdf, "b.pdf")
        assert manager.active is second
        assert len(manager) == 2
        assert manager.get(first.id) is first

    def test_switch_cancels_drag(self, three_page_pdf, one_page_pdf):
        manager = SessionManager()
        first = manager.open_bytes(three_page_pdf, "a.pdf")
        second = manager.open_bytes(one_page_pdf, "b.pdf")
        second.press(Point(0, 0), ToolType.PEN)

        manager.set_active(first.id)

        assert not second.gesture.is_dragging

    def test_sessions_are_independent(self, three_page_pdf):
        manager = SessionManager()
        first = manager.open_bytes(three_page_pdf, "a.pdf")
        second = manager.open_bytes(three_page_pdf, "a.pdf")
        first.store.append(Pixelate(page_index=0, rect=Rect(0, 0, 10, 10)))
        assert len(second.store) == 0
        assert first.id != second.id

    def test_close_activates_last_remaining(self, three_page_pdf, one_page_pdf):
        manager = SessionManager()
        first = manager.open_bytes(three_page_pdf, "a.pdf")
        second = manager.open_bytes(one_page_pdf, "b.pdf")
        third = manager.open_bytes(one_page_pdf, "c.pdf")
        manager.set_active(first.id)

        manager.close(first.id)
        assert manager.active is third

        manager.close(third.id)
        manager.close(second.id)
        assert manager.active is None

    def test_close_inactive_keeps_active(self, three_page_pdf, one_page_pdf):
        manager = SessionManager()
        first = manager.open_bytes(three_page_pdf, "a.pdf")
        second = manager.open_bytes(one_page_pdf, "b.pdf")
        manager.close(first.id)
        assert manager.active is second

    def test_rename(self, three_page_pdf):
        manager = SessionManager()
        session = manager.open_bytes(three_page_pdf, "a.pdf")
        manager.rename(session.id, "  contract.pdf ")
        assert session.name == "contract.pdf"
        manager.rename(session.id, "   ")
        assert session.name == "contract.pdf"

    def test_unknown_session(self):
        with pytest.raises(KeyError):
            SessionManager().get("nope")

    def test_open_missing_file(self, tmp_path):
        with pytest.raises(LoadError):
            SessionManager().open_file(str(tmp_path / "missing.pdf"))

    def test_open_file(self, tmp_path, one_page_pdf):
        path = tmp_path / "doc.pdf"
        path.write_bytes(one_page_pdf)
        session = SessionManager(Settings()).open_file(str(path))
        assert session.name == "doc.pdf"
        assert session.page_count == 1
