import pytest

from pixelguard.core.errors import TransformError
from pixelguard.core.geometry import (
    DeviceRect,
    Point,
    Rect,
    Viewport,
    drag_to_device_rect,
    is_degenerate,
    pixel_bounds,
)


class TestViewport:
    def test_point_round_trip(self):
        vp = Viewport(612, 792, 1.75)
        for x, y in [(0, 0), (612, 792), (123.4, 567.8), (0.001, 791.999)]:
            back = vp.to_document(vp.to_device(Point(x, y)))
            assert back.x == pytest.approx(x, abs=1e-6)
            assert back.y == pytest.approx(y, abs=1e-6)

    def test_origin_flips_to_bottom(self):
        vp = Viewport(100, 200, 2.0)
        assert vp.to_device(Point(0, 0)) == Point(0, 400)
        assert vp.to_device(Point(100, 200)) == Point(200, 0)

    def test_rect_to_device_uses_top_corner(self):
        vp = Viewport(100, 200, 1.0)
        assert vp.rect_to_device(Rect(10, 20, 30, 40)) == DeviceRect(10, 140, 30, 40)

    def test_rect_scales(self):
        vp = Viewport(100, 200, 2.0)
        assert vp.rect_to_device(Rect(10, 20, 30, 40)) == DeviceRect(20, 280, 60, 80)

    def test_rect_round_trip(self):
        vp = Viewport(595, 842, 1.3)
        rect = Rect(12.5, 40.25, 100.0, 33.3)
        back = vp.rect_to_document(vp.rect_to_device(rect))
        assert back.x == pytest.approx(rect.x, abs=1e-6)
        assert back.y == pytest.approx(rect.y, abs=1e-6)
        assert back.width == pytest.approx(rect.width, abs=1e-6)
        assert back.height == pytest.approx(rect.height, abs=1e-6)

    @pytest.mark.parametrize("scale", [0, -1.0])
    def test_non_positive_scale_rejected(self, scale):
        with pytest.raises(TransformError):
            Viewport(100, 100, scale)

    def test_empty_page_rejected(self):
        with pytest.raises(TransformError):
            Viewport(0, 100, 1.0)


class TestRect:
    def test_clamped_inside_page(self):
        assert Rect(-10, -10, 50, 50).clamped(100, 100) == Rect(0, 0, 40, 40)

    def test_clamped_outside_page_is_empty(self):
        assert Rect(200, 200, 10, 10).clamped(100, 100).is_empty

    def test_contains(self):
        rect = Rect(10, 10, 20, 20)
        assert rect.contains(Point(15, 25))
        assert not rect.contains(Point(5, 25))


class TestDrag:
    def test_drag_normalized_in_any_direction(self):
        assert drag_to_device_rect(Point(50, 60), Point(10, 20)) == DeviceRect(10, 20, 40, 40)

    def test_degenerate_threshold(self):
        assert is_degenerate(DeviceRect(0, 0, 3, 3))
        assert is_degenerate(DeviceRect(0, 0, 5, 40))
        assert is_degenerate(DeviceRect(0, 0, 40, 5))
        assert not is_degenerate(DeviceRect(0, 0, 10, 10))


class TestPixelBounds:
    def test_snaps_outward(self):
        assert pixel_bounds(DeviceRect(1.2, 2.7, 3.0, 3.0), 100, 100) == (1, 2, 5, 6)

    def test_float_noise_does_not_grow_box(self):
        assert pixel_bounds(DeviceRect(10.0000000001, 10, 9.9999999998, 10), 100, 100) == (10, 10, 20, 20)

    def test_clamped_to_raster(self):
        assert pixel_bounds(DeviceRect(-5, 90, 20, 20), 100, 100) == (0, 90, 15, 100)

    def test_outside_raster_is_empty(self):
        x0, y0, x1, y1 = pixel_bounds(DeviceRect(150, 150, 10, 10), 100, 100)
        assert x1 <= x0 and y1 <= y0
