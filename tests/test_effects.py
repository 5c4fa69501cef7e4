import numpy as np
import pytest

from pixelguard.config import Settings
from pixelguard.core.annotations import Blur, OpaqueFill, Pixelate, StrokeRect
from pixelguard.core.effects import apply_raster_effect, blur, fill, pixelate
from pixelguard.core.geometry import Rect


def noise(height, width, seed=0):
    return np.random.default_rng(seed).integers(0, 256, size=(height, width, 3), dtype=np.uint8)


def distinct_colors(region):
    return len(np.unique(region.reshape(-1, 3), axis=0))


class TestPixelate:
    def test_blocks_bound_distinct_colors(self):
        region = noise(40, 40)
        out = pixelate(region, 10)
        assert out.shape == region.shape
        assert out.dtype == np.uint8
        assert distinct_colors(out) <= 16

    def test_partial_edge_blocks(self):
        region = noise(25, 33)
        out = pixelate(region, 10)
        assert out.shape == region.shape
        assert distinct_colors(out) <= 3 * 4

    def test_block_is_flat(self):
        out = pixelate(noise(20, 20), 10)
        assert (out[:10, :10] == out[0, 0]).all()

    def test_input_untouched(self):
        region = noise(30, 30)
        before = region.copy()
        pixelate(region, 8)
        assert np.array_equal(region, before)

    def test_uniform_region_unchanged(self):
        region = np.full((16, 16, 3), 77, dtype=np.uint8)
        assert np.array_equal(pixelate(region, 5), region)


class TestBlur:
    def test_shape_and_uniform(self):
        region = np.full((30, 50, 3), 200, dtype=np.uint8)
        out = blur(region, 0.1)
        assert out.shape == region.shape
        assert np.array_equal(out, region)

    def test_smooths_high_frequency(self):
        region = np.zeros((40, 40, 3), dtype=np.uint8)
        region[::2, ::2] = 255
        out = blur(region, 0.1)
        assert out.astype(float).std() < region.astype(float).std() / 4

    def test_input_untouched(self):
        region = noise(20, 20)
        before = region.copy()
        blur(region, 0.1, mix=0.5, block_size=4)
        assert np.array_equal(region, before)


class TestFill:
    def test_solid(self):
        out = fill(noise(10, 12), (255, 255, 255))
        assert (out == 255).all()


class TestDispatch:
    rect = Rect(0, 0, 10, 10)

    def test_block_size_scales_with_resolution(self):
        region = noise(48, 48)
        ann = Pixelate(page_index=0, rect=self.rect)
        out = apply_raster_effect(region, ann, 2.0, Settings(block_size=12))
        # 24 pixel blocks on a 48 pixel region
        assert distinct_colors(out) <= 4

    def test_opaque_fill_uses_color(self):
        ann = OpaqueFill(page_index=0, rect=self.rect, color=(1, 2, 3))
        out = apply_raster_effect(noise(5, 5), ann, 1.0)
        assert (out == np.array([1, 2, 3], dtype=np.uint8)).all()

    def test_blur_dispatch(self):
        region = np.full((10, 10, 3), 9, dtype=np.uint8)
        out = apply_raster_effect(region, Blur(page_index=0, rect=self.rect), 1.0)
        assert np.array_equal(out, region)

    def test_vector_annotation_rejected(self):
        with pytest.raises(TypeError):
            apply_raster_effect(noise(5, 5), StrokeRect(page_index=0, rect=self.rect), 1.0)
