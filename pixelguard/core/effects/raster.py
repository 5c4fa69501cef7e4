"""
Destructive pixel effects.

Every function takes an H x W x C uint8 array and returns a new array of the
same shape; the input is never modified. Callers crop the target region first,
so nothing outside it can be read or written.
"""
import math
from typing import Optional, Tuple

import numpy as np

from ...config import Settings
from ..annotations.models import Annotation, Blur, OpaqueFill, Pixelate


def _cell_means(region: np.ndarray, cell_h: int, cell_w: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Box-filter a region into a grid of cells.

    Edge cells may be smaller than cell_h x cell_w; each is averaged over the
    pixels it actually covers.

    Returns:
        (means, row_sizes, col_sizes) where means is float64 with one entry
        per cell
    """
    h, w = region.shape[:2]
    ys = np.arange(0, h, cell_h)
    xs = np.arange(0, w, cell_w)

    sums = np.add.reduceat(region.astype(np.float64), ys, axis=0)
    sums = np.add.reduceat(sums, xs, axis=1)

    row_sizes = np.diff(np.append(ys, h))
    col_sizes = np.diff(np.append(xs, w))
    counts = row_sizes[:, None, None] * col_sizes[None, :, None]
    return sums / counts, row_sizes, col_sizes


def _bilinear(small: np.ndarray, height: int, width: int) -> np.ndarray:
    """Upsample with bilinear interpolation, sampling at pixel centres."""
    sh, sw = small.shape[:2]

    fy = np.clip((np.arange(height) + 0.5) * sh / height - 0.5, 0, sh - 1)
    fx = np.clip((np.arange(width) + 0.5) * sw / width - 0.5, 0, sw - 1)

    y0 = np.floor(fy).astype(np.intp)
    x0 = np.floor(fx).astype(np.intp)
    y1 = np.minimum(y0 + 1, sh - 1)
    x1 = np.minimum(x0 + 1, sw - 1)
    wy = (fy - y0)[:, None, None]
    wx = (fx - x0)[None, :, None]

    top = small[y0][:, x0] * (1 - wx) + small[y0][:, x1] * wx
    bottom = small[y1][:, x0] * (1 - wx) + small[y1][:, x1] * wx
    return top * (1 - wy) + bottom * wy


def _to_uint8(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def pixelate(region: np.ndarray, block_size: float) -> np.ndarray:
    """
    Mosaic a region into flat square blocks.

    The region is averaged into ceil(W/b) x ceil(H/b) cells, then each cell is
    repeated back to full size without smoothing.

    Args:
        region: H x W x C uint8 pixels
        block_size: Block edge in pixels

    Returns:
        New array of the same shape
    """
    h, w = region.shape[:2]
    if h == 0 or w == 0:
        return region.copy()

    block = max(1, int(round(block_size)))
    means, row_sizes, col_sizes = _cell_means(region, block, block)
    cells = _to_uint8(means)
    return np.repeat(np.repeat(cells, row_sizes, axis=0), col_sizes, axis=1)


def blur(region: np.ndarray, factor: float = 0.1, mix: float = 0.0,
         block_size: Optional[float] = None) -> np.ndarray:
    """
    Heavy blur: shrink to about `factor` of the linear size, then scale back
    up with bilinear smoothing.

    Args:
        region: H x W x C uint8 pixels
        factor: Linear downsample factor (0.1 keeps a tenth of each side)
        mix: Share of a pixelated pass blended into the result (0..1)
        block_size: Block edge for the pixelated pass

    Returns:
        New array of the same shape
    """
    h, w = region.shape[:2]
    if h == 0 or w == 0:
        return region.copy()

    small_w = max(1, int(round(w * factor)))
    small_h = max(1, int(round(h * factor)))
    means, _, _ = _cell_means(region, math.ceil(h / small_h), math.ceil(w / small_w))
    smooth = _bilinear(means, h, w)

    if mix > 0:
        blocky = pixelate(region, block_size or max(h, w) * factor).astype(np.float64)
        smooth = smooth * (1 - mix) + blocky * mix

    return _to_uint8(smooth)


def fill(region: np.ndarray, color) -> np.ndarray:
    """Solid colour over the whole region."""
    out = np.empty_like(region)
    out[...] = np.asarray(color, dtype=np.uint8)[: region.shape[2]]
    return out


def apply_raster_effect(region: np.ndarray, annotation: Annotation, resolution: float,
                        settings: Optional[Settings] = None) -> np.ndarray:
    """
    Apply a destructive annotation's effect to a cropped region.

    Args:
        region: The annotation's pixels, already cropped
        annotation: A Pixelate, Blur or OpaqueFill annotation
        resolution: Device pixels per document unit of the raster
        settings: Effect parameters; defaults when omitted

    Returns:
        New region of the same shape

    Raises:
        TypeError: The annotation has no pixel effect
    """
    settings = settings or Settings()
    block = settings.block_size * resolution

    if isinstance(annotation, Pixelate):
        return pixelate(region, block)
    if isinstance(annotation, Blur):
        return blur(region, settings.blur_factor, settings.blur_mix, block)
    if isinstance(annotation, OpaqueFill):
        return fill(region, annotation.color)
    raise TypeError(f"{type(annotation).__name__} has no raster effect")
