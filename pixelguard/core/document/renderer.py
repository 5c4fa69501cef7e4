"""
Page rasterization with PyMuPDF.
"""
import logging
from dataclasses import dataclass

import fitz  # PyMuPDF
import numpy as np

from ..errors import RenderError
from ..geometry import Viewport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RasterPage:
    """A rendered page: RGB pixels plus the page size they came from."""

    pixels: np.ndarray  # H x W x 3 uint8, read-only
    pixel_width: int
    pixel_height: int
    doc_width: float
    doc_height: float
    scale: float

    def viewport(self) -> Viewport:
        return Viewport(self.doc_width, self.doc_height, self.scale)


class PageRenderer:
    """Renders PDF pages to RGB arrays."""

    def rasterize(self, page: fitz.Page, scale: float) -> RasterPage:
        """
        Render a page at a zoom factor.

        Args:
            page: PyMuPDF page
            scale: Pixels per PDF point

        Returns:
            RasterPage with a read-only pixel array

        Raises:
            RenderError: PyMuPDF could not render the page
        """
        if scale <= 0:
            raise RenderError(f"Render scale must be positive, got {scale}")

        try:
            mat = fitz.Matrix(scale, scale)
            pix = page.get_pixmap(matrix=mat, colorspace=fitz.csRGB, alpha=False)
            rect = page.rect
        except Exception as e:
            raise RenderError(f"Error rendering page {page.number + 1}: {e}") from e

        data = np.frombuffer(pix.samples, dtype=np.uint8)
        pixels = data.reshape(pix.height, pix.stride)[:, : pix.width * pix.n]
        pixels = pixels.reshape(pix.height, pix.width, pix.n).copy()
        pixels.setflags(write=False)

        logger.debug("Rendered page %d at %.2fx -> %dx%d",
                     page.number, scale, pix.width, pix.height)
        return RasterPage(
            pixels=pixels,
            pixel_width=pix.width,
            pixel_height=pix.height,
            doc_width=rect.width,
            doc_height=rect.height,
            scale=scale,
        )
