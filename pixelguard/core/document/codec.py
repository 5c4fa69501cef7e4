"""
PDF decoding, editing and serialization with PyMuPDF.

Rectangles passed in are document-space (bottom-left origin) over the visible
page box; PyMuPDF works top-left, so everything goes through the same
corner-based transform used for the screen, at scale 1. Content is inserted
in unrotated page coordinates, so visible positions are mapped through the
page's derotation matrix before anything is drawn or redacted.
"""
import logging
from typing import Iterable

import fitz  # PyMuPDF
import numpy as np

from ..annotations.models import Annotation, FreehandStroke, StrokeRect, TextLabel
from ..errors import EncodeError, LoadError, RenderError
from ..geometry import DeviceRect, Point, Rect, Viewport

logger = logging.getLogger(__name__)

TEXT_FONT = "helv"
CJK_TEXT_FONT = "china-ts"  # built-in CJK font, also covers Latin


def _pdf_color(color):
    return [c / 255.0 for c in color]  # PyMuPDF uses 0-1 range


def text_font_for(text: str) -> str:
    """Pick a built-in font able to show every character of the text."""
    try:
        text.encode("latin-1")
    except UnicodeEncodeError:
        return CJK_TEXT_FONT
    return TEXT_FONT


class DocumentCodec:
    """Opens, edits and writes PDF documents."""

    def decode(self, data: bytes) -> fitz.Document:
        """
        Open PDF bytes as a page source.

        Raises:
            LoadError: The bytes are empty, not a PDF, encrypted or have no pages
        """
        if not data:
            raise LoadError("Document is empty")

        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise LoadError(f"Error loading PDF: {e}") from e

        if doc.needs_pass:
            doc.close()
            raise LoadError("Document is encrypted")
        if doc.page_count == 0:
            doc.close()
            raise LoadError("Document has no pages")
        return doc

    def new_output_from_original(self, data: bytes) -> fitz.Document:
        """Independent editable copy of the original document."""
        return self.decode(data)

    @staticmethod
    def page_viewport(page: fitz.Page) -> Viewport:
        """Document-to-PyMuPDF mapping for the visible page box (scale 1)."""
        return Viewport(page.rect.width, page.rect.height, 1.0)

    def visible_rect(self, page: fitz.Page, rect: Rect) -> fitz.Rect:
        """Top-left rectangle as seen on the (possibly rotated) page."""
        r = self.page_viewport(page).rect_to_device(rect)
        return fitz.Rect(r.x, r.y, r.right, r.bottom)

    def to_fitz_rect(self, page: fitz.Page, rect: Rect) -> fitz.Rect:
        """Rectangle in unrotated page coordinates, ready for insertion."""
        return (self.visible_rect(page, rect) * page.derotation_matrix).normalize()

    def to_fitz_point(self, page: fitz.Page, point: Point) -> fitz.Point:
        p = self.page_viewport(page).to_device(point)
        return fitz.Point(p.x, p.y) * page.derotation_matrix

    def glyph_bounds(self, page: fitz.Page, rect: Rect) -> Rect:
        """
        Grow a rectangle to cover every glyph it touches.

        Redaction removes a whole glyph as soon as its box touches the
        redacted area, so the parts sticking out of the rectangle must be
        re-embedded together with it.

        Returns:
            Document-space union of the rectangle and the touched glyph boxes,
            clamped to the page

        Raises:
            RenderError: The page text could not be read
        """
        area = self.visible_rect(page, rect)
        try:
            text_dict = page.get_text("rawdict")
        except Exception as e:
            raise RenderError(f"Error reading text of page {page.number + 1}: {e}") from e

        grown = fitz.Rect(area)
        for block in text_dict.get("blocks", []):
            if block.get("type") != 0:
                continue
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    for char in span.get("chars", []):
                        bbox = fitz.Rect(char["bbox"])
                        if not bbox.is_empty and bbox.intersects(area):
                            grown |= bbox

        viewport = self.page_viewport(page)
        result = viewport.rect_to_document(DeviceRect(grown.x0, grown.y0, grown.width, grown.height))
        return result.clamped(viewport.page_width, viewport.page_height)

    def redact_regions(self, doc: fitz.Document, page_index: int, rects: Iterable[Rect]) -> None:
        """
        Remove the original content under each rectangle.

        Text touching a rectangle is deleted, image pixels inside it are
        blanked and vector graphics fully covered by it are dropped.

        Raises:
            EncodeError: PyMuPDF could not apply the redactions
        """
        page = doc[page_index]
        try:
            count = 0
            for rect in rects:
                page.add_redact_annot(self.to_fitz_rect(page, rect), fill=False)
                count += 1

            if count:
                # images=2: blank overlapping pixels, graphics=1: remove covered line art
                page.apply_redactions(images=2, graphics=1)
                logger.debug("Removed content under %d region(s) on page %d", count, page_index)
        except Exception as e:
            raise EncodeError(f"Error redacting page {page_index + 1}: {e}") from e

    def draw_image(self, doc: fitz.Document, page_index: int, rect: Rect, image: bytes) -> None:
        """
        Place an encoded image over a document-space rectangle.

        Raises:
            EncodeError: PyMuPDF could not embed the image
        """
        page = doc[page_index]
        try:
            page.insert_image(self.to_fitz_rect(page, rect), stream=image,
                              keep_proportion=False, overlay=True, rotate=page.rotation)
        except Exception as e:
            raise EncodeError(f"Error embedding image on page {page_index + 1}: {e}") from e

    def draw_vector_shape(self, doc: fitz.Document, page_index: int, annotation: Annotation) -> None:
        """
        Draw a non-destructive annotation with PDF vector operators.

        Raises:
            TypeError: The annotation is not a vector kind
            EncodeError: PyMuPDF could not write the drawing
        """
        if not isinstance(annotation, (StrokeRect, FreehandStroke, TextLabel)):
            raise TypeError(f"{type(annotation).__name__} is not a vector annotation")

        page = doc[page_index]
        try:
            if isinstance(annotation, StrokeRect):
                shape = page.new_shape()
                shape.draw_rect(self.to_fitz_rect(page, annotation.rect))
                shape.finish(color=_pdf_color(annotation.color), width=annotation.width)
                shape.commit()

            elif isinstance(annotation, FreehandStroke):
                points = [self.to_fitz_point(page, p) for p in annotation.points]
                shape = page.new_shape()
                shape.draw_polyline(points)
                shape.finish(color=_pdf_color(annotation.color), width=annotation.width,
                             lineCap=1, lineJoin=1, closePath=False)
                shape.commit()

            else:
                self._insert_text(page, annotation)
        except Exception as e:
            raise EncodeError(
                f"Error drawing {type(annotation).__name__} on page {page_index + 1}: {e}"
            ) from e

    def _insert_text(self, page: fitz.Page, annotation: TextLabel):
        box = self.visible_rect(page, annotation.rect)
        # Baseline one font size below the visible top edge
        origin = fitz.Point(box.x0, box.y0 + annotation.font_size) * page.derotation_matrix
        page.insert_text(origin, annotation.text, fontsize=annotation.font_size,
                         fontname=text_font_for(annotation.text),
                         color=_pdf_color(annotation.color), rotate=page.rotation)

    def serialize(self, doc: fitz.Document) -> bytes:
        """
        Raises:
            EncodeError: PyMuPDF could not write the document
        """
        try:
            return doc.tobytes(garbage=4, deflate=True)
        except Exception as e:
            raise EncodeError(f"Error writing PDF: {e}") from e

    def encode_png(self, region: np.ndarray) -> bytes:
        """
        Encode an H x W x 3 uint8 region as PNG.

        Raises:
            EncodeError: The region is empty or PyMuPDF rejected it
        """
        if region.ndim != 3 or region.shape[0] == 0 or region.shape[1] == 0:
            raise EncodeError(f"Cannot encode region of shape {region.shape}")

        height, width = region.shape[:2]
        try:
            samples = np.ascontiguousarray(region[:, :, :3], dtype=np.uint8).tobytes()
            pix = fitz.Pixmap(fitz.csRGB, width, height, samples, False)
            return pix.tobytes("png")
        except Exception as e:
            raise EncodeError(f"Failed to encode {width}x{height} region: {e}") from e
