"""
Burns annotations into a new copy of a PDF.

Destructive annotations are rasterized, obscured and re-embedded as images
after the original content under them has been removed. Vector annotations
are drawn with PDF vector operators. The source document is never modified.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

import fitz  # PyMuPDF
import numpy as np

from ...config import Settings
from ..annotations.models import Annotation
from ..document.codec import DocumentCodec
from ..document.renderer import PageRenderer
from ..effects.painter import paint_vectors_into
from ..effects.raster import apply_raster_effect
from ..geometry import DeviceRect, Rect, pixel_bounds

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class Patch:
    """An obscured region ready to be embedded."""

    redact: Rect  # area whose original content is removed
    placement: Rect  # where the image goes, covering clipped glyphs too
    image: bytes  # PNG


def group_by_page(annotations: Sequence[Annotation]) -> "OrderedDict[int, List[Annotation]]":
    """Group annotations by page, keeping insertion order within each page."""
    annotations_by_page: "OrderedDict[int, List[Annotation]]" = OrderedDict()
    for ann in annotations:
        annotations_by_page.setdefault(ann.page_index, []).append(ann)
    return annotations_by_page


class BurnInExporter:
    """Handles exporting annotations into a new PDF."""

    def __init__(self, settings: Optional[Settings] = None,
                 codec: Optional[DocumentCodec] = None,
                 renderer: Optional[PageRenderer] = None):
        self.settings = settings or Settings()
        self.codec = codec or DocumentCodec()
        self.renderer = renderer or PageRenderer()

    def export(self, original: bytes, annotations: Sequence[Annotation],
               progress: Optional[ProgressCallback] = None) -> bytes:
        """
        Produce new PDF bytes with every annotation burned in.

        Args:
            original: Bytes of the source PDF
            annotations: All annotations of the document, in insertion order
            progress: Called with (pages done, pages to do)

        Returns:
            Bytes of the output PDF

        Raises:
            LoadError: The original bytes cannot be opened
            RenderError: A page could not be rasterized
            EncodeError: An obscured region could not be encoded or written
        """
        source = self.codec.decode(original)
        try:
            output = self.codec.new_output_from_original(original)
            try:
                annotations_by_page = group_by_page(annotations)
                total = len(annotations_by_page)

                for done, (page_index, page_annotations) in enumerate(annotations_by_page.items()):
                    if progress:
                        progress(done, total)

                    if not 0 <= page_index < source.page_count:
                        logger.warning("Skipping %d annotation(s) on missing page %d",
                                       len(page_annotations), page_index)
                        continue

                    self._burn_page(source, output, page_index, page_annotations)

                if progress:
                    progress(total, total)

                result = self.codec.serialize(output)
            finally:
                output.close()
        finally:
            source.close()

        logger.info("Exported %d annotation(s) into %d byte(s)", len(annotations), len(result))
        return result

    def _burn_page(self, source: fitz.Document, output: fitz.Document, page_index: int,
                   annotations: List[Annotation]) -> None:
        patches = self._render_patches(source, page_index, annotations)

        # Remove what is under the patches before anything is drawn on top
        self.codec.redact_regions(output, page_index, [p.redact for p in patches.values()])

        for ann in annotations:
            if ann.destructive:
                patch = patches.get(ann.id)
                if patch is not None:
                    self.codec.draw_image(output, page_index, patch.placement, patch.image)
            else:
                self.codec.draw_vector_shape(output, page_index, ann)

    def _render_patches(self, source: fitz.Document, page_index: int,
                        annotations: List[Annotation]) -> Dict[str, Patch]:
        """
        Rasterize the page once and encode one obscured patch per destructive
        annotation.

        The raster is composited the way the on-screen overlay is: vector
        annotations drawn before an effect are flattened into the pixels
        first, and each effect is written back, so an annotation that
        overlaps an earlier one obscures the already obscured pixels.

        Each patch also covers the glyphs its rectangle clips, with their
        unobscured pixels, since redaction deletes those glyphs entirely.
        """
        if not any(a.destructive for a in annotations):
            return {}

        page = source[page_index]
        scale = self.settings.export_scale
        raster = self.renderer.rasterize(page, scale)
        viewport = raster.viewport()
        pixels = np.array(raster.pixels, dtype=np.uint8, copy=True)
        pending: List[Annotation] = []
        patches: Dict[str, Patch] = {}

        for ann in annotations:
            if not ann.destructive:
                pending.append(ann)
                continue

            rect = ann.rect.clamped(raster.doc_width, raster.doc_height)
            if rect.is_empty:
                logger.warning("Annotation %s lies outside page %d", ann.id, page_index)
                continue

            x0, y0, x1, y1 = pixel_bounds(viewport.rect_to_device(rect),
                                          raster.pixel_width, raster.pixel_height)
            if x1 <= x0 or y1 <= y0:
                continue

            if pending:
                pixels = paint_vectors_into(pixels, pending, viewport)
                pending = []
            pixels[y0:y1, x0:x1] = apply_raster_effect(
                pixels[y0:y1, x0:x1], ann, scale, self.settings
            )

            covered = self.codec.glyph_bounds(page, rect)
            gx0, gy0, gx1, gy1 = pixel_bounds(viewport.rect_to_device(covered),
                                              raster.pixel_width, raster.pixel_height)
            placement = viewport.rect_to_document(DeviceRect(gx0, gy0, gx1 - gx0, gy1 - gy0))
            image = self.codec.encode_png(pixels[gy0:gy1, gx0:gx1])
            patches[ann.id] = Patch(rect, placement, image)

        return patches
