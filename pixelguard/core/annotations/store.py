"""
Ordered annotation store with linear undo/redo.

Insertion order is z-order and undo order. Undo moves the newest annotation
onto the redo stack; any new edit clears the redo stack.
"""
import logging
from typing import Iterable, List, Optional, Tuple

from ..geometry import Point
from .models import Annotation, TextLabel, find_text_label

logger = logging.getLogger(__name__)


class AnnotationStore:
    """Manages all annotations of one document with undo/redo support."""

    def __init__(self):
        self._annotations: List[Annotation] = []
        self._redo_stack: List[Annotation] = []

    @property
    def annotations(self) -> Tuple[Annotation, ...]:
        """Snapshot of the annotation sequence in insertion order."""
        return tuple(self._annotations)

    @property
    def redo_stack(self) -> Tuple[Annotation, ...]:
        """Snapshot of the redo stack; the last element is popped first."""
        return tuple(self._redo_stack)

    def __len__(self) -> int:
        return len(self._annotations)

    def append(self, annotation: Annotation) -> Tuple[Annotation, ...]:
        """
        Add a new annotation on top of the page.

        Args:
            annotation: Annotation to add

        Returns:
            The updated annotation sequence
        """
        self._annotations.append(annotation)
        self._redo_stack.clear()
        logger.debug("Appended %s %s on page %d",
                     annotation.kind.value, annotation.id, annotation.page_index)
        return self.annotations

    def undo(self) -> Tuple[Annotation, ...]:
        """Move the newest annotation to the redo stack. No-op when empty."""
        if self._annotations:
            self._redo_stack.append(self._annotations.pop())
        return self.annotations

    def redo(self) -> Tuple[Annotation, ...]:
        """Restore the most recently undone annotation. No-op when empty."""
        if self._redo_stack:
            self._annotations.append(self._redo_stack.pop())
        return self.annotations

    def clear_page(self, page_index: int) -> Tuple[Annotation, ...]:
        """
        Remove every annotation on a page.

        The bulk removal is not itself undoable and clears the redo stack.
        """
        before = len(self._annotations)
        self._annotations = [a for a in self._annotations if a.page_index != page_index]
        self._redo_stack.clear()
        logger.debug("Cleared %d annotation(s) from page %d",
                     before - len(self._annotations), page_index)
        return self.annotations

    def edit_text(self, annotation_id: str, new_text: str) -> Tuple[Annotation, ...]:
        """
        Replace the text of a text label in place.

        Raises:
            KeyError: No annotation has this id
            TypeError: The annotation is not a text label
        """
        annotation = self.find(annotation_id)
        if annotation is None:
            raise KeyError(annotation_id)
        if not isinstance(annotation, TextLabel):
            raise TypeError(f"Annotation {annotation_id} is not a text label")

        annotation.text = new_text
        self._redo_stack.clear()
        return self.annotations

    def replace_all(self, annotations: Iterable[Annotation]) -> Tuple[Annotation, ...]:
        """Swap in a whole annotation list (used when loading saved work)."""
        self._annotations = list(annotations)
        self._redo_stack.clear()
        return self.annotations

    def find(self, annotation_id: str) -> Optional[Annotation]:
        for ann in self._annotations:
            if ann.id == annotation_id:
                return ann
        return None

    def for_page(self, page_index: int) -> List[Annotation]:
        """All annotations on a page, in insertion order."""
        return [ann for ann in self._annotations if ann.page_index == page_index]

    def topmost_text_at(self, page_index: int, point: Point) -> Optional[TextLabel]:
        """The newest text label on the page whose box contains a document point."""
        return find_text_label(self.for_page(page_index), point)

    def can_undo(self) -> bool:
        return bool(self._annotations)

    def can_redo(self) -> bool:
        return bool(self._redo_stack)
