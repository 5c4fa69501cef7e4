"""
Handles persistence of annotations to/from JSON files.
"""
import hashlib
import json
import logging
import os
from typing import List, Optional, Sequence, Tuple

from ...utils.resource_loader import get_app_data_dir
from .models import Annotation

logger = logging.getLogger(__name__)


class AnnotationPersistence:
    """Saves and loads a document's annotations, keyed by the document bytes."""

    def __init__(self, directory: Optional[str] = None):
        self._directory = directory

    @staticmethod
    def document_key(document_bytes: bytes) -> str:
        """Stable key for a document: the MD5 of its contents."""
        return hashlib.md5(document_bytes).hexdigest()

    def get_directory(self) -> str:
        """
        Get or create the directory holding annotation files.

        Returns:
            Path to the annotations directory
        """
        if self._directory is None:
            self._directory = str(get_app_data_dir() / "annotations")
        os.makedirs(self._directory, exist_ok=True)
        return self._directory

    def get_json_path(self, key: str) -> str:
        return os.path.join(self.get_directory(), f"{key}.json")

    def save(self, annotations: Sequence[Annotation], key: str, name: str = "") -> bool:
        """
        Save annotations to a JSON file.

        Args:
            annotations: Annotations in insertion order
            key: Document key from document_key()
            name: Display name of the document, stored for reference

        Returns:
            True if save was successful, False otherwise
        """
        file_path = self.get_json_path(key)
        data = {
            'document': name,
            'annotations': [ann.to_dict() for ann in annotations],
        }

        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            return True
        except OSError as e:
            logger.error("Failed to save annotations to %s: %s", file_path, e)
            return False

    def load(self, key: str) -> Tuple[List[Annotation], bool]:
        """
        Load annotations from a JSON file.

        Args:
            key: Document key from document_key()

        Returns:
            Tuple of (list of annotations, success flag)
        """
        file_path = self.get_json_path(key)
        if not os.path.exists(file_path):
            return [], False

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            annotations = [Annotation.from_dict(item)
                           for item in data.get('annotations', [])]
            return annotations, True
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error("Failed to load annotations from %s: %s", file_path, e)
            return [], False

    def delete(self, key: str) -> bool:
        """Delete the saved annotations. True if removed or never existed."""
        file_path = self.get_json_path(key)
        if not os.path.exists(file_path):
            return True

        try:
            os.remove(file_path)
            return True
        except OSError as e:
            logger.error("Failed to delete %s: %s", file_path, e)
            return False
