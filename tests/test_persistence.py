import json
import os

from pixelguard.core.annotations import (
    Annotation,
    AnnotationPersistence,
    Blur,
    FreehandStroke,
    OpaqueFill,
    StrokeRect,
    TextLabel,
)
from pixelguard.core.geometry import Point, Rect


def sample_annotations():
    return [
        Blur(page_index=0, rect=Rect(1, 2, 3, 4)),
        OpaqueFill(page_index=1, rect=Rect(5, 6, 7, 8), color=(255, 255, 255)),
        StrokeRect(page_index=1, rect=Rect(0, 0, 10, 10), width=3.5),
        FreehandStroke(page_index=2, points=(Point(0, 0), Point(5, 5))),
        TextLabel(page_index=2, rect=Rect(10, 10, 100, 20), text="hello"),
    ]


def test_save_and_load(tmp_path):
    persistence = AnnotationPersistence(str(tmp_path))
    annotations = sample_annotations()

    assert persistence.save(annotations, "abc", "doc.pdf")
    loaded, success = persistence.load("abc")

    assert success
    assert loaded == annotations


def test_file_layout(tmp_path):
    persistence = AnnotationPersistence(str(tmp_path))
    persistence.save(sample_annotations()[:1], "abc", "doc.pdf")

    with open(persistence.get_json_path("abc"), encoding="utf-8") as f:
        data = json.load(f)
    assert data["document"] == "doc.pdf"
    assert data["annotations"][0]["type"] == "blur"
    assert data["annotations"][0]["rect"] == [1, 2, 3, 4]


def test_missing_file(tmp_path):
    assert AnnotationPersistence(str(tmp_path)).load("nothing") == ([], False)


def test_corrupt_file(tmp_path):
    persistence = AnnotationPersistence(str(tmp_path))
    with open(persistence.get_json_path("bad"), "w", encoding="utf-8") as f:
        f.write("{not json")
    assert persistence.load("bad") == ([], False)


def test_delete(tmp_path):
    persistence = AnnotationPersistence(str(tmp_path))
    persistence.save(sample_annotations(), "abc")
    assert os.path.exists(persistence.get_json_path("abc"))
    assert persistence.delete("abc")
    assert not os.path.exists(persistence.get_json_path("abc"))
    assert persistence.delete("abc")


def test_document_key_depends_on_content():
    assert AnnotationPersistence.document_key(b"a") != AnnotationPersistence.document_key(b"b")


def test_from_dict_dispatches_on_type():
    ann = Annotation.from_dict({"type": "text", "page_index": 4, "rect": [0, 0, 10, 10], "text": "x"})
    assert isinstance(ann, TextLabel)
    assert ann.page_index == 4
    assert ann.id
