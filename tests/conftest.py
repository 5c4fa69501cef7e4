import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import fitz  # PyMuPDF
import pytest
from PyQt5.QtWidgets import QApplication

PAGE_WIDTH = 300
PAGE_HEIGHT = 400


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep settings, logs and saved annotations out of the real profile."""
    monkeypatch.setenv("PIXELGUARD_HOME", str(tmp_path / "home"))


def make_pdf(pages):
    """
    Build a PDF in memory.

    Args:
        pages: One list per page of (x, y, text) with PyMuPDF top-left coordinates
    """
    doc = fitz.open()
    for lines in pages:
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        for x, y, text in lines:
            page.insert_text((x, y), text, fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def three_page_pdf():
    return make_pdf([
        [(50, 100, "First page heading")],
        [(50, 100, "SECRET account 12345"), (50, 300, "PUBLIC footer line")],
        [(50, 100, "Third page closing")],
    ])


@pytest.fixture
def one_page_pdf():
    return make_pdf([[(50, 100, "Only page")]])


@pytest.fixture
def pdf_builder():
    return make_pdf
