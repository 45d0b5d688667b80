"""Shared test fixtures."""

from __future__ import annotations

import fitz
import pytest
from PyQt5.QtCore import QCoreApplication

from polymark.core.annotations import AnnotationStore, StrokeStyle, make_line, make_polygon
from polymark.core.geometry import CanonicalPoint

# Page sizes in PDF points: portrait, then landscape
PAGE_SIZES = [(200, 300), (400, 200)]

RED = (220, 38, 38)


@pytest.fixture(scope="session")
def qapp():
    """One QCoreApplication for signal and thread objects; no display needed."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


def build_pdf(sizes=PAGE_SIZES) -> bytes:
    doc = fitz.open()
    for i, (width, height) in enumerate(sizes):
        page = doc.new_page(width=width, height=height)
        page.insert_text((20, 40), f"Page {i + 1}")
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def make_pdf():
    """Build PDF bytes from a list of (width, height) page sizes."""
    return build_pdf


@pytest.fixture
def pdf_bytes() -> bytes:
    return build_pdf()


@pytest.fixture
def pdf_path(tmp_path, pdf_bytes):
    path = tmp_path / "source.pdf"
    path.write_bytes(pdf_bytes)
    return path


@pytest.fixture
def style() -> StrokeStyle:
    return StrokeStyle(color=RED, width=2.0)


@pytest.fixture
def line(style):
    return make_line("1-0", 1, CanonicalPoint(10, 10), CanonicalPoint(50, 10), style)


@pytest.fixture
def square(style):
    vertices = [
        CanonicalPoint(60, 60),
        CanonicalPoint(100, 60),
        CanonicalPoint(100, 100),
        CanonicalPoint(60, 100),
    ]
    return make_polygon("1-1", 1, vertices, style)


@pytest.fixture
def store(line, square, style) -> AnnotationStore:
    """A store with a line and a square on page 1 and a triangle on page 2."""
    store = AnnotationStore()
    store.add(line)
    store.add(square)
    store.add(
        make_polygon(
            "2-0",
            2,
            [CanonicalPoint(10, 10), CanonicalPoint(50, 10), CanonicalPoint(30, 40)],
            style,
        )
    )
    return store
