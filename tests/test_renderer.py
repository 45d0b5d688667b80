"""Tests for PDFDocumentRenderer."""

import pytest

from polymark.config import RendererConfig
from polymark.core.document import PageDimensions, PDFDocumentRenderer
from polymark.core.errors import DocumentError, InvalidZoom


@pytest.fixture
def renderer(pdf_bytes):
    renderer = PDFDocumentRenderer(RendererConfig())
    renderer.load_bytes(pdf_bytes)
    yield renderer
    renderer.close()


def test_load_from_path(pdf_path):
    renderer = PDFDocumentRenderer()
    assert renderer.load(str(pdf_path)) == 2
    assert renderer.is_loaded()
    assert renderer.current_file_path == str(pdf_path)
    renderer.close()
    assert not renderer.is_loaded()
    assert renderer.page_count == 0


def test_load_missing_file(tmp_path):
    with pytest.raises(DocumentError):
        PDFDocumentRenderer().load(str(tmp_path / "missing.pdf"))


def test_load_garbage_bytes():
    with pytest.raises(DocumentError):
        PDFDocumentRenderer().load_bytes(b"not a pdf")


def test_page_dimensions_follow_zoom(renderer):
    assert renderer.get_page_dimensions(1, 1.0) == PageDimensions(200, 300)
    assert renderer.get_page_dimensions(2, 1.5) == PageDimensions(600, 300)


def test_render_page_size(renderer):
    pix = renderer.render_page(1, 2.0)
    assert (pix.width, pix.height) == (400, 600)
    assert pix.alpha == 0


def test_render_rotated(renderer):
    pix = renderer.render_page(1, 1.0, rotation=90)
    assert (pix.width, pix.height) == (300, 200)
    with pytest.raises(ValueError):
        renderer.render_page(1, 1.0, rotation=45)


def test_render_rejects_bad_page_and_zoom(renderer):
    with pytest.raises(DocumentError):
        renderer.render_page(0, 1.0)
    with pytest.raises(DocumentError):
        renderer.render_page(3, 1.0)
    with pytest.raises(InvalidZoom):
        renderer.render_page(1, 0)


def test_invert_option(pdf_bytes):
    plain = PDFDocumentRenderer(RendererConfig())
    inverted = PDFDocumentRenderer(RendererConfig(invert=True))
    plain.load_bytes(pdf_bytes)
    inverted.load_bytes(pdf_bytes)
    # Blank corner is white normally and black when inverted
    assert plain.render_page(1, 1.0).pixel(2, 2) == (255, 255, 255)
    assert inverted.render_page(1, 1.0).pixel(2, 2) == (0, 0, 0)
    plain.close()
    inverted.close()


def test_no_document():
    with pytest.raises(DocumentError):
        PDFDocumentRenderer().render_page(1, 1.0)
