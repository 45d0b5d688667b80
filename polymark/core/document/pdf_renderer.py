"""
PDF document loading and page rasterization.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import fitz  # PyMuPDF

from polymark.config import RendererConfig
from polymark.core.errors import DocumentError
from polymark.core.geometry import length_to_device, zoom_matrix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageDimensions:
    width: float
    height: float


class PDFDocumentRenderer:
    """Handles PDF document loading and rendering pages at a given zoom."""

    def __init__(self, config: Optional[RendererConfig] = None):
        self.config = config or RendererConfig()
        self.doc: Optional[fitz.Document] = None
        self.current_file_path: Optional[str] = None

    @property
    def page_count(self) -> int:
        return self.doc.page_count if self.doc else 0

    def is_loaded(self) -> bool:
        """Check if a document is currently loaded."""
        return self.doc is not None

    def load(self, file_path: str) -> int:
        """
        Load a PDF document from disk.

        Args:
            file_path: Path to the PDF file

        Returns:
            Number of pages

        Raises:
            DocumentError: If the file cannot be opened as a PDF
        """
        try:
            doc = fitz.open(file_path)
        except Exception as e:
            raise DocumentError(f"Error loading PDF {file_path}: {e}") from e

        self._set_document(doc)
        self.current_file_path = file_path
        logger.info(f"Loaded {file_path} ({doc.page_count} pages)")
        return doc.page_count

    def load_bytes(self, data: bytes) -> int:
        """
        Load a PDF document from memory.

        Args:
            data: PDF file contents

        Returns:
            Number of pages
        """
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise DocumentError(f"Error loading PDF from memory: {e}") from e

        self._set_document(doc)
        self.current_file_path = None
        return doc.page_count

    def _set_document(self, doc: fitz.Document) -> None:
        if doc.page_count == 0:
            doc.close()
            raise DocumentError("PDF has no pages")
        if self.doc:
            self.close()
        self.doc = doc

    def close(self) -> None:
        """Close the current PDF document."""
        if self.doc:
            self.doc.close()
            self.doc = None
        self.current_file_path = None

    def get_page(self, page: int) -> fitz.Page:
        """
        Get a page object for direct operations.

        Args:
            page: 1-based page number

        Raises:
            DocumentError: If no document is loaded or the page does not exist
        """
        if not self.doc:
            raise DocumentError("No document loaded")
        if not 1 <= page <= self.doc.page_count:
            raise DocumentError(f"Page {page} out of range 1..{self.doc.page_count}")
        return self.doc.load_page(page - 1)

    def get_page_dimensions(self, page: int, zoom: float) -> PageDimensions:
        """
        Get the size of a page drawn at ``zoom``.

        Args:
            page: 1-based page number
            zoom: Zoom factor

        Returns:
            Width and height in device pixels
        """
        rect = self.get_page(page).rect
        return PageDimensions(
            width=length_to_device(rect.width, zoom),
            height=length_to_device(rect.height, zoom),
        )

    def render_page(self, page: int, zoom: float, rotation: int = 0) -> fitz.Pixmap:
        """
        Rasterize a page.

        Args:
            page: 1-based page number
            zoom: Zoom factor
            rotation: View rotation in degrees, a multiple of 90

        Returns:
            RGB pixmap of the page
        """
        if rotation % 90 != 0:
            raise ValueError(f"Rotation must be a multiple of 90, got {rotation}")

        pdf_page = self.get_page(page)
        matrix = zoom_matrix(zoom).prerotate(rotation % 360)

        try:
            pix = pdf_page.get_pixmap(
                matrix=matrix, alpha=self.config.alpha, annots=self.config.annots
            )
        except Exception as e:
            raise DocumentError(f"Error rendering page {page}: {e}") from e

        if self.config.invert:
            pix.invert_irect(pix.irect)
        return pix
