import logging
import os
import tempfile
from typing import Dict, List, Optional, Sequence

import fitz  # PyMuPDF
from PyQt5.QtCore import QObject, pyqtSignal

from polymark.config import ExportConfig
from polymark.core.annotations import Annotation, CommittedShape, project_page
from polymark.core.document.pdf_renderer import PDFDocumentRenderer
from polymark.core.errors import ExportError
from polymark.core.geometry import check_zoom

logger = logging.getLogger(__name__)

# PDF line cap / join style 1 is "round"
ROUND = 1


class ExportCompositor(QObject):
    """Flattens annotations onto page rasters and writes a new PDF."""

    progress_signal = pyqtSignal(int, int)  # current, total

    def __init__(self, config: Optional[ExportConfig] = None):
        super().__init__()
        self.config = config or ExportConfig()
        self.scale = check_zoom(self.config.scale)

    def export(
        self,
        renderer: PDFDocumentRenderer,
        annotations_by_page: Dict[int, List[Annotation]],
        output_path: str,
    ) -> int:
        """
        Export every page of the loaded document with its annotations burned in.

        The output only appears at ``output_path`` once all pages have been
        written.

        Args:
            renderer: Renderer holding the source document
            annotations_by_page: Snapshot of the store, keyed by 1-based page
            output_path: Destination PDF path

        Returns:
            Number of pages written

        Raises:
            ExportError: If any page fails; no output file is left behind
        """
        if not renderer.is_loaded():
            raise ExportError("No document loaded")

        total = renderer.page_count
        output_dir = os.path.dirname(os.path.abspath(output_path))
        temp_path = None
        out = fitz.open()

        logger.info(f"Exporting {total} page(s) to {output_path} at scale {self.scale}")
        try:
            temp_fd, temp_path = tempfile.mkstemp(suffix=".pdf", dir=output_dir)
            os.close(temp_fd)

            self.progress_signal.emit(0, total)
            for page in range(1, total + 1):
                pix = renderer.render_page(page, self.scale)
                flat = self.flatten_page(pix, project_page(annotations_by_page.get(page, []), self.scale))

                source_rect = renderer.get_page(page).rect
                out_page = out.new_page(width=source_rect.width, height=source_rect.height)
                out_page.insert_image(out_page.rect, pixmap=flat)
                self.progress_signal.emit(page, total)

            out.save(temp_path, garbage=4, deflate=True)
            out.close()
            os.replace(temp_path, output_path)
        except Exception as e:
            if not out.is_closed:
                out.close()
            if temp_path and os.path.exists(temp_path):
                os.remove(temp_path)
            logger.error(f"Export to {output_path} failed: {e}")
            raise ExportError(f"Failed to export PDF: {e}") from e

        logger.info(f"Exported {total} page(s) to {output_path}")
        return total

    def flatten_page(self, pix: fitz.Pixmap, shapes: Sequence[CommittedShape]) -> fitz.Pixmap:
        """
        Stroke projected shapes onto a page raster.

        Args:
            pix: Page raster at the export scale
            shapes: Annotations projected at the same scale

        Returns:
            A new pixmap of the same size with the shapes drawn on top
        """
        if not shapes:
            return pix

        # A scratch page one point per pixel, so device coordinates draw 1:1
        scratch = fitz.open()
        try:
            page = scratch.new_page(width=pix.width, height=pix.height)
            page.insert_image(page.rect, pixmap=pix)

            for item in shapes:
                shape = page.new_shape()
                points = [fitz.Point(p.x, p.y) for p in item.points]
                if item.closed:
                    shape.draw_polyline(points + points[:1])
                else:
                    shape.draw_line(points[0], points[-1])
                shape.finish(
                    color=item.annotation.style.pdf_color,
                    width=item.width,
                    closePath=item.closed,
                    lineCap=ROUND,
                    lineJoin=ROUND,
                )
                shape.commit()

            return page.get_pixmap(alpha=False)
        finally:
            scratch.close()
