import logging
from typing import Dict, List, Optional

from PyQt5.QtCore import QThread, pyqtSignal

from polymark.config import ExportConfig, RendererConfig
from polymark.core.annotations import Annotation
from polymark.core.document import ExportCompositor, PDFDocumentRenderer

logger = logging.getLogger(__name__)


class ExportWorker(QThread):
    """Worker thread for exporting the annotated PDF without freezing the UI."""

    # Signals
    finished = pyqtSignal(bool, str)  # success, message
    progress = pyqtSignal(str)  # status message
    page_progress = pyqtSignal(int, int)  # current, total pages

    def __init__(
        self,
        source_pdf: str,
        output_pdf: str,
        annotations: Dict[int, List[Annotation]],
        renderer_config: Optional[RendererConfig] = None,
        export_config: Optional[ExportConfig] = None,
    ):
        super().__init__()
        self.source_pdf = source_pdf
        self.output_pdf = output_pdf
        # Annotations are frozen; copying the lists detaches the snapshot from the store
        self.annotations = {page: list(anns) for page, anns in annotations.items()}
        self.renderer_config = renderer_config or RendererConfig()
        self.exporter = ExportCompositor(export_config)

    def run(self):
        """Execute the export in a background thread."""
        # The worker opens its own copy of the document
        renderer = PDFDocumentRenderer(self.renderer_config)
        try:
            self.exporter.progress_signal.connect(self._on_page_progress)

            self.progress.emit("Loading document...")
            renderer.load(self.source_pdf)

            self.progress.emit("Exporting annotations...")
            pages = self.exporter.export(renderer, self.annotations, self.output_pdf)

            self.finished.emit(True, f"Exported {pages} page(s) to {self.output_pdf}")
        except Exception as e:
            logger.exception(f"Export worker failed: {e}")
            self.finished.emit(False, f"Error during export: {e}")
        finally:
            self.exporter.progress_signal.disconnect(self._on_page_progress)
            renderer.close()

    def _on_page_progress(self, current, total):
        """Handle page-level progress updates."""
        self.page_progress.emit(current, total)
