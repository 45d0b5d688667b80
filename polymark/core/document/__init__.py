"""
PDF document handling and export.
"""
from .pdf_renderer import PageDimensions, PDFDocumentRenderer
from .pdf_exporter import ExportCompositor

__all__ = ['PDFDocumentRenderer', 'PageDimensions', 'ExportCompositor']
