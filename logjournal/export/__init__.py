"""
Document export: renderers, delivery, history and the export service.
"""

from .base import ExportRenderer
from .delivery import LocalFileDelivery, media_type_for
from .history import ExportHistoryRecorder
from .pdf import PdfRenderer
from .pdf_pages import PagePerEntryPdfRenderer, render_entry_pages, to_data_uri
from .preview import render_preview
from .registry import build_renderers, render_export
from .schemas import ExportPayload, ExportRequest, ExportResult
from .service import ExportService
from .spreadsheet import XlsxRenderer
from .text import TextRenderer
from .word import DocxRenderer

__all__ = [
    "ExportRenderer",
    "PdfRenderer",
    "PagePerEntryPdfRenderer",
    "DocxRenderer",
    "XlsxRenderer",
    "TextRenderer",
    "ExportPayload",
    "ExportRequest",
    "ExportResult",
    "ExportService",
    "ExportHistoryRecorder",
    "LocalFileDelivery",
    "build_renderers",
    "media_type_for",
    "render_entry_pages",
    "render_export",
    "render_preview",
    "to_data_uri",
]
