"""
Page-per-entry PDF layout served by the HTTP export endpoint.
"""

import base64
from pathlib import Path
from typing import Optional, Sequence, Union

from ..store.schemas import ExportFormat, ExportTemplate, LogEntry
from .base import ExportRenderer
from .formatting import (
    ATTACHMENTS_LABEL, CHECKLIST_LABEL, DATE_LABEL, DEFAULT_FOOTER_TEXT, DEFAULT_HEADER_TEXT,
    attachment_line, checklist_line, format_long_date
)
from .pdf import DEFAULT_CID_FONT, PAGE_HEIGHT, PAGE_WIDTH, PdfCanvas, register_font
from .schemas import ExportPayload


DATA_URI_PREFIX = "data:application/pdf;filename=generated.pdf;base64,"
EMPTY_CONTENT = "내용 없음"

MUTED_GRAY = 100 / 255
CONTENT_TOP = 45
LINE_STEP = 7
FOOTER_RULE = PAGE_HEIGHT - 20


def to_data_uri(payload: ExportPayload) -> str:
    """Encode a rendered PDF as the data URI returned to HTTP clients."""
    return DATA_URI_PREFIX + base64.b64encode(payload.as_bytes()).decode("ascii")


class PagePerEntryPdfRenderer(ExportRenderer):
    """
    One page per entry with optional running header and footer.

    Content that does not fit continues on extra pages. When the footer is
    enabled every page carries ``page / total`` numbering.
    """

    format = ExportFormat.PDF

    def __init__(self, font_path: Optional[Union[str, Path]] = None, cid_font: str = DEFAULT_CID_FONT):
        self.font_path = font_path
        self.cid_font = cid_font

    def render(self, entries: Sequence[LogEntry], template: ExportTemplate) -> ExportPayload:
        font_name = register_font(self.font_path, self.cid_font)

        header = (template.header_text or DEFAULT_HEADER_TEXT) if template.include_header else ""
        footer = (template.footer_text or DEFAULT_FOOTER_TEXT) if template.include_footer else ""

        def decorate(pdf: PdfCanvas, number: int, total: int) -> None:
            if header:
                pdf.text(PAGE_WIDTH / 2, 10, header, 10, align="center", gray=MUTED_GRAY)
                pdf.hline(10, PAGE_WIDTH - 10, 15)
            if footer:
                pdf.hline(10, PAGE_WIDTH - 10, FOOTER_RULE)
                pdf.text(PAGE_WIDTH / 2, PAGE_HEIGHT - 10, footer, 10, align="center", gray=MUTED_GRAY)
                pdf.text(PAGE_WIDTH - 20, PAGE_HEIGHT - 10, f"{number} / {total}", 10, gray=MUTED_GRAY)

        pdf = PdfCanvas(font_name, decorate=decorate)
        for index, entry in enumerate(entries):
            if index > 0:
                pdf.new_page()
            self._entry_page(pdf, entry, template)

        content = pdf.finish()
        return self._payload(content, page_count=pdf.page_count)

    @staticmethod
    def _entry_page(pdf: PdfCanvas, entry: LogEntry, template: ExportTemplate) -> None:
        pdf.text(PAGE_WIDTH / 2, 25, entry.title, 16, align="center")
        pdf.text(
            PAGE_WIDTH / 2, 32, f"{DATE_LABEL}: {format_long_date(entry.created_at)}", 10,
            align="center", gray=MUTED_GRAY
        )

        pdf.y = CONTENT_TOP
        pdf.flow(pdf.wrap(entry.content or EMPTY_CONTENT, 12, PAGE_WIDTH - 40), 20, 12, LINE_STEP)

        if template.include_checklist and entry.checklist_items:
            pdf.y += 10
            pdf.flow([CHECKLIST_LABEL], 20, 14, LINE_STEP)
            lines = []
            for item in entry.checklist_items:
                lines.extend(pdf.wrap(checklist_line(item), 12, PAGE_WIDTH - 40))
            pdf.flow(lines, 20, 12, LINE_STEP)

        if template.include_attachments and entry.attachments:
            pdf.y += 10
            pdf.flow([ATTACHMENTS_LABEL], 20, 14, LINE_STEP)
            lines = []
            for attachment in entry.attachments:
                lines.extend(pdf.wrap(f"- {attachment_line(attachment)}", 12, PAGE_WIDTH - 40))
            pdf.flow(lines, 20, 12, LINE_STEP)


def render_entry_pages(
    entries: Sequence[LogEntry],
    template: ExportTemplate,
    font_path: Optional[Union[str, Path]] = None,
    cid_font: str = DEFAULT_CID_FONT
) -> ExportPayload:
    """Render ``entries`` one page each; see :class:`PagePerEntryPdfRenderer`."""
    return PagePerEntryPdfRenderer(font_path=font_path, cid_font=cid_font).render(entries, template)
