"""
Word-processor (DOCX) export built with python-docx.
"""

from io import BytesIO
from typing import Sequence

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt

from ..store.schemas import ExportFormat, ExportTemplate, LogEntry
from .base import ExportRenderer
from .formatting import (
    ATTACHMENTS_LABEL, CHECKLIST_LABEL, DATE_LABEL,
    attachment_line, checklist_line, format_date
)
from .schemas import ExportPayload


ENTRY_SPACE_BEFORE = Pt(20)
ENTRY_SPACE_AFTER = Pt(10)
DATE_SPACE_AFTER = Pt(10)
BODY_SPACE_AFTER = Pt(15)
FOOTER_SPACE_BEFORE = Pt(20)


class DocxRenderer(ExportRenderer):
    """Heading per entry, an italic date line and the body paragraph."""

    format = ExportFormat.DOCX

    def render(self, entries: Sequence[LogEntry], template: ExportTemplate) -> ExportPayload:
        document = Document()

        title = document.add_heading(template.name, level=1)
        title.alignment = WD_ALIGN_PARAGRAPH.CENTER

        if template.include_header and template.header_text:
            header = document.add_paragraph(template.header_text)
            header.alignment = WD_ALIGN_PARAGRAPH.CENTER

        for index, entry in enumerate(entries, start=1):
            self._add_entry(document, index, entry, template)

        if template.include_footer and template.footer_text:
            footer = document.add_paragraph(template.footer_text)
            footer.alignment = WD_ALIGN_PARAGRAPH.CENTER
            footer.paragraph_format.space_before = FOOTER_SPACE_BEFORE

        buffer = BytesIO()
        document.save(buffer)
        return self._payload(buffer.getvalue())

    @staticmethod
    def _add_entry(document, index: int, entry: LogEntry, template: ExportTemplate) -> None:
        heading = document.add_heading(f"{index}. {entry.title}", level=2)
        heading.paragraph_format.space_before = ENTRY_SPACE_BEFORE
        heading.paragraph_format.space_after = ENTRY_SPACE_AFTER

        date_line = document.add_paragraph()
        date_line.add_run(f"{DATE_LABEL}: {format_date(entry.created_at)}").italic = True
        date_line.paragraph_format.space_after = DATE_SPACE_AFTER

        body = document.add_paragraph(entry.content)
        body.paragraph_format.space_after = BODY_SPACE_AFTER

        if template.include_checklist and entry.checklist_items:
            document.add_paragraph().add_run(CHECKLIST_LABEL).bold = True
            for item in entry.checklist_items:
                document.add_paragraph(checklist_line(item, checked_mark="☑", unchecked_mark="☐"))

        if template.include_attachments and entry.attachments:
            document.add_paragraph().add_run(ATTACHMENTS_LABEL).bold = True
            for attachment in entry.attachments:
                document.add_paragraph(f"• {attachment_line(attachment)}")
