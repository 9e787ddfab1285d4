"""
Plain-text export.
"""

from typing import List, Sequence

from ..store.schemas import ExportFormat, ExportTemplate, LogEntry
from .base import ExportRenderer
from .formatting import (
    ATTACHMENTS_LABEL, CHECKLIST_LABEL, DATE_LABEL, DOCUMENT_TITLE_SUFFIX,
    attachment_line, checklist_line, format_date
)
from .schemas import ExportPayload


class TextRenderer(ExportRenderer):
    """Newline-delimited document, one numbered block per entry."""

    format = ExportFormat.TEXT

    def render(self, entries: Sequence[LogEntry], template: ExportTemplate) -> ExportPayload:
        parts: List[str] = [f"{template.name} {DOCUMENT_TITLE_SUFFIX}\n\n"]

        if template.include_header and template.header_text:
            parts.append(f"{template.header_text}\n\n")

        for index, entry in enumerate(entries, start=1):
            parts.append(f"{index}. {entry.title}\n")
            parts.append(f"{DATE_LABEL}: {format_date(entry.created_at)}\n")
            parts.append(f"{entry.content}\n")

            if template.include_checklist and entry.checklist_items:
                parts.append(f"{CHECKLIST_LABEL}:\n")
                parts.extend(f"  {checklist_line(item)}\n" for item in entry.checklist_items)

            if template.include_attachments and entry.attachments:
                parts.append(f"{ATTACHMENTS_LABEL}:\n")
                parts.extend(f"  - {attachment_line(a)}\n" for a in entry.attachments)

            parts.append("\n")

        if template.include_footer and template.footer_text:
            parts.append(f"\n{template.footer_text}")

        return self._payload("".join(parts))
