"""
Plain-text preview of a single entry as it would appear in an export.
"""

from typing import List, Optional

from ..store.schemas import ExportTemplate, LogEntry
from .formatting import (
    ATTACHMENTS_LABEL, CHECKLIST_LABEL, DATE_LABEL, DEFAULT_FOOTER_TEXT, DEFAULT_HEADER_TEXT,
    attachment_line, checklist_line, format_long_datetime
)


CONTENT_LABEL = "일지 내용"
EMPTY_CONTENT = "내용이 없습니다."
MODIFIED_LABEL = "수정됨"
RULE = "-" * 40


def render_preview(entry: LogEntry, template: Optional[ExportTemplate] = None) -> str:
    """
    Render the detail view of ``entry``.

    Header, footer, checklist and attachment sections appear only when
    ``template`` enables them; without a template only the title, dates
    and content are shown.
    """
    lines: List[str] = []

    if template is not None and template.include_header:
        lines.extend([template.header_text or DEFAULT_HEADER_TEXT, RULE])

    lines.append(entry.title)
    dates = f"{DATE_LABEL}: {format_long_datetime(entry.created_at)}"
    if entry.is_modified:
        dates += f" ({MODIFIED_LABEL}: {format_long_datetime(entry.updated_at)})"
    lines.extend([dates, ""])

    lines.extend([f"[{CONTENT_LABEL}]", entry.content or EMPTY_CONTENT])

    if template is not None and template.include_checklist and entry.checklist_items:
        lines.extend(["", f"[{CHECKLIST_LABEL}]"])
        lines.extend(checklist_line(item) for item in entry.checklist_items)

    if template is not None and template.include_attachments and entry.attachments:
        lines.extend(["", f"[{ATTACHMENTS_LABEL}]"])
        lines.extend(f"- {attachment_line(a)}" for a in entry.attachments)

    if template is not None and template.include_footer:
        lines.extend([RULE, template.footer_text or DEFAULT_FOOTER_TEXT])

    return "\n".join(lines)
