"""
Shared formatting helpers for every export format.
"""

from datetime import datetime
from typing import Dict

from ..store.schemas import Attachment, ChecklistItem, ExportFormat


COLUMN_HEADERS = ("No", "제목", "작성일", "내용")
DATE_LABEL = "작성일"
CHECKLIST_LABEL = "체크리스트"
ATTACHMENTS_LABEL = "첨부파일"
DOCUMENT_TITLE_SUFFIX = "출력 문서"

DEFAULT_HEADER_TEXT = "일지 관리 시스템"
DEFAULT_FOOTER_TEXT = "© 일지 관리 시스템"

ELLIPSIS = "..."

MEDIA_TYPES: Dict[ExportFormat, str] = {
    ExportFormat.PDF: "application/pdf",
    ExportFormat.DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ExportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ExportFormat.TEXT: "text/plain; charset=utf-8",
}

EXTENSIONS: Dict[ExportFormat, str] = {
    ExportFormat.PDF: "pdf",
    ExportFormat.DOCX: "docx",
    ExportFormat.XLSX: "xlsx",
    ExportFormat.TEXT: "txt",
}


def format_date(value: datetime) -> str:
    """Short calendar date, e.g. ``2024. 1. 1.``"""
    return f"{value.year}. {value.month}. {value.day}."


def format_long_date(value: datetime) -> str:
    """Long-form calendar date, e.g. ``2024년 1월 1일``"""
    return f"{value.year}년 {value.month}월 {value.day}일"


def format_long_datetime(value: datetime) -> str:
    """Long-form date with a 12-hour clock, e.g. ``2024년 1월 1일 오후 03:05``"""
    period = "오전" if value.hour < 12 else "오후"
    hour = value.hour % 12 or 12
    return f"{format_long_date(value)} {period} {hour:02d}:{value.minute:02d}"


def truncate(text: str, limit: int = 100) -> str:
    """Cut ``text`` to ``limit`` characters, adding an ellipsis when shortened."""
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def format_size_kb(size_bytes: int) -> str:
    # Half-up rounding, not banker's rounding
    return f"{int(size_bytes / 1024 + 0.5)} KB"


def checklist_line(item: ChecklistItem, checked_mark: str = "[x]", unchecked_mark: str = "[ ]") -> str:
    """Render a checklist item; required items are marked with an asterisk."""
    mark = checked_mark if item.checked else unchecked_mark
    return f"{mark} {item.text}{' *' if item.required else ''}"


def attachment_line(attachment: Attachment) -> str:
    return f"{attachment.name} ({format_size_kb(attachment.size_bytes)})"
