"""
Spreadsheet (XLSX) export built with openpyxl.
"""

import re
from io import BytesIO
from typing import Sequence

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font

from ..store.schemas import ExportFormat, ExportTemplate, LogEntry
from .base import ExportRenderer
from .formatting import COLUMN_HEADERS, format_date
from .schemas import ExportPayload


COLUMN_WIDTHS = (5, 30, 15, 80)
TEXT_COLUMNS = ("B", "D")
MAX_SHEET_TITLE = 31
DEFAULT_SHEET_TITLE = "Sheet1"

_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")


def _cell_text(value: str) -> str:
    return ILLEGAL_CHARACTERS_RE.sub("", value)


def sheet_title(name: str) -> str:
    """Turn a template name into a legal worksheet title."""
    title = _INVALID_SHEET_CHARS.sub(" ", _cell_text(name or "")).strip().strip("'")
    return title[:MAX_SHEET_TITLE].strip() or DEFAULT_SHEET_TITLE


class XlsxRenderer(ExportRenderer):
    """Single worksheet with one row per entry; content is never truncated."""

    format = ExportFormat.XLSX

    def render(self, entries: Sequence[LogEntry], template: ExportTemplate) -> ExportPayload:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = sheet_title(template.name)

        sheet.append(list(COLUMN_HEADERS))
        for cell in sheet[1]:
            cell.font = Font(bold=True)

        for index, entry in enumerate(entries, start=1):
            sheet.append([
                index,
                _cell_text(entry.title),
                format_date(entry.created_at),
                _cell_text(entry.content),
            ])
            # Title and content stay literal text even when they start with "=".
            for column in TEXT_COLUMNS:
                sheet[f"{column}{sheet.max_row}"].data_type = "s"

        for column, width in zip("ABCD", COLUMN_WIDTHS):
            sheet.column_dimensions[column].width = width

        buffer = BytesIO()
        workbook.save(buffer)
        return self._payload(buffer.getvalue())
