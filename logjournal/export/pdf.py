"""
PDF export built on the reportlab canvas.

Layout is expressed in millimetres measured from the top of an A4 page.
"""

from io import BytesIO
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from ..core.exceptions import ExportFailedError
from ..core.logging import get_logger
from ..store.schemas import ExportFormat, ExportTemplate, LogEntry
from .base import ExportRenderer
from .formatting import (
    ATTACHMENTS_LABEL, CHECKLIST_LABEL, COLUMN_HEADERS, DATE_LABEL,
    attachment_line, checklist_line, format_date, format_long_date, truncate
)
from .schemas import ExportPayload


logger = get_logger(__name__)

DEFAULT_CID_FONT = "HYSMyeongJo-Medium"

PAGE_WIDTH = A4[0] / mm
PAGE_HEIGHT = A4[1] / mm
SAFE_HEIGHT = 270
TOP_MARGIN = 20

# Summary table: (x, width) per column
TABLE_COLUMNS: Tuple[Tuple[float, float], ...] = ((10, 12), (22, 48), (70, 30), (100, 100))
TABLE_TOP = 35
TABLE_HEADER_HEIGHT = 10
TABLE_FONT_SIZE = 10
TABLE_LINE_HEIGHT = 4.5
CELL_PADDING = 2

HEADER_FILL = 240 / 255
RULE_GRAY = 0.8

PageDecorator = Callable[["PdfCanvas", int, int], None]


def register_font(font_path: Optional[Union[str, Path]] = None, cid_font: str = DEFAULT_CID_FONT) -> str:
    """
    Register the font used for PDF output and return its reportlab name.

    A TrueType file is used when ``font_path`` is given; otherwise the
    built-in CID font ``cid_font``, which covers Hangul without shipping
    a font file.

    Raises:
        ExportFailedError: If the font file is missing or cannot be loaded
    """
    registered = pdfmetrics.getRegisteredFontNames()

    if font_path:
        path = Path(font_path)
        if not path.is_file():
            raise ExportFailedError(
                f"PDF font file not found: {path}",
                export_format=ExportFormat.PDF.value
            )
        name = path.stem
        if name not in registered:
            try:
                pdfmetrics.registerFont(TTFont(name, str(path)))
            except Exception as e:
                raise ExportFailedError(
                    f"Failed to load PDF font {path}",
                    export_format=ExportFormat.PDF.value,
                    encoder_error=str(e)
                )
            logger.debug(f"Registered TrueType font {name} from {path}")
        return name

    if cid_font not in registered:
        try:
            pdfmetrics.registerFont(UnicodeCIDFont(cid_font))
        except Exception as e:
            raise ExportFailedError(
                f"Unknown CID font: {cid_font}",
                export_format=ExportFormat.PDF.value,
                encoder_error=str(e)
            )
        logger.debug(f"Registered CID font {cid_font}")
    return cid_font


class _DeferredCanvas(canvas.Canvas):
    """Holds finished pages until save so each page can be decorated knowing the total."""

    def __init__(self, *args, **kwargs):
        canvas.Canvas.__init__(self, *args, **kwargs)
        self._pending_pages: List[dict] = []

    def showPage(self):
        self._pending_pages.append(dict(self.__dict__))
        self._startPage()

    def save_with(self, decorate: Callable[[int, int], None]) -> int:
        total = len(self._pending_pages)
        for number, state in enumerate(self._pending_pages, start=1):
            self.__dict__.update(state)
            decorate(number, total)
            canvas.Canvas.showPage(self)
        canvas.Canvas.save(self)
        return total


class PdfCanvas:
    """
    Thin layout helper over a reportlab canvas.

    ``y`` is a cursor in millimetres from the top of the page. ``flow``
    advances it and starts a new page once it passes the safe height.
    """

    def __init__(self, font_name: str, decorate: Optional[PageDecorator] = None):
        self.font_name = font_name
        self.y: float = TOP_MARGIN
        self._decorate = decorate
        self._buffer = BytesIO()
        self._canvas = _DeferredCanvas(self._buffer, pagesize=A4)
        self._page_count: Optional[int] = None

    def text(self, x: float, y: float, value: str, size: float,
             align: str = "left", gray: float = 0.0) -> None:
        c = self._canvas
        c.setFont(self.font_name, size)
        c.setFillGray(gray)
        baseline = (PAGE_HEIGHT - y) * mm
        if align == "center":
            c.drawCentredString(x * mm, baseline, value)
        elif align == "right":
            c.drawRightString(x * mm, baseline, value)
        else:
            c.drawString(x * mm, baseline, value)

    def rect(self, x: float, y: float, width: float, height: float, gray: float) -> None:
        c = self._canvas
        c.setFillGray(gray)
        c.rect(x * mm, (PAGE_HEIGHT - y - height) * mm, width * mm, height * mm, stroke=0, fill=1)

    def hline(self, x1: float, x2: float, y: float, gray: float = 0.0) -> None:
        c = self._canvas
        c.setStrokeGray(gray)
        c.line(x1 * mm, (PAGE_HEIGHT - y) * mm, x2 * mm, (PAGE_HEIGHT - y) * mm)

    def string_width(self, value: str, size: float) -> float:
        """Width of ``value`` in millimetres."""
        return pdfmetrics.stringWidth(value, self.font_name, size) / mm

    def wrap(self, value: str, size: float, width: float) -> List[str]:
        """Split ``value`` into lines no wider than ``width`` millimetres."""
        lines: List[str] = []
        for paragraph in value.split("\n"):
            if not paragraph.strip():
                lines.append("")
                continue
            for line in simpleSplit(paragraph, self.font_name, size, width * mm):
                lines.extend(self._break_long_line(line, size, width))
        return lines

    def _break_long_line(self, line: str, size: float, width: float) -> List[str]:
        # simpleSplit never breaks inside a word
        if self.string_width(line, size) <= width:
            return [line]
        pieces: List[str] = []
        current = ""
        for char in line:
            if current and self.string_width(current + char, size) > width:
                pieces.append(current)
                current = char
            else:
                current += char
        pieces.append(current)
        return pieces

    def flow(self, lines: Sequence[str], x: float, size: float, step: float, gray: float = 0.0) -> None:
        for line in lines:
            if self.y > SAFE_HEIGHT:
                self.new_page()
            self.text(x, self.y, line, size, gray=gray)
            self.y += step

    def new_page(self) -> None:
        self._canvas.showPage()
        self.y = TOP_MARGIN

    def finish(self) -> bytes:
        self._canvas.showPage()
        self._page_count = self._canvas.save_with(self._run_decorator)
        return self._buffer.getvalue()

    def _run_decorator(self, number: int, total: int) -> None:
        if self._decorate is not None:
            self._decorate(self, number, total)

    @property
    def page_count(self) -> Optional[int]:
        """Number of pages, known once ``finish`` has run."""
        return self._page_count


class PdfRenderer(ExportRenderer):
    """
    Summary table followed by one detail block per entry.

    The table shows each entry's content cut to ``summary_max_chars``; the
    detail blocks carry the full content and, when the template enables
    them, checklist and attachment sections.
    """

    format = ExportFormat.PDF

    def __init__(
        self,
        font_path: Optional[Union[str, Path]] = None,
        cid_font: str = DEFAULT_CID_FONT,
        summary_max_chars: int = 100
    ):
        self.font_path = font_path
        self.cid_font = cid_font
        self.summary_max_chars = summary_max_chars

    def render(self, entries: Sequence[LogEntry], template: ExportTemplate) -> ExportPayload:
        font_name = register_font(self.font_path, self.cid_font)

        footer = template.footer_text if template.include_footer else ""

        def decorate(pdf: PdfCanvas, number: int, total: int) -> None:
            if footer and number == total:
                pdf.text(PAGE_WIDTH / 2, PAGE_HEIGHT - 10, footer, 10, align="center")

        pdf = PdfCanvas(font_name, decorate=decorate)

        pdf.text(PAGE_WIDTH / 2, 15, template.name, 18, align="center")
        if template.include_header and template.header_text:
            pdf.text(PAGE_WIDTH / 2, 25, template.header_text, 12, align="center")

        pdf.y = self._table_header(pdf, TABLE_TOP)
        for index, entry in enumerate(entries, start=1):
            self._table_row(pdf, index, entry)

        pdf.y += 15
        for index, entry in enumerate(entries, start=1):
            self._detail_block(pdf, index, entry, template)

        content = pdf.finish()
        return self._payload(content, page_count=pdf.page_count)

    @staticmethod
    def _table_header(pdf: PdfCanvas, top: float) -> float:
        pdf.rect(10, top, 190, TABLE_HEADER_HEIGHT, HEADER_FILL)
        for (x, _), label in zip(TABLE_COLUMNS, COLUMN_HEADERS):
            pdf.text(x + CELL_PADDING, top + 6, label, 11)
        return top + TABLE_HEADER_HEIGHT

    def _table_row(self, pdf: PdfCanvas, index: int, entry: LogEntry) -> None:
        values = (
            str(index),
            entry.title,
            format_date(entry.created_at),
            truncate(entry.content, self.summary_max_chars),
        )
        cells = [
            pdf.wrap(value, TABLE_FONT_SIZE, width - 2 * CELL_PADDING)
            for (_, width), value in zip(TABLE_COLUMNS, values)
        ]
        height = max(len(lines) for lines in cells) * TABLE_LINE_HEIGHT + 2 * CELL_PADDING

        if pdf.y + height > SAFE_HEIGHT:
            pdf.new_page()
            pdf.y = self._table_header(pdf, TOP_MARGIN)

        for (x, _), lines in zip(TABLE_COLUMNS, cells):
            for offset, line in enumerate(lines):
                baseline = pdf.y + CELL_PADDING + 3.5 + offset * TABLE_LINE_HEIGHT
                pdf.text(x + CELL_PADDING, baseline, line, TABLE_FONT_SIZE)

        pdf.y += height
        pdf.hline(10, 200, pdf.y, gray=RULE_GRAY)

    @staticmethod
    def _detail_block(pdf: PdfCanvas, index: int, entry: LogEntry, template: ExportTemplate) -> None:
        if pdf.y > SAFE_HEIGHT:
            pdf.new_page()

        pdf.text(10, pdf.y, f"{index}. {entry.title}", 14)
        pdf.y += 8

        pdf.text(15, pdf.y, f"{DATE_LABEL}: {format_long_date(entry.created_at)}", 10)
        pdf.y += 6

        pdf.flow(pdf.wrap(entry.content, 12, 180), 15, 12, 6)

        if template.include_checklist and entry.checklist_items:
            pdf.y += 4
            pdf.flow([CHECKLIST_LABEL], 15, 12, 6)
            lines = []
            for item in entry.checklist_items:
                lines.extend(pdf.wrap(checklist_line(item), 11, 175))
            pdf.flow(lines, 20, 11, 6)

        if template.include_attachments and entry.attachments:
            pdf.y += 4
            pdf.flow([ATTACHMENTS_LABEL], 15, 12, 6)
            lines = []
            for attachment in entry.attachments:
                lines.extend(pdf.wrap(f"- {attachment_line(attachment)}", 11, 175))
            pdf.flow(lines, 20, 11, 6)

        pdf.y += 15
