"""
Renderer registry and the format dispatch used by every export path.
"""

from typing import Dict, Optional, Sequence

from ..core.exceptions import ExportFailedError, LogJournalError
from ..core.logging import get_logger
from ..settings import ExportSettings
from ..store.schemas import ExportFormat, ExportTemplate, LogEntry
from .base import ExportRenderer
from .pdf import PdfRenderer
from .schemas import ExportPayload
from .spreadsheet import XlsxRenderer
from .text import TextRenderer
from .word import DocxRenderer


logger = get_logger(__name__)

Renderers = Dict[ExportFormat, ExportRenderer]


def build_renderers(settings: Optional[ExportSettings] = None) -> Renderers:
    """Create one renderer per supported format."""
    settings = settings or ExportSettings()
    renderers = [
        PdfRenderer(
            font_path=settings.font_path,
            cid_font=settings.cid_font,
            summary_max_chars=settings.summary_max_chars
        ),
        DocxRenderer(),
        XlsxRenderer(),
        TextRenderer(),
    ]
    return {renderer.format: renderer for renderer in renderers}


def render_export(
    entries: Sequence[LogEntry],
    template: ExportTemplate,
    renderers: Optional[Renderers] = None,
    fmt: Optional[ExportFormat] = None
) -> ExportPayload:
    """
    Render ``entries`` in ``fmt`` (defaults to the template's format).

    Raises:
        ExportFailedError: If no renderer handles the format or the encoder fails
    """
    renderers = renderers if renderers is not None else build_renderers()
    fmt = ExportFormat(fmt or template.format)

    renderer = renderers.get(fmt)
    if renderer is None:
        raise ExportFailedError(f"No renderer registered for {fmt.value}", export_format=fmt.value)

    logger.info(f"Rendering {len(entries)} entries as {fmt.value} with template '{template.name}'")
    try:
        payload = renderer.render(entries, template)
    except ExportFailedError:
        raise
    except LogJournalError as e:
        raise ExportFailedError(e.message, export_format=fmt.value, encoder_error=e.message)
    except Exception as e:
        logger.error(f"{fmt.value} encoder failed: {e}")
        raise ExportFailedError(
            f"Failed to render {fmt.value} document",
            export_format=fmt.value,
            encoder_error=str(e)
        )

    logger.debug(f"Rendered {payload.size} bytes of {fmt.value}")
    return payload
