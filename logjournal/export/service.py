"""
Export service layer.

This module ties entry selection, rendering, delivery and history
recording together into the export and re-download workflows.
"""

from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..core.exceptions import LogJournalError, ValidationError
from ..core.logging import get_logger
from ..store.schemas import ExportTemplate, LogEntry
from ..store.service import LogStore
from .delivery import Deliver
from .history import ExportHistoryRecorder
from .registry import Renderers, render_export
from .schemas import ExportPayload, ExportResult


logger = get_logger(__name__)

DateLike = Union[date, datetime]


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


class ExportService:
    """
    High-level service for exporting entries.

    Failures past input validation are reported through ``ExportResult``
    rather than raised, and leave the export history untouched.
    """

    def __init__(self, store: LogStore, renderers: Renderers, deliver: Deliver) -> None:
        """
        Initialize the export service.

        Args:
            store: Store holding entries, export templates and history
            renderers: Renderer per export format
            deliver: Callable that hands a payload to its destination
        """
        self.store = store
        self.renderers = renderers
        self.deliver = deliver
        self.history = ExportHistoryRecorder(store)

    def select_logs(
        self,
        log_ids: Optional[Sequence[str]] = None,
        date_from: Optional[DateLike] = None,
        date_to: Optional[DateLike] = None
    ) -> List[LogEntry]:
        """
        Pick the entries to export.

        Explicit ids take precedence over the date range. Both range ends
        are inclusive and compared by calendar day. Store order (newest
        first) is kept.

        Args:
            log_ids: Entry IDs to export
            date_from: First day of the range
            date_to: Last day of the range

        Returns:
            Matching entries
        """
        logs = self.store.logs

        if log_ids:
            wanted = set(log_ids)
            return [log for log in logs if log.id in wanted]

        start = _as_date(date_from) if date_from is not None else None
        end = _as_date(date_to) if date_to is not None else None

        selected = []
        for log in logs:
            day = log.created_at.date()
            if start is not None and day < start:
                continue
            if end is not None and day > end:
                continue
            selected.append(log)
        return selected

    def export(
        self,
        template_id: str,
        file_name: str,
        log_ids: Optional[Sequence[str]] = None,
        date_from: Optional[DateLike] = None,
        date_to: Optional[DateLike] = None
    ) -> ExportResult:
        """
        Render the selected entries with an export template and deliver the file.

        Args:
            template_id: Export template to render with
            file_name: File name without extension
            log_ids: Entry IDs to export
            date_from: First day of the range, when no ids are given
            date_to: Last day of the range, when no ids are given

        Returns:
            ExportResult describing the delivered file or the failure

        Raises:
            ValidationError: If the template id or file name is blank
        """
        if not template_id or not template_id.strip():
            raise ValidationError("출력 템플릿을 선택하세요.", field_name="template_id")
        if not file_name or not file_name.strip():
            raise ValidationError("파일 이름을 입력하세요.", field_name="file_name", invalid_value=file_name)

        template = self.store.get_export_template(template_id)
        if template is None:
            return self._failed(f"Export template not found: {template_id}")

        logs = self.select_logs(log_ids, date_from, date_to)
        if not logs:
            return self._failed("No log entries match the selection", template)

        stem = file_name.strip()
        result = self._render_and_deliver(logs, template, stem)
        if not result.success:
            return result

        result.history_id = self.history.record(
            [log.id for log in logs], template.id, template.format, result.file_name, url=result.location
        )
        logger.info(f"Exported {len(logs)} entries to {result.file_name}")
        return result

    def redownload(self, history_id: str) -> ExportResult:
        """
        Re-render a past export from its history row.

        The row's format and template are used with whichever referenced
        entries still exist. No new history row is written.

        Args:
            history_id: Export history row to repeat

        Returns:
            ExportResult describing the delivered file or the failure
        """
        history = self.store.get_export_history(history_id)
        if history is None:
            return self._failed(f"Export history not found: {history_id}")

        template = self.store.get_export_template(history.template_id)
        if template is None:
            return self._failed(f"Export template no longer exists: {history.template_id}")

        wanted = set(history.log_ids)
        logs = [log for log in self.store.logs if log.id in wanted]
        if not logs:
            return self._failed("None of the exported log entries exist anymore", template)

        template = template.model_copy(update={"format": history.format})
        result = self._render_and_deliver(logs, template, Path(history.file_name).stem)
        if result.success:
            result.history_id = history.id
            logger.info(f"Re-downloaded export {history.id} as {result.file_name}")
        return result

    def _render_and_deliver(self, logs: List[LogEntry], template: ExportTemplate, stem: str) -> ExportResult:
        try:
            payload: ExportPayload = render_export(logs, template, self.renderers)
            full_name = payload.file_name(stem)
            location = self.deliver(payload, full_name)
        except LogJournalError as e:
            logger.error(f"Export with template '{template.name}' failed: {e.message}")
            return self._failed(e.message, template)

        return ExportResult(
            success=True,
            format=template.format,
            file_name=full_name,
            location=location,
            log_count=len(logs),
            payload=payload,
        )

    @staticmethod
    def _failed(message: str, template: Optional[ExportTemplate] = None) -> ExportResult:
        logger.warning(message)
        return ExportResult(
            success=False,
            error_message=message,
            format=template.format if template else None,
        )
