"""
Export history recording.
"""

from typing import Optional, Sequence, Union

from ..core.logging import get_logger
from ..store.schemas import ExportFormat, ExportHistoryCreate
from ..store.service import LogStore


logger = get_logger(__name__)


class ExportHistoryRecorder:
    """Appends audit rows for completed exports. Referenced ids are not checked."""

    def __init__(self, store: LogStore):
        self.store = store

    def record(
        self,
        log_ids: Sequence[str],
        template_id: str,
        fmt: Union[ExportFormat, str],
        file_name: str,
        url: Optional[str] = None
    ) -> str:
        history_id = self.store.add_export_history(ExportHistoryCreate(
            log_ids=list(log_ids),
            template_id=template_id,
            format=ExportFormat(fmt),
            file_name=file_name,
            url=url,
        ))
        logger.info(f"Recorded export {history_id}: {file_name} ({len(log_ids)} entries)")
        return history_id
