"""
Entry editing workflow.

Validates an in-progress edit and either promotes the draft to a saved
entry or updates an existing entry.
"""

from typing import Optional

from ..checklist.engine import validate_entry
from ..core.exceptions import NotFoundError
from ..core.logging import get_logger
from ..store.schemas import (
    DraftTarget, EditTarget, LogEntry, LogEntryCreate, LogEntryPatch
)
from ..store.service import LogStore


logger = get_logger(__name__)


class LogEditor:
    """Saves edits made to the draft or to a persisted entry."""

    def __init__(self, store: LogStore) -> None:
        self.store = store

    def submit(self, target: EditTarget, patch: Optional[LogEntryPatch] = None) -> str:
        """
        Validate and save an edit.

        For the draft, the merged values become a new entry and the draft is
        cleared. For a persisted entry, the patch is merged into it. Nothing
        is mutated when validation fails.

        Args:
            target: Draft or persisted entry being edited
            patch: Latest form values not yet saved anywhere

        Returns:
            ID of the saved entry

        Raises:
            ValidationError: If the title is blank or a required item is unchecked
            NotFoundError: If the persisted entry no longer exists
        """
        patch = patch or LogEntryPatch()

        if isinstance(target, DraftTarget):
            base = self.store.draft
            values = self._merged_values(base, patch)
            validate_entry(values.title, values.checklist_items)

            log_id = self.store.create_log(values)
            self.store.clear_draft()
            logger.info(f"Promoted draft to log {log_id}")
            return log_id

        entry = self.store.get_log(target.log_id)
        if entry is None:
            raise NotFoundError(
                "일지를 찾을 수 없습니다.", entity="log", entity_id=target.log_id
            )

        values = self._merged_values(entry, patch)
        validate_entry(values.title, values.checklist_items)
        self.store.update_log(entry.id, patch)
        logger.info(f"Updated log {entry.id}")
        return entry.id

    @staticmethod
    def _merged_values(base: Optional[LogEntry], patch: LogEntryPatch) -> LogEntryCreate:
        values = {}
        if base is not None:
            values = base.model_dump(
                include={"title", "content", "checklist_items", "template_id", "attachments"}
            )
        values.update(patch.changes())
        return LogEntryCreate(**values)
