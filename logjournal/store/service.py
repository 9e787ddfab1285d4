"""
Journal entity store.

This module provides the in-memory store holding log entries, checklist
templates, export templates, export history and the singleton draft. Every
committed mutation is persisted to a blob store and announced to subscribers.
"""

import json
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Tuple, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..core.exceptions import StorageError
from ..core.logging import get_logger
from .blob import BlobStore
from .schemas import (
    Attachment, AttachmentCreate, ChecklistItem, ChecklistItemCreate,
    DraftTarget, EditTarget, ExportHistory, ExportHistoryCreate,
    ExportTemplate, ExportTemplateCreate, ExportTemplatePatch, LogEntry,
    LogEntryCreate, LogEntryPatch, LogTemplate, LogTemplateCreate,
    LogTemplatePatch, StoreSnapshot, to_local_time
)


logger = get_logger(__name__)

DEFAULT_NAMESPACE = "log-storage"
STORAGE_VERSION = 0

Listener = Callable[[StoreSnapshot], None]
Record = TypeVar("Record", bound=BaseModel)


def _find(records: List[Record], record_id: str) -> Optional[Record]:
    for record in records:
        if record.id == record_id:
            return record
    return None


class LogStore:
    """
    Single-writer store for every journal collection.

    Mutators apply fully before returning. Lookups return copies, so callers
    never hold references into the store's state; changes go through the
    mutators only.
    """

    def __init__(
        self,
        blob_store: BlobStore,
        namespace: str = DEFAULT_NAMESPACE,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Optional[Callable[[], str]] = None
    ) -> None:
        """
        Initialize the store and rehydrate it from the blob store.

        Args:
            blob_store: Persistence backend
            namespace: Key the snapshot is stored under
            clock: Source of timestamps
            id_factory: Source of record IDs (uuid4 strings by default)
        """
        self.namespace = namespace
        self._blob_store = blob_store
        self._clock = clock
        self._new_id = id_factory or (lambda: str(uuid.uuid4()))
        self._listeners: List[Listener] = []
        self._state = self._load()

    # Persistence

    def _load(self) -> StoreSnapshot:
        try:
            raw = self._blob_store.read(self.namespace)
        except StorageError as e:
            logger.warning(f"Could not read persisted state, starting empty: {e.message}")
            return StoreSnapshot()

        if raw is None:
            logger.info(f"No persisted state under '{self.namespace}', starting empty")
            return StoreSnapshot()

        try:
            payload = json.loads(raw)
            state = payload.get("state") if isinstance(payload, dict) else None
            snapshot = StoreSnapshot.model_validate(state)
        except (ValueError, PydanticValidationError) as e:
            logger.warning(f"Persisted state under '{self.namespace}' is unreadable, starting empty: {e}")
            return StoreSnapshot()

        logger.info(
            f"Loaded {len(snapshot.logs)} logs, {len(snapshot.templates)} templates, "
            f"{len(snapshot.export_templates)} export templates from '{self.namespace}'"
        )
        return snapshot

    def _persist(self) -> None:
        payload = {
            "state": self._state.model_dump(mode="json", by_alias=True),
            "version": STORAGE_VERSION,
        }
        try:
            self._blob_store.write(self.namespace, json.dumps(payload, ensure_ascii=False))
        except StorageError as e:
            logger.warning(f"Persisting state failed, continuing in memory: {e.message}")

    def _commit(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)
        self._persist()
        self._notify()

    # Subscription

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener called with the new snapshot after each mutation.

        Returns:
            Function removing the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Store listener {listener!r} failed: {e}")

    def snapshot(self) -> StoreSnapshot:
        """Deep copy of the complete store state."""
        return self._state.model_copy(deep=True)

    # Collections

    @property
    def logs(self) -> List[LogEntry]:
        return [log.model_copy(deep=True) for log in self._state.logs]

    @property
    def templates(self) -> List[LogTemplate]:
        return [t.model_copy(deep=True) for t in self._state.templates]

    @property
    def export_templates(self) -> List[ExportTemplate]:
        return [t.model_copy(deep=True) for t in self._state.export_templates]

    @property
    def export_history(self) -> List[ExportHistory]:
        return [h.model_copy(deep=True) for h in self._state.export_history]

    @property
    def draft(self) -> Optional[LogEntry]:
        draft = self._state.draft_log
        return draft.model_copy(deep=True) if draft else None

    # Helpers

    def _now(self) -> datetime:
        return to_local_time(self._clock())

    def _touch(self, entry: LogEntry) -> LogEntry:
        """Refresh ``updated_at`` without ever moving it before ``created_at``."""
        return entry.model_copy(update={"updated_at": max(self._now(), entry.created_at)})

    @staticmethod
    def _replace(
        records: List[Record],
        record_id: str,
        transform: Callable[[Record], Record]
    ) -> Tuple[List[Record], bool]:
        changed = False
        result = []
        for record in records:
            if record.id == record_id:
                record = transform(record)
                changed = True
            result.append(record)
        return result, changed

    @staticmethod
    def _without(records: List[Record], record_id: str) -> Tuple[List[Record], bool]:
        result = [record for record in records if record.id != record_id]
        return result, len(result) != len(records)

    # Log entries

    def create_log(self, data: LogEntryCreate) -> str:
        """Create a log entry at the top of the list and return its ID."""
        log_id = self._new_id()
        now = self._now()
        entry = LogEntry(
            id=log_id,
            **data.model_dump(),
            created_at=now,
            updated_at=now,
            is_draft=False,
        )
        self._commit(logs=[entry, *self._state.logs])
        logger.info(f"Created log {log_id}: {entry.title!r}")
        return log_id

    def update_log(self, log_id: str, patch: LogEntryPatch) -> bool:
        """Merge ``patch`` into the entry; silently ignored when the ID is unknown."""
        changes = patch.changes()
        logs, changed = self._replace(
            self._state.logs,
            log_id,
            lambda log: self._touch(log.model_copy(update=changes, deep=True)),
        )
        if not changed:
            logger.debug(f"update_log: no log {log_id}")
            return False
        self._commit(logs=logs)
        return True

    def delete_log(self, log_id: str) -> bool:
        logs, changed = self._without(self._state.logs, log_id)
        if changed:
            self._commit(logs=logs)
            logger.info(f"Deleted log {log_id}")
        return changed

    def get_log(self, log_id: str) -> Optional[LogEntry]:
        log = _find(self._state.logs, log_id)
        return log.model_copy(deep=True) if log else None

    # Log templates

    def create_template(self, data: LogTemplateCreate) -> str:
        template_id = self._new_id()
        template = LogTemplate(id=template_id, **data.model_dump(), created_at=self._now())
        self._commit(templates=[template, *self._state.templates])
        logger.info(f"Created template {template_id}: {template.name!r}")
        return template_id

    def update_template(self, template_id: str, patch: LogTemplatePatch) -> bool:
        changes = patch.changes()
        templates, changed = self._replace(
            self._state.templates,
            template_id,
            lambda template: template.model_copy(update=changes, deep=True),
        )
        if changed:
            self._commit(templates=templates)
        return changed

    def delete_template(self, template_id: str) -> bool:
        """Remove a template; entries that copied its items keep them."""
        templates, changed = self._without(self._state.templates, template_id)
        if changed:
            self._commit(templates=templates)
            logger.info(f"Deleted template {template_id}")
        return changed

    def get_template(self, template_id: str) -> Optional[LogTemplate]:
        template = _find(self._state.templates, template_id)
        return template.model_copy(deep=True) if template else None

    # Draft

    def save_draft(self, patch: LogEntryPatch) -> LogEntry:
        """
        Create the draft or merge ``patch`` into it.

        Returns:
            Copy of the resulting draft
        """
        now = self._now()
        changes = patch.changes()
        draft = self._state.draft_log

        if draft is None:
            draft = LogEntry(id=self._new_id(), created_at=now, updated_at=now, is_draft=True)
            draft = draft.model_copy(update=changes, deep=True)
        else:
            draft = self._touch(draft.model_copy(update={**changes, "is_draft": True}, deep=True))

        self._commit(draft_log=draft)
        logger.debug(f"Saved draft {draft.id}")
        return draft.model_copy(deep=True)

    def clear_draft(self) -> None:
        self._commit(draft_log=None)

    # Checklist items and attachments

    def _modify_entry(
        self,
        target: EditTarget,
        transform: Callable[[LogEntry], Optional[LogEntry]]
    ) -> bool:
        """
        Apply ``transform`` to the draft or a persisted entry.

        ``transform`` returns None when it has nothing to change; in that case
        (and when the target does not exist) nothing is committed.
        """
        if isinstance(target, DraftTarget):
            draft = self._state.draft_log
            updated = transform(draft) if draft else None
            if updated is None:
                return False
            self._commit(draft_log=self._touch(updated))
            return True

        entry = _find(self._state.logs, target.log_id)
        updated = transform(entry) if entry else None
        if updated is None:
            return False
        logs, _ = self._replace(self._state.logs, target.log_id, lambda _: self._touch(updated))
        self._commit(logs=logs)
        return True

    def toggle_checklist_item(self, target: EditTarget, item_id: str) -> bool:
        def transform(entry: LogEntry) -> Optional[LogEntry]:
            if _find(entry.checklist_items, item_id) is None:
                return None
            items = [
                item.model_copy(update={"checked": not item.checked}) if item.id == item_id else item
                for item in entry.checklist_items
            ]
            return entry.model_copy(update={"checklist_items": items})

        return self._modify_entry(target, transform)

    def add_checklist_item(self, target: EditTarget, item: ChecklistItemCreate) -> Optional[str]:
        """Append a checklist item; returns its ID, or None when the target is missing."""
        new_item = ChecklistItem(id=self._new_id(), **item.model_dump())

        def transform(entry: LogEntry) -> LogEntry:
            return entry.model_copy(update={"checklist_items": [*entry.checklist_items, new_item]})

        return new_item.id if self._modify_entry(target, transform) else None

    def remove_checklist_item(self, target: EditTarget, item_id: str) -> bool:
        def transform(entry: LogEntry) -> Optional[LogEntry]:
            items, changed = self._without(entry.checklist_items, item_id)
            return entry.model_copy(update={"checklist_items": items}) if changed else None

        return self._modify_entry(target, transform)

    def add_attachment(self, target: EditTarget, attachment: AttachmentCreate) -> Optional[str]:
        """Append attachment metadata; returns its ID, or None when the target is missing."""
        new_attachment = Attachment(id=self._new_id(), **attachment.model_dump())

        def transform(entry: LogEntry) -> LogEntry:
            return entry.model_copy(update={"attachments": [*entry.attachments, new_attachment]})

        return new_attachment.id if self._modify_entry(target, transform) else None

    def remove_attachment(self, target: EditTarget, attachment_id: str) -> bool:
        def transform(entry: LogEntry) -> Optional[LogEntry]:
            attachments, changed = self._without(entry.attachments, attachment_id)
            return entry.model_copy(update={"attachments": attachments}) if changed else None

        return self._modify_entry(target, transform)

    # Export templates

    def create_export_template(self, data: ExportTemplateCreate) -> str:
        template_id = self._new_id()
        template = ExportTemplate(id=template_id, **data.model_dump(), created_at=self._now())
        self._commit(export_templates=[template, *self._state.export_templates])
        logger.info(f"Created export template {template_id}: {template.name!r} ({template.format.value})")
        return template_id

    def update_export_template(self, template_id: str, patch: ExportTemplatePatch) -> bool:
        changes = patch.changes()
        templates, changed = self._replace(
            self._state.export_templates,
            template_id,
            lambda template: template.model_copy(update=changes),
        )
        if changed:
            self._commit(export_templates=templates)
        return changed

    def delete_export_template(self, template_id: str) -> bool:
        """Remove an export template; history rows referencing it are kept."""
        templates, changed = self._without(self._state.export_templates, template_id)
        if changed:
            self._commit(export_templates=templates)
            logger.info(f"Deleted export template {template_id}")
        return changed

    def get_export_template(self, template_id: str) -> Optional[ExportTemplate]:
        template = _find(self._state.export_templates, template_id)
        return template.model_copy(deep=True) if template else None

    # Export history

    def add_export_history(self, data: ExportHistoryCreate) -> str:
        history_id = self._new_id()
        history = ExportHistory(id=history_id, **data.model_dump(), created_at=self._now())
        self._commit(export_history=[history, *self._state.export_history])
        return history_id

    def delete_export_history(self, history_id: str) -> bool:
        history, changed = self._without(self._state.export_history, history_id)
        if changed:
            self._commit(export_history=history)
        return changed

    def get_export_history(self, history_id: str) -> Optional[ExportHistory]:
        history = _find(self._state.export_history, history_id)
        return history.model_copy(deep=True) if history else None
