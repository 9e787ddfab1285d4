"""
Unit tests for the entry editing workflow.
"""

import pytest

from logjournal.core.exceptions import NotFoundError, ValidationError
from logjournal.editor import LogEditor
from logjournal.store import DRAFT, PersistedTarget
from logjournal.store.schemas import ChecklistItem, LogEntryCreate, LogEntryPatch


class TestSubmitDraft:
    """Test promoting the draft to a saved entry."""

    def test_promotes_and_clears(self, store):
        """Test a valid draft becomes an entry and the draft is cleared."""
        store.save_draft(LogEntryPatch(title="초안", content="본문"))

        log_id = LogEditor(store).submit(DRAFT)

        entry = store.get_log(log_id)
        assert entry.title == "초안"
        assert entry.content == "본문"
        assert entry.is_draft is False
        assert store.draft is None

    def test_latest_form_values_win(self, store):
        """Test values passed to submit override the saved draft."""
        store.save_draft(LogEntryPatch(title="old"))
        log_id = LogEditor(store).submit(DRAFT, LogEntryPatch(title="new"))
        assert store.get_log(log_id).title == "new"

    def test_submit_without_draft(self, store):
        """Test submitting form values alone works."""
        log_id = LogEditor(store).submit(DRAFT, LogEntryPatch(title="제목"))
        assert store.get_log(log_id).title == "제목"

    def test_required_item_blocks_submit(self, store):
        """Test a required unchecked item prevents saving and keeps the draft."""
        store.save_draft(LogEntryPatch(
            title="초안",
            checklist_items=[ChecklistItem(id="a", text="필수", required=True)],
        ))
        before = store.snapshot()

        with pytest.raises(ValidationError):
            LogEditor(store).submit(DRAFT)

        assert store.snapshot() == before

    def test_blank_title_blocks_submit(self, store):
        """Test a missing title prevents saving."""
        with pytest.raises(ValidationError):
            LogEditor(store).submit(DRAFT, LogEntryPatch(content="본문"))
        assert store.logs == []


class TestSubmitPersisted:
    """Test editing a saved entry."""

    def test_updates_entry(self, store, clock):
        """Test the patch is merged into the saved entry."""
        log_id = store.create_log(LogEntryCreate(title="제목", content="a"))
        clock.advance(minutes=1)

        assert LogEditor(store).submit(PersistedTarget(log_id), LogEntryPatch(content="b")) == log_id

        entry = store.get_log(log_id)
        assert entry.content == "b"
        assert entry.updated_at == clock.now

    def test_validation_uses_merged_values(self, store):
        """Test clearing the title through the patch is rejected."""
        log_id = store.create_log(LogEntryCreate(title="제목"))
        with pytest.raises(ValidationError):
            LogEditor(store).submit(PersistedTarget(log_id), LogEntryPatch(title=" "))
        assert store.get_log(log_id).title == "제목"

    def test_missing_entry(self, store):
        """Test editing a deleted entry raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            LogEditor(store).submit(PersistedTarget("gone"), LogEntryPatch(title="x"))
        assert exc_info.value.entity_id == "gone"
