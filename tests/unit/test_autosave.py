"""
Unit tests for draft auto-save.
"""

import asyncio

from logjournal.editor import DraftAutoSaver
from logjournal.store.schemas import LogEntryPatch


DELAY = 0.05


class TestDraftAutoSaver:
    """Test debounced draft saving."""

    def test_saves_after_quiet_period(self, store):
        """Test one save happens once edits stop."""
        saved = []

        async def scenario():
            saver = DraftAutoSaver(store, delay_seconds=DELAY, on_saved=saved.append)
            saver.schedule(LogEntryPatch(title="a"))
            assert saver.pending
            assert store.draft is None
            await asyncio.sleep(DELAY * 4)
            assert not saver.pending

        asyncio.run(scenario())

        assert store.draft.title == "a"
        assert len(saved) == 1

    def test_rapid_edits_coalesce(self, store):
        """Test edits inside the quiet period produce a single merged save."""
        saved = []

        async def scenario():
            saver = DraftAutoSaver(store, delay_seconds=DELAY, on_saved=saved.append)
            saver.schedule(LogEntryPatch(title="a"))
            await asyncio.sleep(DELAY / 5)
            saver.schedule(LogEntryPatch(content="b"))
            await asyncio.sleep(DELAY / 5)
            saver.schedule(LogEntryPatch(title="c"))
            await asyncio.sleep(DELAY * 4)

        asyncio.run(scenario())

        assert len(saved) == 1
        assert store.draft.title == "c"
        assert store.draft.content == "b"

    def test_cancel_drops_pending_edits(self, store):
        """Test leaving the editor before the timer fires saves nothing."""
        async def scenario():
            saver = DraftAutoSaver(store, delay_seconds=DELAY)
            saver.schedule(LogEntryPatch(title="a"))
            saver.cancel()
            await asyncio.sleep(DELAY * 3)

        asyncio.run(scenario())

        assert store.draft is None

    def test_flush_saves_immediately(self, store):
        """Test flushing writes pending edits without waiting."""
        async def scenario():
            saver = DraftAutoSaver(store, delay_seconds=10)
            saver.schedule(LogEntryPatch(title="now"))
            draft = saver.flush()
            assert draft.title == "now"
            assert not saver.pending
            assert saver.flush() is None

        asyncio.run(scenario())

        assert store.draft.title == "now"
