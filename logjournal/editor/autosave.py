"""
Debounced draft auto-save.

Edits are accumulated and written to the store's draft once no new edit has
arrived for the configured quiet period. The timer lives on the asyncio
event loop, so saves run on the loop thread like any other mutation.
"""

import asyncio
from typing import Callable, Optional

from ..core.logging import get_logger
from ..store.schemas import LogEntry, LogEntryPatch
from ..store.service import LogStore


logger = get_logger(__name__)


class DraftAutoSaver:
    """Saves the draft after a quiet period following the last edit."""

    def __init__(
        self,
        store: LogStore,
        delay_seconds: float = 5.0,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        on_saved: Optional[Callable[[LogEntry], None]] = None
    ) -> None:
        self.store = store
        self.delay_seconds = delay_seconds
        self.on_saved = on_saved
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending: Optional[LogEntryPatch] = None

    @property
    def pending(self) -> bool:
        """Whether a save is scheduled."""
        return self._handle is not None

    def schedule(self, patch: LogEntryPatch) -> None:
        """
        Record an edit and restart the quiet-period timer.

        Must be called from a running event loop unless one was passed in.
        """
        self._pending = self._pending.merged(patch) if self._pending else patch

        if self._handle is not None:
            self._handle.cancel()

        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay_seconds, self.flush)

    def flush(self) -> Optional[LogEntry]:
        """
        Save the accumulated edits now.

        Returns:
            The saved draft, or None when there was nothing to save
        """
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

        patch, self._pending = self._pending, None
        if patch is None or patch.is_empty():
            return None

        draft = self.store.save_draft(patch)
        logger.info("Draft auto-saved")
        if self.on_saved:
            self.on_saved(draft)
        return draft

    def cancel(self) -> None:
        """Drop the scheduled save and the edits accumulated for it."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._pending = None
