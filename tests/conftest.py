"""
Pytest configuration and fixtures for LogJournal tests.
"""

import itertools
import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Generator
import tempfile
import pytest

from logjournal.settings import AppSettings, LoggingSettings
from logjournal.store import LogStore, MemoryBlobStore
from logjournal.store.schemas import (
    Attachment, ChecklistItem, ExportFormat, ExportTemplate, LogEntry
)


class FakeClock:
    """Deterministic clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def restore_environ() -> Generator[None, None, None]:
    """Undo environment variables exported by python-dotenv during a test."""
    saved = dict(os.environ)
    yield
    os.environ.clear()
    os.environ.update(saved)


@pytest.fixture
def test_settings(temp_dir: Path) -> AppSettings:
    """Create test settings writing only below the temporary directory."""
    return AppSettings(
        name="TestLogJournal",
        version="0.1.0-test",
        debug=True,
        logging=LoggingSettings(level="DEBUG", file=None)
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 9, 0, 0))


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Sequential, predictable record IDs."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def blob_store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def store(blob_store: MemoryBlobStore, clock: FakeClock, id_factory) -> LogStore:
    """Empty store backed by memory."""
    return LogStore(blob_store, clock=clock, id_factory=id_factory)


@pytest.fixture
def sample_entry() -> LogEntry:
    """A saved entry with a checklist and one attachment."""
    return LogEntry(
        id="log-1",
        title="설비 점검",
        content="오전 설비 점검을 완료했습니다.",
        checklist_items=[
            ChecklistItem(id="c1", text="전원 확인", checked=True, required=True),
            ChecklistItem(id="c2", text="청소", checked=False),
        ],
        attachments=[
            Attachment(id="a1", name="photo.jpg", mime_type="image/jpeg", size_bytes=2048),
        ],
        created_at=datetime(2024, 1, 1, 15, 5),
        updated_at=datetime(2024, 1, 1, 15, 5),
    )


@pytest.fixture
def export_template() -> ExportTemplate:
    """Export template with every optional section enabled."""
    return ExportTemplate(
        id="tpl-1",
        name="주간 보고",
        format=ExportFormat.PDF,
        include_header=True,
        header_text="헤더",
        include_footer=True,
        footer_text="푸터",
        include_checklist=True,
        include_attachments=True,
        created_at=datetime(2024, 1, 1),
    )


@pytest.fixture
def plain_template() -> ExportTemplate:
    """Export template with every optional section disabled."""
    return ExportTemplate(
        id="tpl-2",
        name="R",
        format=ExportFormat.TEXT,
        created_at=datetime(2024, 1, 1),
    )


@pytest.fixture
def sample_env_file(temp_dir: Path) -> Path:
    """Create a sample .env file for testing."""
    env_file = temp_dir / ".env"
    env_content = """
STORAGE_NAMESPACE=env-storage
EXPORT_SUMMARY_MAX_CHARS=50
LOG_LEVEL=DEBUG
"""
    env_file.write_text(env_content.strip())
    return env_file


@pytest.fixture
def sample_yaml_config(temp_dir: Path) -> Path:
    """Create a sample YAML config file for testing."""
    yaml_file = temp_dir / "settings.yaml"
    yaml_content = """
app:
  name: "TestLogJournal"
  version: "0.1.0-test"
  debug: true

storage:
  data_dir: "test-data"
  namespace: "yaml-storage"

export:
  output_dir: "test-exports"
  cid_font: "HYGothic-Medium"

autosave:
  delay_seconds: 2.5

api:
  port: 9000

logging:
  level: "WARNING"
  file: "test.log"
"""
    yaml_file.write_text(yaml_content.strip())
    return yaml_file
