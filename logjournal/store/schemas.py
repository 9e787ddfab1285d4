"""
Schemas for the journal entity store.

Entities are pydantic models with snake_case attributes and camelCase
aliases, so the persisted snapshot keeps the field names the stored blob
has always used (``checklistItems``, ``createdAt``...).
"""

import copy
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def to_local_time(value: datetime) -> datetime:
    """Convert an offset-aware timestamp to naive local time; naive ones pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


class CamelModel(BaseModel):
    """
    Base model serialized with camelCase keys.

    Timestamps are held as naive local time. Values carrying an offset, such
    as ``2024-01-01T00:00:00.000Z``, are converted when validated so they
    compare with the store clock.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("*", mode="after")
    @classmethod
    def _local_timestamps(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return to_local_time(value)
        return value


class ExportFormat(str, Enum):
    """Document formats an export template can target."""
    PDF = "pdf"
    DOCX = "docx"
    XLSX = "xlsx"
    TEXT = "text"


class ChecklistItem(CamelModel):
    """Single checklist line owned by a log entry or a log template."""

    id: str = Field(description="Item ID")
    text: str = Field(description="Item text")
    checked: bool = Field(default=False, description="Whether the item is checked")
    required: bool = Field(default=False, description="Whether the item must be checked before saving")


class Attachment(CamelModel):
    """Attachment metadata; the file content itself lives elsewhere."""

    id: str = Field(description="Attachment ID")
    name: str = Field(description="File name")
    mime_type: str = Field(default="application/octet-stream", description="MIME type")
    url: str = Field(default="", description="Reference to the file content")
    size_bytes: int = Field(default=0, ge=0, description="File size in bytes")


class LogTemplate(CamelModel):
    """Reusable named checklist applied to new entries."""

    id: str = Field(description="Template ID")
    name: str = Field(description="Template name")
    description: str = Field(default="", description="Template description")
    checklist_items: List[ChecklistItem] = Field(default_factory=list, description="Checklist items")
    created_at: datetime = Field(description="Creation timestamp")


class LogEntry(CamelModel):
    """Journal entry, persisted or held as the draft."""

    id: str = Field(description="Entry ID")
    title: str = Field(default="", description="Entry title")
    content: str = Field(default="", description="Entry body")
    checklist_items: List[ChecklistItem] = Field(default_factory=list, description="Checklist items")
    template_id: Optional[str] = Field(default=None, description="Log template the entry was built from")
    attachments: List[Attachment] = Field(default_factory=list, description="Attachments")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last modification timestamp")
    is_draft: bool = Field(default=False, description="Whether this is the unsaved draft")

    @property
    def is_modified(self) -> bool:
        """Whether the entry changed after it was created."""
        return self.updated_at > self.created_at


class ExportTemplate(CamelModel):
    """Configuration describing how entries are rendered into a document."""

    id: str = Field(description="Template ID")
    name: str = Field(description="Template name")
    format: ExportFormat = Field(description="Target document format")
    include_header: bool = Field(default=False, description="Render the header text")
    header_text: Optional[str] = Field(default=None, description="Header text")
    include_footer: bool = Field(default=False, description="Render the footer text")
    footer_text: Optional[str] = Field(default=None, description="Footer text")
    include_checklist: bool = Field(default=False, description="Render checklist details")
    include_attachments: bool = Field(default=False, description="Render attachment details")
    created_at: datetime = Field(description="Creation timestamp")


class ExportHistory(CamelModel):
    """Audit record of a completed export."""

    id: str = Field(description="History ID")
    log_ids: List[str] = Field(default_factory=list, description="Exported entry IDs")
    template_id: str = Field(description="Export template used")
    format: ExportFormat = Field(description="Rendered format")
    file_name: str = Field(description="Delivered file name")
    created_at: datetime = Field(description="Export timestamp")
    url: Optional[str] = Field(default=None, description="Where the file was delivered")


class StoreSnapshot(CamelModel):
    """Complete store state as persisted."""

    logs: List[LogEntry] = Field(default_factory=list)
    templates: List[LogTemplate] = Field(default_factory=list)
    draft_log: Optional[LogEntry] = Field(default=None)
    export_templates: List[ExportTemplate] = Field(default_factory=list)
    export_history: List[ExportHistory] = Field(default_factory=list)


# Creation inputs

class ChecklistItemCreate(CamelModel):
    """New checklist item; the store assigns the ID."""

    text: str = Field(description="Item text")
    checked: bool = Field(default=False)
    required: bool = Field(default=False)


class AttachmentCreate(CamelModel):
    """New attachment metadata; the store assigns the ID."""

    name: str = Field(description="File name")
    mime_type: str = Field(default="application/octet-stream")
    url: str = Field(default="")
    size_bytes: int = Field(default=0, ge=0)


class LogEntryCreate(CamelModel):
    """Fields supplied when creating a log entry."""

    title: str = Field(default="")
    content: str = Field(default="")
    checklist_items: List[ChecklistItem] = Field(default_factory=list)
    template_id: Optional[str] = Field(default=None)
    attachments: List[Attachment] = Field(default_factory=list)


class LogTemplateCreate(CamelModel):
    """Fields supplied when creating a log template."""

    name: str
    description: str = Field(default="")
    checklist_items: List[ChecklistItem] = Field(default_factory=list)


class ExportTemplateCreate(CamelModel):
    """Fields supplied when creating an export template."""

    name: str
    format: ExportFormat
    include_header: bool = Field(default=False)
    header_text: Optional[str] = Field(default=None)
    include_footer: bool = Field(default=False)
    footer_text: Optional[str] = Field(default=None)
    include_checklist: bool = Field(default=False)
    include_attachments: bool = Field(default=False)


class ExportHistoryCreate(CamelModel):
    """Fields supplied when recording an export."""

    log_ids: List[str] = Field(default_factory=list)
    template_id: str
    format: ExportFormat
    file_name: str
    url: Optional[str] = Field(default=None)


# Patches

class Patch(CamelModel):
    """
    Partial update naming exactly the mutable fields of an entity.

    Only fields explicitly set are merged. Setting a non-nullable field to
    None is ignored; nullable fields listed in ``nullable_fields`` are cleared.
    """

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    def changes(self) -> Dict[str, Any]:
        """Return the field values to merge into the target record."""
        result = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None and name not in self.nullable_fields:
                continue
            result[name] = copy.deepcopy(value)
        return result

    def is_empty(self) -> bool:
        return not self.changes()


class LogEntryPatch(Patch):
    """Mutable fields of a log entry (also used for the draft)."""

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"template_id"})

    title: Optional[str] = None
    content: Optional[str] = None
    checklist_items: Optional[List[ChecklistItem]] = None
    template_id: Optional[str] = None
    attachments: Optional[List[Attachment]] = None

    def merged(self, other: "LogEntryPatch") -> "LogEntryPatch":
        """Combine two patches; fields set on ``other`` win."""
        values = {name: getattr(self, name) for name in self.model_fields_set}
        values.update({name: getattr(other, name) for name in other.model_fields_set})
        return LogEntryPatch(**values)


class LogTemplatePatch(Patch):
    """Mutable fields of a log template."""

    name: Optional[str] = None
    description: Optional[str] = None
    checklist_items: Optional[List[ChecklistItem]] = None


class ExportTemplatePatch(Patch):
    """Mutable fields of an export template."""

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"header_text", "footer_text"})

    name: Optional[str] = None
    format: Optional[ExportFormat] = None
    include_header: Optional[bool] = None
    header_text: Optional[str] = None
    include_footer: Optional[bool] = None
    footer_text: Optional[str] = None
    include_checklist: Optional[bool] = None
    include_attachments: Optional[bool] = None


# Edit targets

@dataclass(frozen=True)
class DraftTarget:
    """The singleton in-progress draft."""

    def __str__(self) -> str:
        return "draft"


@dataclass(frozen=True)
class PersistedTarget:
    """A saved log entry, addressed by ID."""

    log_id: str

    def __str__(self) -> str:
        return self.log_id


EditTarget = Union[DraftTarget, PersistedTarget]

DRAFT = DraftTarget()
