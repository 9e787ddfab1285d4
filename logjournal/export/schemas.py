"""
Schemas for the export pipeline.
"""

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from ..store.schemas import CamelModel, ExportFormat, ExportTemplate, LogEntry


class ExportPayload(BaseModel):
    """Rendered document held in memory."""

    format: ExportFormat = Field(description="Rendered format")
    content: Union[bytes, str] = Field(description="Document bytes, or text for the text format")
    media_type: str = Field(description="MIME type of the document")
    extension: str = Field(description="File extension without the dot")
    page_count: Optional[int] = Field(default=None, description="Number of pages, for paged formats")

    def as_bytes(self) -> bytes:
        """Document content as bytes (text is UTF-8 encoded)."""
        if isinstance(self.content, str):
            return self.content.encode("utf-8")
        return self.content

    @property
    def size(self) -> int:
        return len(self.as_bytes())

    def file_name(self, stem: str) -> str:
        """File name for this payload, e.g. ``report.pdf``."""
        return f"{stem}.{self.extension}"


class ExportResult(BaseModel):
    """Outcome of an export or re-download."""

    success: bool = Field(description="Whether the document was rendered and delivered")
    error_message: Optional[str] = Field(default=None, description="Error message if failed")

    format: Optional[ExportFormat] = Field(default=None, description="Rendered format")
    file_name: Optional[str] = Field(default=None, description="Delivered file name")
    location: Optional[str] = Field(default=None, description="Where the file was delivered")
    log_count: int = Field(default=0, description="Number of exported entries")
    history_id: Optional[str] = Field(default=None, description="Export history row, if recorded")
    payload: Optional[ExportPayload] = Field(default=None, description="Rendered document")

    created_at: datetime = Field(default_factory=datetime.now, description="Completion timestamp")


class ExportRequest(CamelModel):
    """Body of the HTTP PDF export request."""

    logs: List[LogEntry] = Field(default_factory=list)
    template: ExportTemplate
    file_name: str = Field(default="")
