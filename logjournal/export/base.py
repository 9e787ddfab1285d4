"""
Renderer contract shared by every export format.
"""

from abc import ABC, abstractmethod
from typing import ClassVar, Optional, Sequence, Union

from ..store.schemas import ExportFormat, ExportTemplate, LogEntry
from .formatting import EXTENSIONS, MEDIA_TYPES
from .schemas import ExportPayload


class ExportRenderer(ABC):
    """Renders a list of entries into one document format."""

    format: ClassVar[ExportFormat]

    @property
    def media_type(self) -> str:
        return MEDIA_TYPES[self.format]

    @property
    def extension(self) -> str:
        return EXTENSIONS[self.format]

    @abstractmethod
    def render(self, entries: Sequence[LogEntry], template: ExportTemplate) -> ExportPayload:
        """
        Render ``entries`` using the sections enabled on ``template``.

        Raises:
            ExportFailedError: If the encoder or one of its assets fails
        """

    def _payload(self, content: Union[bytes, str], page_count: Optional[int] = None) -> ExportPayload:
        return ExportPayload(
            format=self.format,
            content=content,
            media_type=self.media_type,
            extension=self.extension,
            page_count=page_count,
        )
