"""
Delivery of rendered documents to their destination.
"""

from pathlib import Path
from typing import Callable, Union

from ..core.exceptions import StorageError
from ..core.logging import get_logger
from ..store.schemas import ExportFormat
from .formatting import MEDIA_TYPES
from .schemas import ExportPayload


logger = get_logger(__name__)

# (payload, file name) -> location of the delivered file
Deliver = Callable[[ExportPayload, str], str]


def media_type_for(fmt: Union[ExportFormat, str]) -> str:
    """MIME type used when handing a document of ``fmt`` to a client."""
    return MEDIA_TYPES[ExportFormat(fmt)]


class LocalFileDelivery:
    """Writes documents into a local directory and returns their ``file://`` URI."""

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    def __call__(self, payload: ExportPayload, file_name: str) -> str:
        # Only the final path component is honoured
        target = self.output_dir / Path(file_name).name
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(payload.as_bytes())
        except OSError as e:
            raise StorageError(f"Failed to write {target}: {e}", key=file_name)

        logger.info(f"Delivered {payload.size} bytes to {target}")
        return target.resolve().as_uri()
