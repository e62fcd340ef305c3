from datetime import datetime
from pathlib import Path

from ..exceptions import MetadataExtractionError


class FileTimestampReader:
    """Filesystem modification date, used when a file has no capture metadata."""

    def read(self, path: Path) -> datetime:
        try:
            ts = path.stat().st_mtime
        except OSError as e:
            raise MetadataExtractionError(f"cannot stat file: {e}") from e
        return datetime.fromtimestamp(ts)
