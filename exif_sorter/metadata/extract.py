import json
import logging
import shutil
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

import exifread

from .. import config
from ..exceptions import MetadataExtractionError


class MetadataReader(Protocol):
    """
    Anything that can answer "when was this file captured?".

    `read` returns None when the file carries no usable capture time and
    raises MetadataExtractionError when the file could not be inspected.
    """

    name: str

    def is_available(self) -> bool: ...

    def read(self, path: Path) -> Optional[datetime]: ...


def parse_exif_datetime(value: str) -> Optional[datetime]:
    """
    Parses an EXIF date string ("YYYY:MM:DD HH:MM:SS", possibly followed by
    sub-seconds or a UTC offset) into a naive datetime with whole seconds.
    Placeholder values such as "0000:00:00 00:00:00" yield None.
    """
    if not value:
        return None
    clean = str(value).strip()
    if len(clean) < 19:
        return None
    try:
        return datetime.strptime(clean[:19].replace(':', '-', 2), "%Y-%m-%d %H:%M:%S")
    except ValueError:
        return None


class ExifToolReader:
    """
    Wraps the 'exiftool' command line utility.
    Must be installed and on the system PATH.
    """

    name = "exiftool"

    def __init__(self, binary: str = config.EXIFTOOL_BINARY, timeout: float = config.EXIFTOOL_TIMEOUT):
        self.binary = binary
        self.timeout = timeout

    def is_available(self) -> bool:
        return shutil.which(self.binary) is not None

    def read(self, path: Path) -> Optional[datetime]:
        # -j = JSON output, one object per file
        cmd = [self.binary, "-j", f"-{config.EXIFTOOL_DATE_TAG}", str(path)]
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, encoding="utf-8",
                                  errors="replace", timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise MetadataExtractionError(f"exiftool timed out after {self.timeout}s") from e
        except OSError as e:
            raise MetadataExtractionError(f"exiftool could not be run: {e}") from e

        if not proc.stdout.strip():
            raise MetadataExtractionError(proc.stderr.strip() or f"exiftool exited with {proc.returncode}")

        try:
            data_list = json.loads(proc.stdout)
        except ValueError as e:
            raise MetadataExtractionError(f"unreadable exiftool output: {e}") from e

        if not data_list:
            return None

        tags = data_list[0]
        if tags.get("Error"):
            raise MetadataExtractionError(str(tags["Error"]))

        return parse_exif_datetime(str(tags.get(config.EXIFTOOL_DATE_TAG, "")))


class ExifReadReader:
    """
    Reads capture dates with 'exifread' (fast, Python-native, no external tool).
    """

    name = "exifread"

    def is_available(self) -> bool:
        return True

    def read(self, path: Path) -> Optional[datetime]:
        try:
            with path.open('rb') as f:
                # details=False speeds up processing significantly
                tags = exifread.process_file(f, details=False)
        except Exception as e:
            raise MetadataExtractionError(f"ExifRead failed: {e}") from e

        for tag in config.DATE_TAGS:
            if tag in tags:
                dt = parse_exif_datetime(str(tags[tag]))
                if dt:
                    return dt
        return None


def create_reader(name: str = config.DEFAULT_READER, timeout: float = config.EXIFTOOL_TIMEOUT) -> MetadataReader:
    if name == "exiftool":
        return ExifToolReader(timeout=timeout)
    if name == "exifread":
        return ExifReadReader()
    raise ValueError(f"Unknown metadata reader: {name!r} (choose from {', '.join(config.READERS)})")


def read_capture_time(reader: MetadataReader, path: Path) -> Optional[datetime]:
    """
    Reads the capture time, treating any extraction failure as absence.
    """
    try:
        return reader.read(path)
    except MetadataExtractionError as e:
        logging.warning(f"Metadata read failed for {path}: {e}. Falling back to file date.")
        return None
