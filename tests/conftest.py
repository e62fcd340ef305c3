import os
from datetime import datetime
from pathlib import Path

import pytest

from exif_sorter.config import SortLayout
from exif_sorter.exceptions import MetadataExtractionError


class FakeReader:
    """Capture times keyed by file name; stands in for exiftool."""
    name = "fake"

    def __init__(self, dates=None, available=True, failing=()):
        self.dates = dict(dates or {})
        self.available = available
        self.failing = set(failing)
        self.calls = []

    def is_available(self):
        return self.available

    def read(self, path: Path):
        self.calls.append(path.name)
        if path.name in self.failing:
            raise MetadataExtractionError("corrupt header")
        return self.dates.get(path.name)


@pytest.fixture
def layout(tmp_path):
    """A root with an empty Source directory."""
    lay = SortLayout.from_root(tmp_path)
    lay.source.mkdir()
    return lay


@pytest.fixture
def make_image(layout):
    """Writes a file under Source, optionally with a given modification time."""
    def _make(name: str, content: bytes = b"imagedata", mtime: datetime = None, subdir: str = None) -> Path:
        folder = layout.source / subdir if subdir else layout.source
        folder.mkdir(parents=True, exist_ok=True)
        p = folder / name
        p.write_bytes(content)
        if mtime is not None:
            ts = mtime.timestamp()
            os.utime(p, (ts, ts))
        return p
    return _make


@pytest.fixture
def fake_reader():
    """The FakeReader class, so tests can build one with their own dates."""
    return FakeReader
