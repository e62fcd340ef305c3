from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, NamedTuple, Optional

from . import config


@dataclass(frozen=True)
class ImageFile:
    """
    An input file found during enumeration.
    """
    path: Path
    base_name: str          # filename without its last extension
    extension: str          # text after the last dot, case preserved

    @classmethod
    def from_path(cls, path: Path) -> "ImageFile":
        name = path.name
        if '.' in name.lstrip('.'):
            base, ext = name.rsplit('.', 1)
        else:
            base, ext = name, ''
        return cls(path=path, base_name=base, extension=ext)

    @property
    def name(self) -> str:
        return self.path.name


class Bucket(NamedTuple):
    year: int
    month: int

    def relative_path(self) -> Path:
        return Path(config.FOLDER_PATTERN.format(year=self.year, month=self.month))


@dataclass(frozen=True)
class DuplicateCheck:
    """Outcome of a duplicate lookup: FIRST, or a duplicate of an earlier file."""
    original_base_name: Optional[str] = None

    @property
    def is_first(self) -> bool:
        return self.original_base_name is None


FIRST = DuplicateCheck()


class PlacementKind(Enum):
    PRIMARY = "primary"
    DUPLICATE = "duplicate"
    NO_METADATA = "no_metadata"


@dataclass(frozen=True)
class PlacementResult:
    source: Path
    directory: Path
    filename: str
    kind: PlacementKind
    timestamp: datetime     # capture time, or mtime for NO_METADATA
    copied: bool = True     # False when the target already existed or dry run

    @property
    def destination(self) -> Path:
        return self.directory / self.filename


@dataclass(frozen=True)
class FailedFile:
    source: Path
    reason: str


@dataclass
class RunSummary:
    results: List[PlacementResult] = field(default_factory=list)
    failures: List[FailedFile] = field(default_factory=list)

    def count(self, kind: PlacementKind) -> int:
        return sum(1 for r in self.results if r.kind is kind)

    @property
    def total(self) -> int:
        return len(self.results) + len(self.failures)

    def summary_line(self) -> str:
        return (
            f"Sorting completed. {self.total} files processed: "
            f"{self.count(PlacementKind.PRIMARY)} dated, "
            f"{self.count(PlacementKind.DUPLICATE)} duplicates, "
            f"{self.count(PlacementKind.NO_METADATA)} without EXIF, "
            f"{len(self.failures)} failed."
        )
