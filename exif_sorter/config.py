"""
Configuration constants for the EXIF sorter.
"""
from dataclasses import dataclass
from pathlib import Path

# --- Directory Layout ---
# All four directories are resolved relative to the invocation root.
SOURCE_DIRNAME = "Source"
DEST_DIRNAME = "Dest"
DUPLICATES_DIRNAME = "Duplicates"
NO_EXIF_DIRNAME = "No_Exif"

# --- File Type Definitions ---
# Matched case-insensitively against the file suffix
IMAGE_EXTS = {'.raw', '.jpeg', '.jpg'}

# --- Metadata Parsing ---
# exifread tag names, in priority order
DATE_TAGS = [
    'EXIF DateTimeOriginal',
    'EXIF DateTimeDigitized',
    'Image DateTime',
]

# exiftool tag queried for the capture time
EXIFTOOL_BINARY = "exiftool"
EXIFTOOL_DATE_TAG = "DateTimeOriginal"
EXIFTOOL_TIMEOUT = 30  # seconds per file

DEFAULT_READER = "exiftool"
READERS = ("exiftool", "exifread")

# --- Organization ---
FOLDER_PATTERN = "{year}/{month:02d}"
DUPLICATE_NAME_PATTERN = "{base}_{counter:02d}.{ext}"

# Suffix for in-flight copies; renamed into place once complete
PARTIAL_SUFFIX = ".part"


@dataclass(frozen=True)
class SortLayout:
    """The input directory and the three output roots of one run."""
    source: Path
    dest: Path
    duplicates: Path
    no_exif: Path

    @classmethod
    def from_root(cls, root: Path) -> "SortLayout":
        return cls(
            source=root / SOURCE_DIRNAME,
            dest=root / DEST_DIRNAME,
            duplicates=root / DUPLICATES_DIRNAME,
            no_exif=root / NO_EXIF_DIRNAME,
        )

    @property
    def output_roots(self) -> tuple[Path, Path, Path]:
        return (self.dest, self.duplicates, self.no_exif)
