"""
Custom exception hierarchy for the EXIF sorter.

Only PrereqMissingError and SourceMissingError abort a run; every other
error is scoped to the file being processed.
"""


class ExifSorterError(Exception):
    """Base exception for all EXIF sorter errors."""
    pass


class PrereqMissingError(ExifSorterError):
    """Raised when the metadata extraction tool is not installed."""
    pass


class SourceMissingError(ExifSorterError):
    """Raised when the Source directory does not exist."""
    pass


class DirectoryCreateError(ExifSorterError):
    """Raised when a destination directory cannot be created."""
    pass


class MetadataExtractionError(ExifSorterError):
    """Raised when metadata or file timestamps cannot be read from a file."""
    pass


class FileOperationError(ExifSorterError):
    """Raised when a file copy fails."""
    pass


class NameGenerationError(ExifSorterError):
    """Raised when the duplicates directory cannot be probed for free names."""
    pass
