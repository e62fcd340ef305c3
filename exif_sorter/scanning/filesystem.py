import os
import logging
from pathlib import Path
from typing import Iterator, Optional, Set

from .. import config
from ..models import ImageFile


class SourceScanner:
    def __init__(self, extensions: Optional[Set[str]] = None):
        self.extensions = {e.lower() for e in (extensions or config.IMAGE_EXTS)}

    def scan(self, root: Path) -> Iterator[ImageFile]:
        """
        Yields an ImageFile for every matching file under root, in a stable
        order: entries sorted by name (case-insensitive), the files of a
        directory before those of its subdirectories.
        """
        for path in self._iter_files(root):
            if self.matches(path):
                yield ImageFile.from_path(path)

    def matches(self, path: Path) -> bool:
        return path.suffix.lower() in self.extensions

    def _iter_files(self, root: Path) -> Iterator[Path]:
        """Depth-first walker using os.scandir for speed."""
        stack = [root]
        while stack:
            current = stack.pop()

            try:
                with os.scandir(current) as it:
                    entries = list(it)
            except OSError as e:
                logging.warning(f"Cannot list {current}: {e}")
                continue

            # Sort for stable traversal order
            entries.sort(key=lambda e: (e.name.lower(), e.name))

            dirs = []
            files = []
            for e in entries:
                if e.is_dir(follow_symlinks=False):
                    dirs.append(Path(e.path))
                elif e.is_file(follow_symlinks=False):
                    files.append(Path(e.path))

            # Push dirs to stack (reversed so we process A before Z)
            for d in reversed(dirs):
                stack.append(d)

            for f in files:
                yield f
