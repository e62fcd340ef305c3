import logging
import os
import shutil
import tempfile
from pathlib import Path

from .. import config
from ..exceptions import DirectoryCreateError, FileOperationError


class FileMover:
    """
    Directory creation and copying for the placement engine.
    In dry-run mode nothing on disk is touched.
    """

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def ensure_dir(self, path: Path) -> bool:
        """
        Creates `path` if absent. Returns True if this call created it.
        Safe to call concurrently for the same path.
        """
        if path.is_dir():
            return False
        if self.dry_run:
            logging.info(f"[DRY RUN] Create directory: {path}")
            return False
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateError(f"cannot create {path}: {e}") from e
        logging.info(f"Created directory: {path}")
        return True

    def copy(self, src: Path, dest: Path) -> bool:
        """
        Copies `src` to `dest` without ever overwriting an existing file.
        Returns False when `dest` already exists (or in dry-run mode).

        The data is written to a temporary file next to `dest` and renamed
        into place, so an interrupted copy never leaves a half-written target.
        """
        if dest.exists():
            logging.info(f"Skipped existing: {src} -> {dest}")
            return False
        if self.dry_run:
            logging.info(f"[DRY RUN] Copy {src} -> {dest}")
            return False

        try:
            fd, tmp_name = tempfile.mkstemp(dir=dest.parent, prefix=f".{dest.name}.", suffix=config.PARTIAL_SUFFIX)
        except OSError as e:
            raise FileOperationError(f"cannot write to {dest.parent}: {e}") from e
        os.close(fd)
        tmp = Path(tmp_name)

        try:
            shutil.copy2(src, tmp)
            os.replace(tmp, dest)
        except BaseException as e:
            tmp.unlink(missing_ok=True)
            if isinstance(e, OSError):
                raise FileOperationError(f"copy {src} -> {dest} failed: {e}") from e
            raise
        return True
