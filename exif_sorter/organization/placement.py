import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from functools import partial
from typing import Callable, Iterable, List, Optional

from tqdm import tqdm

from ..config import SortLayout
from ..exceptions import ExifSorterError
from ..metadata.extract import MetadataReader, read_capture_time
from ..metadata.fallback import FileTimestampReader
from ..models import FailedFile, ImageFile, PlacementKind, PlacementResult, RunSummary
from .bucketing import bucket_for
from .duplicates import DuplicateIndex
from .mover import FileMover
from .naming import UniqueNameGenerator


class PlacementEngine:
    """
    Decides, for each image, whether it is a dated original, a duplicate
    capture or an undated file, and copies it to the matching tree:

        Dest/YYYY/MM/<name>                  first file seen for a capture time
        Duplicates/YYYY/MM/<first>_NN.<ext>  later files with the same capture time
        No_Exif/YYYY/MM/<name>               no capture time; bucketed by mtime

    "First" means first in the order `run` is given the files.
    """

    def __init__(self,
                 layout: SortLayout,
                 reader: MetadataReader,
                 fallback_reader: Optional[FileTimestampReader] = None,
                 mover: Optional[FileMover] = None,
                 names: Optional[UniqueNameGenerator] = None,
                 index: Optional[DuplicateIndex] = None):
        self.layout = layout
        self.reader = reader
        self.fallback_reader = fallback_reader or FileTimestampReader()
        self.mover = mover or FileMover()
        self.names = names or UniqueNameGenerator()
        self.index = index or DuplicateIndex()

    def place(self, image: ImageFile) -> PlacementResult:
        """Reads the capture time of `image` and places it."""
        return self.place_with_timestamp(image, self._read(image))

    def place_with_timestamp(self, image: ImageFile, captured: Optional[datetime]) -> PlacementResult:
        if captured is None:
            return self._place_undated(image)

        bucket = bucket_for(captured)
        dest_dir = self.layout.dest / bucket.relative_path()
        self.mover.ensure_dir(dest_dir)

        check = self.index.check_and_register(captured, image.base_name)
        if check.is_first:
            copied = self.mover.copy(image.path, dest_dir / image.name)
            if copied:
                logging.info(f"Copied file: {image.path} -> {dest_dir}/")
            return PlacementResult(image.path, dest_dir, image.name, PlacementKind.PRIMARY, captured, copied)

        dup_dir = self.layout.duplicates / bucket.relative_path()
        self.mover.ensure_dir(dup_dir)
        # Named after the first file so all copies of a capture sort together
        new_name = self.names.next_free_name(dup_dir, check.original_base_name, image.extension)
        copied = self.mover.copy(image.path, dup_dir / new_name)
        if copied:
            logging.info(f"Copied duplicate: {image.path} -> {dup_dir}/{new_name}")
        return PlacementResult(image.path, dup_dir, new_name, PlacementKind.DUPLICATE, captured, copied)

    def _place_undated(self, image: ImageFile) -> PlacementResult:
        modified = self.fallback_reader.read(image.path)
        target_dir = self.layout.no_exif / bucket_for(modified).relative_path()
        self.mover.ensure_dir(target_dir)

        copied = self.mover.copy(image.path, target_dir / image.name)
        if copied:
            logging.info(f"Copied file without EXIF: {image.path} -> {target_dir}/")
        return PlacementResult(image.path, target_dir, image.name, PlacementKind.NO_METADATA, modified, copied)

    def run(self, images: Iterable[ImageFile], workers: int = 1, show_progress: bool = True) -> RunSummary:
        """
        Places every image in order. A failure on one file is logged and
        recorded; the run carries on with the next file.

        With workers > 1 only the metadata reads run in parallel; placement
        still happens one file at a time in the original order.
        """
        images = list(images)
        summary = RunSummary()
        if not images:
            return summary

        if workers <= 1:
            reads = (partial(self._read, image) for image in images)
            self._place_all(images, reads, summary, show_progress)
            return summary

        logging.info(f"Reading metadata with {workers} workers")
        executor = ThreadPoolExecutor(max_workers=workers)
        try:
            futures = [executor.submit(self._read, image) for image in images]
            self._place_all(images, (f.result for f in futures), summary, show_progress)
        except BaseException:
            # Drop queued reads so an abort does not wait for every file
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return summary

    def _read(self, image: ImageFile) -> Optional[datetime]:
        return read_capture_time(self.reader, image.path)

    def _place_all(self,
                   images: List[ImageFile],
                   reads: Iterable[Callable[[], Optional[datetime]]],
                   summary: RunSummary,
                   show_progress: bool):
        """Places images in order; `reads` yields one capture-time getter per image."""
        pairs = zip(images, reads)
        for image, read in tqdm(pairs, total=len(images), desc="Sorting", disable=not show_progress):
            try:
                summary.results.append(self.place_with_timestamp(image, read()))
            except (ExifSorterError, OSError, ValueError) as e:
                logging.error(f"Failed to process {image.path}: {e}")
                summary.failures.append(FailedFile(image.path, str(e)))
