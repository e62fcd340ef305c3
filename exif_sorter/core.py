import logging
from typing import Optional

from .config import SortLayout
from .exceptions import PrereqMissingError, SourceMissingError
from .metadata.extract import MetadataReader
from .models import RunSummary
from .organization.mover import FileMover
from .organization.placement import PlacementEngine
from .scanning.filesystem import SourceScanner


class ExifSorterApp:
    def __init__(self, layout: SortLayout, reader: MetadataReader):
        self.layout = layout
        self.reader = reader

    def check_prerequisites(self):
        if not self.reader.is_available():
            raise PrereqMissingError(
                f"{self.reader.name} is not installed. Please install it and try again."
            )
        if not self.layout.source.is_dir():
            raise SourceMissingError(f"The Source directory does not exist: {self.layout.source}")

    def sort(self,
             dry_run: bool = False,
             workers: int = 1,
             show_progress: bool = True,
             scanner: Optional[SourceScanner] = None) -> RunSummary:
        """
        Executes the sorting pipeline.
        1. Check prerequisites (metadata tool, Source directory)
        2. Create the output roots
        3. Scan Source in a stable order
        4. Place (Dest / Duplicates / No_Exif) and copy
        """
        self.check_prerequisites()

        mover = FileMover(dry_run=dry_run)
        for root in self.layout.output_roots:
            mover.ensure_dir(root)

        # --- Step 1: Scanning ---
        logging.info(f"Scanning {self.layout.source}...")
        scanner = scanner or SourceScanner()
        images = list(scanner.scan(self.layout.source))
        logging.info(f"Found {len(images)} image files.")

        # --- Step 2: Placement ---
        engine = PlacementEngine(self.layout, self.reader, mover=mover)
        summary = engine.run(images, workers=workers, show_progress=show_progress)

        logging.info(summary.summary_line())
        return summary
