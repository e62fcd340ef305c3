import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import config
from .config import SortLayout
from .core import ExifSorterApp
from .exceptions import PrereqMissingError, SourceMissingError
from .metadata.extract import create_reader
from .reporting import ReportGenerator


def setup_logging(verbose: bool, log_file: Optional[Path] = None):
    """Sets up logging to the console and, optionally, a file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )

    # Silence chatty libraries
    logging.getLogger("exifread").setLevel(logging.ERROR)


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Sort images from ./Source into Dest, Duplicates and No_Exif by capture date"
    )

    p.add_argument("root", type=Path, nargs="?", default=Path("."),
                   help="Directory holding Source (and where Dest, Duplicates, No_Exif go). Default: current directory")

    p.add_argument("--reader", choices=config.READERS, default=config.DEFAULT_READER,
                   help="Metadata reader: external exiftool (default) or the Python exifread library")
    p.add_argument("--timeout", type=float, default=config.EXIFTOOL_TIMEOUT,
                   help="Seconds to wait for exiftool per file")
    p.add_argument("--workers", type=int, default=1,
                   help="Parallel metadata readers (placement stays in order)")
    p.add_argument("--dry-run", action="store_true", help="Simulate actions without modifying disk")
    p.add_argument("--report", type=Path, default=None, help="Write a CSV report of every placement")
    p.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    p.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    root = args.root.resolve()
    layout = SortLayout.from_root(root)

    logging.info("=== EXIF Sorter Started ===")
    logging.info(f"Source: {layout.source}")

    app = ExifSorterApp(layout, create_reader(args.reader, timeout=args.timeout))

    try:
        summary = app.sort(
            dry_run=args.dry_run,
            workers=args.workers,
            show_progress=not args.no_progress,
        )
    except (PrereqMissingError, SourceMissingError) as e:
        logging.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        sys.exit(1)
    except Exception:
        logging.exception("Fatal error during sorting.")
        sys.exit(1)

    if args.report:
        try:
            ReportGenerator(summary).write_csv(args.report)
        except OSError:
            logging.exception(f"Failed to write report to {args.report}.")
            sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
