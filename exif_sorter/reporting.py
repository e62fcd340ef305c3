import csv
import logging
from pathlib import Path

from .models import PlacementKind, RunSummary

STATUS_LABELS = {
    PlacementKind.PRIMARY: "Dated",
    PlacementKind.DUPLICATE: "Duplicate",
    PlacementKind.NO_METADATA: "No EXIF",
}


class ReportGenerator:
    HEADERS = [
        "Source Path",
        "Status",
        "Destination Path",
        "Timestamp",
        "Notes",
    ]

    def __init__(self, summary: RunSummary):
        self.summary = summary

    def write_csv(self, output_csv: Path):
        """
        Writes one row per processed file: where it went and why, or why it failed.
        """
        logging.info(f"Writing report -> {output_csv}")

        with open(output_csv, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(self.HEADERS)

            for result in self.summary.results:
                if result.kind is PlacementKind.NO_METADATA:
                    notes = "Bucketed by file modification date"
                else:
                    notes = ""
                if not result.copied:
                    notes = "; ".join(filter(None, [notes, "Not copied (target exists or dry run)"]))
                writer.writerow([
                    str(result.source),
                    STATUS_LABELS[result.kind],
                    str(result.destination),
                    result.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                    notes,
                ])

            for failure in self.summary.failures:
                writer.writerow([str(failure.source), "Failed", "", "", failure.reason])

        logging.info(f"Report complete. {self.summary.total} rows written.")
