"""Analyzer that reports spreadsheet cells needing curator attention."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from subsyshub.analyzers.base import AnalyzerReport, SpreadsheetAnalyzer
from subsyshub.models import Feature

logger = logging.getLogger(__name__)

ERROR_REPORT_COLUMNS: tuple[str, ...] = (
    "subsystem",
    "genome",
    "variant",
    "column",
    "feature",
    "expected_role",
    "replacement_candidates",
)


class ErrorTrackingAnalyzer(SpreadsheetAnalyzer):
    """Write one tab-separated record per Missing, Replaceable or Incorrect event."""

    name = "errors"

    def __init__(self, *, output_path: str | Path) -> None:
        super().__init__()
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Error-tracking output will be to %s.", self.output_path)
        self._stream = self.output_path.open("w", newline="")
        self._writer = csv.writer(self._stream, delimiter="\t", lineterminator="\n")
        self._writer.writerow(ERROR_REPORT_COLUMNS)
        self.total_errors = 0
        self.error_rows = 0
        self.missing_count = 0
        self._row_errors = 0
        self._bad_variants: set[tuple[str, str]] = set()

    def start_row(self) -> None:
        self._row_errors = 0

    def record_good(self, column: int, feature: Feature) -> None:
        pass

    def record_missing(self, column: int, feature_id: str, expected_role: str) -> None:
        self._write(column, feature_id, expected_role, ())
        self.missing_count += 1

    def record_replaceable(
        self,
        column: int,
        feature_id: str,
        expected_role: str,
        substitutes: tuple[str, ...],
    ) -> None:
        self._write(column, feature_id, expected_role, substitutes)

    def record_incorrect(self, column: int, feature: Feature, expected_role: str) -> None:
        self._write(column, feature.id, expected_role, ())

    def end_row(self) -> None:
        if self._row_errors == 0:
            return
        logger.info(
            "%d errors found in %s for subsystem %s.",
            self._row_errors,
            self.genome,
            self.schema,
        )
        self.total_errors += self._row_errors
        self.error_rows += 1
        if self.schema is not None:
            self._bad_variants.add((self.schema.name, self.variant_code))

    def finish(self) -> AnalyzerReport:
        self._stream.close()
        logger.info(
            "%d incorrect features found in %d rows (%d distinct variants).",
            self.total_errors,
            self.error_rows,
            len(self._bad_variants),
        )
        logger.info("%d missing features without replacements.", self.missing_count)
        return AnalyzerReport(
            name=self.name,
            counts={
                "errors": self.total_errors,
                "error_rows": self.error_rows,
                "error_variants": len(self._bad_variants),
                "missing": self.missing_count,
            },
            output_path=self.output_path,
        )

    def abandon(self) -> None:
        super().abandon()
        if not self._stream.closed:
            self._stream.close()

    def _write(
        self,
        column: int,
        feature_id: str,
        expected_role: str,
        substitutes: tuple[str, ...],
    ) -> None:
        self._writer.writerow(
            [
                self.schema.name if self.schema is not None else "",
                self.genome.id if self.genome is not None else "",
                self.variant_code,
                column,
                feature_id,
                expected_role,
                ", ".join(substitutes),
            ]
        )
        self._row_errors += 1
