"""Analyzer that tallies which wrong roles turn up in each subsystem column."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from subsyshub.analyzers.base import AnalyzerReport, SpreadsheetAnalyzer
from subsyshub.models import Feature
from subsyshub.schema import SubsystemSchema

logger = logging.getLogger(__name__)

MISMATCH_REPORT_COLUMNS: tuple[str, ...] = ("subsystem", "column", "marker", "role", "count")

GOOD_MARKER = "*"


@dataclass
class ColumnTally:
    """Good count and wrong-role counts for one subsystem column."""

    good: int = 0
    total: int = 0
    wrong: Counter[str] = field(default_factory=Counter)

    def count_good(self) -> None:
        self.good += 1
        self.total += 1

    def count_wrong(self, role: str) -> None:
        self.total += 1
        self.wrong[role] += 1

    @property
    def reportable(self) -> bool:
        return self.good < self.total

    def sorted_wrong(self) -> list[tuple[str, int]]:
        return sorted(self.wrong.items(), key=lambda item: (-item[1], item[0]))


class RoleMismatchAnalyzer(SpreadsheetAnalyzer):
    """Count good roles and each incorrect role found per subsystem column.

    Replaceable references count as good because the role exists elsewhere
    in the genome. Missing references carry no role and are not counted.
    """

    name = "mismatch"

    def __init__(self, *, output_path: str | Path) -> None:
        super().__init__()
        self.output_path = Path(output_path)
        logger.info("Role counts will be output to %s.", self.output_path)
        self.bad_rows = 0
        self._tallies: dict[str, tuple[SubsystemSchema, list[ColumnTally]]] = {}
        self._current: list[ColumnTally] = []
        self._row_bad = False

    def start_row(self) -> None:
        self._row_bad = False
        schema = self.schema
        entry = self._tallies.get(schema.name)
        if entry is None:
            entry = (schema, [ColumnTally() for _ in range(schema.role_count)])
            self._tallies[schema.name] = entry
        self._current = entry[1]

    def record_good(self, column: int, feature: Feature) -> None:
        self._current[column].count_good()

    def record_missing(self, column: int, feature_id: str, expected_role: str) -> None:
        pass

    def record_replaceable(
        self,
        column: int,
        feature_id: str,
        expected_role: str,
        substitutes: tuple[str, ...],
    ) -> None:
        self._current[column].count_good()

    def record_incorrect(self, column: int, feature: Feature, expected_role: str) -> None:
        self._current[column].count_wrong(feature.function)
        self._row_bad = True

    def end_row(self) -> None:
        if self._row_bad:
            self.bad_rows += 1

    def report_rows(self) -> list[dict[str, Any]]:
        """Build report rows: the expected role first, then wrong roles by frequency."""

        rows: list[dict[str, Any]] = []
        for name in sorted(self._tallies):
            schema, tallies = self._tallies[name]
            for column, tally in enumerate(tallies):
                if not tally.reportable:
                    continue
                rows.append(
                    {
                        "subsystem": name,
                        "column": column,
                        "marker": GOOD_MARKER,
                        "role": schema.role(column),
                        "count": tally.good,
                    }
                )
                for role, count in tally.sorted_wrong():
                    rows.append(
                        {
                            "subsystem": name,
                            "column": column,
                            "marker": "",
                            "role": role,
                            "count": count,
                        }
                    )
        return rows

    def finish(self) -> AnalyzerReport:
        rows = self.report_rows()
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        frame = pd.DataFrame(rows, columns=list(MISMATCH_REPORT_COLUMNS))
        frame.to_csv(self.output_path, sep="\t", index=False)

        bad_subsystems = len({row["subsystem"] for row in rows})
        bad_columns = sum(1 for row in rows if row["marker"] == GOOD_MARKER)
        logger.info(
            "%d variants with incorrect roles found in %d subsystems.",
            self.bad_rows,
            bad_subsystems,
        )
        logger.info("%d subsystem columns require review.", bad_columns)
        return AnalyzerReport(
            name=self.name,
            counts={
                "bad_rows": self.bad_rows,
                "bad_subsystems": bad_subsystems,
                "bad_columns": bad_columns,
            },
            output_path=self.output_path,
        )
