"""Analyzer interface for spreadsheet classification events."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from subsyshub.errors import AnalyzerClosedError
from subsyshub.index import GenomeRoleIndex
from subsyshub.models import Feature, Genome
from subsyshub.schema import SubsystemSchema


@dataclass
class AnalyzerReport:
    """Summary an analyzer returns when it is terminated."""

    name: str
    counts: dict[str, int] = field(default_factory=dict)
    output_path: Path | None = None


class SpreadsheetAnalyzer(ABC):
    """Observer of one classification pass over subsystem spreadsheets.

    For every active row the pipeline calls ``open_row``, then one event
    callback per classified feature reference (column order, then token
    order), then ``close_row``. ``terminate`` is called once at the end of
    the run; afterwards every callback raises ``AnalyzerClosedError``.

    The public callbacks check that the analyzer is still open and then hand
    over to the ``start_row``, ``record_*`` and ``end_row`` hooks, which are
    what subclasses implement.
    """

    name: str

    def __init__(self) -> None:
        self.genome: Genome | None = None
        self.role_index: GenomeRoleIndex | None = None
        self.schema: SubsystemSchema | None = None
        self.variant_code: str = ""
        self.closed = False

    def open_row(
        self,
        genome: Genome,
        role_index: GenomeRoleIndex,
        schema: SubsystemSchema,
        variant_code: str,
    ) -> None:
        self._ensure_open()
        self.genome = genome
        self.role_index = role_index
        self.schema = schema
        self.variant_code = variant_code
        self.start_row()

    def good(self, column: int, feature: Feature) -> None:
        self._ensure_open()
        self.record_good(column, feature)

    def missing(self, column: int, feature_id: str, expected_role: str) -> None:
        self._ensure_open()
        self.record_missing(column, feature_id, expected_role)

    def replaceable(
        self,
        column: int,
        feature_id: str,
        expected_role: str,
        substitutes: tuple[str, ...],
    ) -> None:
        self._ensure_open()
        self.record_replaceable(column, feature_id, expected_role, substitutes)

    def incorrect(self, column: int, feature: Feature, expected_role: str) -> None:
        self._ensure_open()
        self.record_incorrect(column, feature, expected_role)

    def close_row(self) -> None:
        self._ensure_open()
        self.end_row()

    def start_row(self) -> None:
        """Reset per-row state; the row context is already set."""

    @abstractmethod
    def record_good(self, column: int, feature: Feature) -> None:
        """The referenced feature carries the expected role."""

    @abstractmethod
    def record_missing(self, column: int, feature_id: str, expected_role: str) -> None:
        """The referenced feature is not in the genome and has no substitute."""

    @abstractmethod
    def record_replaceable(
        self,
        column: int,
        feature_id: str,
        expected_role: str,
        substitutes: tuple[str, ...],
    ) -> None:
        """The reference is wrong but other features carry the expected role."""

    @abstractmethod
    def record_incorrect(self, column: int, feature: Feature, expected_role: str) -> None:
        """The referenced feature has a different role and nothing substitutes."""

    def end_row(self) -> None:
        """Finish the current row."""

    def terminate(self) -> AnalyzerReport:
        """Flush the analyzer's report and close it."""

        self._ensure_open()
        try:
            return self.finish()
        finally:
            self.closed = True

    @abstractmethod
    def finish(self) -> AnalyzerReport:
        """Produce final output for the whole run."""

    def abandon(self) -> None:
        """Release resources after a failure without producing a report."""

        self.closed = True

    def _ensure_open(self) -> None:
        if self.closed:
            raise AnalyzerClosedError(f"Analyzer {self.name} has already been terminated")
