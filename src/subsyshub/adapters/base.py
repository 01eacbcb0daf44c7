"""Base interface for subsystem spreadsheet sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field

from subsyshub.schema import SubsystemSchema


@dataclass(frozen=True)
class SpreadsheetRow:
    """One genome's row of a subsystem spreadsheet.

    ``cells`` holds one tuple of compact feature tokens per schema column;
    an empty tuple means the genome has nothing in that column.
    """

    genome_id: str
    variant_code: str
    cells: tuple[tuple[str, ...], ...] = field(default_factory=tuple)

    def tokens(self, column: int) -> tuple[str, ...]:
        if column < len(self.cells):
            return self.cells[column]
        return ()


class SpreadsheetSource(ABC):
    """Schema plus a re-readable stream of rows for one subsystem."""

    schema: SubsystemSchema

    @abstractmethod
    def rows(self) -> Iterable[SpreadsheetRow]:
        """Yield the spreadsheet rows in file order."""
