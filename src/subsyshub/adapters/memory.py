"""Spreadsheet source backed by rows already in memory."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from subsyshub.adapters.base import SpreadsheetRow, SpreadsheetSource
from subsyshub.schema import SubsystemSchema


class InMemorySpreadsheet(SpreadsheetSource):
    """Serve rows handed over by another collaborator (or a test)."""

    def __init__(self, schema: SubsystemSchema, rows: Iterable[SpreadsheetRow] = ()) -> None:
        self.schema = schema
        self._rows: list[SpreadsheetRow] = list(rows)

    def add_row(self, genome_id: str, variant_code: str, cells: Sequence[Sequence[str]]) -> None:
        self._rows.append(
            SpreadsheetRow(
                genome_id=genome_id,
                variant_code=variant_code,
                cells=tuple(tuple(cell) for cell in cells),
            )
        )

    def rows(self) -> list[SpreadsheetRow]:
        return list(self._rows)
