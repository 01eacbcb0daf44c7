"""Adapter for CoreSEED-style subsystem directories.

Each subsystem lives in its own directory named after the subsystem (spaces
written as underscores). The ``spreadsheet`` file holds the role list, a
``//`` marker, a metadata section that is ignored, another marker, and then
one tab-delimited row per genome: genome ID, variant code and a cell of
comma-separated feature numbers per role. A peg is written as its number
(``4``); other features carry their type (``rna.6``).
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from subsyshub.adapters.base import SpreadsheetRow, SpreadsheetSource
from subsyshub.classifier import split_cell
from subsyshub.config import SubsystemLayout
from subsyshub.errors import SpreadsheetFormatError
from subsyshub.schema import (
    SubsystemSchema,
    build_schema,
    directory_to_name,
    exclusion_reason,
    parse_header,
)

logger = logging.getLogger(__name__)


class CoreSeedSpreadsheet(SpreadsheetSource):
    """Rows of one subsystem spreadsheet file, re-read on every pass."""

    def __init__(self, schema: SubsystemSchema, path: str | Path) -> None:
        self.schema = schema
        self.path = Path(path)

    def rows(self) -> Iterator[SpreadsheetRow]:
        with self.path.open(encoding="utf-8", errors="replace") as stream:
            _, body = parse_header(stream)
            for raw in body:
                line = raw.rstrip("\r\n")
                if not line.strip():
                    continue
                yield parse_row(line, self.schema.role_count)


def parse_row(line: str, role_count: int) -> SpreadsheetRow:
    """Parse one tab-delimited spreadsheet data row."""

    fields = line.split("\t")
    genome_id = fields[0].strip()
    variant_code = fields[1].strip() if len(fields) > 1 else ""
    cells = tuple(
        tuple(split_cell(fields[column + 2])) if column + 2 < len(fields) else ()
        for column in range(role_count)
    )
    return SpreadsheetRow(genome_id=genome_id, variant_code=variant_code, cells=cells)


def read_classification(path: Path) -> str:
    if not path.is_file():
        return ""
    lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    return lines[0] if lines else ""


def load_subsystem(sub_dir: str | Path, layout: SubsystemLayout | None = None) -> CoreSeedSpreadsheet | None:
    """Load one subsystem directory, or return None if curators excluded it."""

    layout = layout or SubsystemLayout()
    directory = Path(sub_dir)
    name = directory_to_name(directory.name)
    classification = read_classification(directory / layout.classification_file)
    reason = exclusion_reason(
        exchangeable=(directory / layout.exchangeable_marker).exists(),
        classification=classification,
        layout=layout,
    )
    if reason is not None:
        logger.info("Skipping %s subsystem %s.", reason, name)
        return None

    spreadsheet = directory / layout.spreadsheet_file
    with spreadsheet.open(encoding="utf-8", errors="replace") as stream:
        roles, _ = parse_header(stream)
    return CoreSeedSpreadsheet(build_schema(name, classification, roles), spreadsheet)


def scan_subsystem_directory(
    root: str | Path,
    layout: SubsystemLayout | None = None,
) -> list[CoreSeedSpreadsheet]:
    """Return the usable subsystems under a CoreSEED subsystem directory."""

    layout = layout or SubsystemLayout()
    root_path = Path(root)
    if not root_path.is_dir():
        raise FileNotFoundError(f"Subsystem directory {root_path} not found or invalid.")

    candidates = sorted(
        path
        for path in root_path.iterdir()
        if path.is_dir() and (path / layout.spreadsheet_file).is_file()
    )
    logger.info("%d subsystem directories found with spreadsheets.", len(candidates))

    sources: list[CoreSeedSpreadsheet] = []
    for sub_dir in candidates:
        try:
            source = load_subsystem(sub_dir, layout)
        except (SpreadsheetFormatError, OSError):
            logger.exception("Skipping unreadable subsystem directory %s.", sub_dir)
            continue
        if source is not None:
            sources.append(source)
    return sources
