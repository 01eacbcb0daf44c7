"""Exception taxonomy for structural failures.

Classification anomalies (missing or mis-annotated features) are reported as
events, never raised. Only failures that make an operation impossible end up
here.
"""

from __future__ import annotations

from pathlib import Path


class SubsysHubError(Exception):
    """Base class for all subsyshub errors."""


class BadCatalogFormatError(SubsysHubError, OSError):
    """A persisted projector file is corrupt or in a foreign format."""

    def __init__(self, path: str | Path, detail: str) -> None:
        self.path = Path(path)
        self.detail = detail
        super().__init__(f"Bad catalog format in {self.path}: {detail}")


class SpreadsheetFormatError(SubsysHubError, ValueError):
    """A subsystem spreadsheet header could not be parsed."""


class AnalyzerClosedError(SubsysHubError, RuntimeError):
    """An analyzer was used after ``terminate`` was called."""
