"""Spreadsheet analyzers fed by a single classification pass."""

from .base import AnalyzerReport, SpreadsheetAnalyzer
from .catalog import CatalogBuilderAnalyzer
from .errors import ERROR_REPORT_COLUMNS, ErrorTrackingAnalyzer
from .mismatch import MISMATCH_REPORT_COLUMNS, RoleMismatchAnalyzer

__all__ = [
    "AnalyzerReport",
    "SpreadsheetAnalyzer",
    "CatalogBuilderAnalyzer",
    "ErrorTrackingAnalyzer",
    "RoleMismatchAnalyzer",
    "ERROR_REPORT_COLUMNS",
    "MISMATCH_REPORT_COLUMNS",
]
