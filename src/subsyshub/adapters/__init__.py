"""Input adapters: subsystem spreadsheets and genome records."""

from .base import SpreadsheetRow, SpreadsheetSource
from .coreseed import CoreSeedSpreadsheet, load_subsystem, parse_row, scan_subsystem_directory
from .gto import GenomeDirectory, expand_genome_paths, load_genome, save_genome
from .memory import InMemorySpreadsheet

__all__ = [
    "SpreadsheetRow",
    "SpreadsheetSource",
    "CoreSeedSpreadsheet",
    "InMemorySpreadsheet",
    "GenomeDirectory",
    "expand_genome_paths",
    "load_genome",
    "load_subsystem",
    "parse_row",
    "save_genome",
    "scan_subsystem_directory",
]
