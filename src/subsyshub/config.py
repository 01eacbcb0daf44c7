"""Configuration contracts for subsystem projection runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


END_MARKER = "//"

INACTIVE_VARIANT_CODES: frozenset[str] = frozenset({"-1", "*-1", "inactive"})

DEFAULT_FEATURE_TYPE = "peg"

PROTEIN_FEATURE_TYPES: frozenset[str] = frozenset({"peg", "cds"})


class ClassificationOutcome(str, Enum):
    """Result of checking one feature reference in a spreadsheet cell."""

    GOOD = "good"
    MISSING = "missing"
    REPLACEABLE = "replaceable"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class SubsystemLayout:
    """File names and curator policies for a CoreSEED-style subsystem directory."""

    spreadsheet_file: str = "spreadsheet"
    classification_file: str = "CLASSIFICATION"
    exchangeable_marker: str = "EXCHANGABLE"
    excluded_tokens: tuple[str, ...] = ("experimental",)


@dataclass(frozen=True)
class PipelineSettings:
    """Batching and scheduling options for a spreadsheet analysis pass."""

    batch_size: int = 100
    workers: int = 1
    skip_inactive_rows: bool = True

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("Invalid batch size. Must be 1 or greater.")
        if self.workers < 1:
            raise ValueError("Invalid worker count. Must be 1 or greater.")


@dataclass(frozen=True)
class AnalyzerSpec:
    """Name and constructor parameters of one configured analyzer."""

    name: str
    params: dict[str, object] = field(default_factory=dict)
