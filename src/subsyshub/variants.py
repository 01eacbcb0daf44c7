"""Variant identities: the deduplication key of the variant catalog."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from subsyshub.config import INACTIVE_VARIANT_CODES
from subsyshub.models import Genome


def is_active(variant_code: str | None) -> bool:
    """Return False for the curator sentinels marking a subsystem as not active."""

    if variant_code is None:
        return False
    return variant_code.strip().lower() not in INACTIVE_VARIANT_CODES


@dataclass(frozen=True)
class VariantIdentity:
    """Subsystem, variant code and active role columns of a spreadsheet row.

    Two rows with the same triple are the same variant no matter which genome
    or which features produced them.
    """

    subsystem: str
    code: str
    active: frozenset[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", self.code.strip())
        object.__setattr__(self, "active", frozenset(int(column) for column in self.active))
        if any(column < 0 for column in self.active):
            raise ValueError(f"Negative column index in variant {self.subsystem}:{self.code}")

    @property
    def is_active(self) -> bool:
        return is_active(self.code)

    @property
    def cell_count(self) -> int:
        return len(self.active)

    def render_cells(self, width: int) -> str:
        """Render the active columns as a fixed-width ``0``/``1`` string."""

        if self.active and max(self.active) >= width:
            raise ValueError(f"Variant {self} has columns beyond width {width}")
        return "".join("1" if column in self.active else "0" for column in range(width))

    def to_record(self, width: int) -> dict[str, Any]:
        return {"subsystem": self.subsystem, "code": self.code, "cells": self.render_cells(width)}

    @classmethod
    def from_cells(cls, subsystem: str, code: str, cells: str) -> "VariantIdentity":
        if set(cells) - {"0", "1"}:
            raise ValueError(f"Invalid cell pattern {cells!r}")
        return cls(subsystem, code, frozenset(i for i, flag in enumerate(cells) if flag == "1"))

    @classmethod
    def of(cls, subsystem: str, code: str, columns: Iterable[int]) -> "VariantIdentity":
        return cls(subsystem, code, frozenset(columns))

    def __str__(self) -> str:
        columns = ",".join(str(column) for column in sorted(self.active))
        return f"{self.subsystem} [{self.code}] {{{columns}}}"


def normalize_variant_codes(genome: Genome) -> int:
    """Rewrite installed variant codes to ``active``/``inactive``.

    Returns the number of rows whose code changed.
    """

    changed = 0
    for row in genome.subsystems():
        new_code = "active" if is_active(row.variant_code) else "inactive"
        if new_code != row.variant_code:
            row.variant_code = new_code
            changed += 1
    return changed
