"""Feature-to-subsystem table for fast lookups by downstream tools."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

from subsyshub.models import Genome

SUBSYSTEM_TABLE_COLUMNS: tuple[str, ...] = (
    "feature_id",
    "subsystem",
    "variant_code",
    "superclass",
    "class",
    "subclass",
    "role",
)


def subsystem_table_rows(genome: Genome) -> list[dict[str, Any]]:
    """One row per (feature, subsystem, role) binding installed on the genome."""

    rows: list[dict[str, Any]] = []
    for subsystem in sorted(genome.subsystems(), key=lambda row: row.name):
        superclass, klass, subclass = subsystem.classifications
        for role, fids in subsystem.bindings:
            for fid in fids:
                rows.append(
                    {
                        "feature_id": fid,
                        "subsystem": subsystem.name,
                        "variant_code": subsystem.variant_code,
                        "superclass": superclass,
                        "class": klass,
                        "subclass": subclass,
                        "role": role,
                    }
                )
    rows.sort(key=lambda row: (row["feature_id"], row["subsystem"], row["role"]))
    return rows


def write_subsystem_table(genome: Genome, output_path: str | Path) -> int:
    """Write the subsystem table as tab-separated text; returns the row count."""

    target = Path(output_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    rows = subsystem_table_rows(genome)
    pd.DataFrame(rows, columns=list(SUBSYSTEM_TABLE_COLUMNS)).to_csv(target, sep="\t", index=False)
    return len(rows)
