"""In-memory genome records used by the projection engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from subsyshub.config import PROTEIN_FEATURE_TYPES


@dataclass
class Feature:
    """Single annotated feature (usually a protein-coding gene)."""

    id: str
    type: str = "peg"
    function: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_protein(self) -> bool:
        return self.type.lower() in PROTEIN_FEATURE_TYPES

    def to_row(self) -> dict[str, Any]:
        row = dict(self.metadata)
        row.update({"id": self.id, "type": self.type, "function": self.function})
        return row


@dataclass
class SubsystemRow:
    """Subsystem binding installed on a genome: features per role column."""

    name: str
    variant_code: str
    classifications: tuple[str, str, str] = ("", "", "")
    bindings: list[tuple[str, list[str]]] = field(default_factory=list)

    def feature_ids(self) -> set[str]:
        return {fid for _, fids in self.bindings for fid in fids}

    def to_row(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "classification": list(self.classifications),
            "variant_code": self.variant_code,
            "role_bindings": [
                {"role_id": role, "features": list(fids)}
                for role, fids in self.bindings
            ],
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SubsystemRow":
        classes = (list(row.get("classification") or []) + ["", "", ""])[:3]
        return cls(
            name=str(row["name"]),
            variant_code=str(row.get("variant_code", "")),
            classifications=(str(classes[0]), str(classes[1]), str(classes[2])),
            bindings=[
                (str(binding["role_id"]), [str(fid) for fid in binding.get("features", [])])
                for binding in row.get("role_bindings", [])
            ],
        )


class Genome:
    """Genome record with O(1) feature lookup and installed subsystem rows.

    The genome accepts subsystem rows without validating them; deciding
    whether a row is correct is the classifier's job.
    """

    def __init__(
        self,
        genome_id: str,
        name: str = "",
        features: list[Feature] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self.id = genome_id
        self.name = name
        self.metadata = metadata or {}
        self._features: dict[str, Feature] = {}
        self._subsystems: dict[str, SubsystemRow] = {}
        for feature in features or []:
            self.add_feature(feature)

    def add_feature(self, feature: Feature) -> None:
        self._features[feature.id] = feature

    def feature(self, fid: str) -> Feature | None:
        return self._features.get(fid)

    def features(self) -> list[Feature]:
        return list(self._features.values())

    def pegs(self) -> list[Feature]:
        """Return the protein-coding features."""

        return [feature for feature in self._features.values() if feature.is_protein]

    def install_subsystem(self, row: SubsystemRow) -> None:
        self._subsystems[row.name] = row

    def subsystem(self, name: str) -> SubsystemRow | None:
        return self._subsystems.get(name)

    def subsystems(self) -> list[SubsystemRow]:
        return list(self._subsystems.values())

    def clear_subsystems(self) -> None:
        self._subsystems.clear()

    def __str__(self) -> str:
        return f"{self.id} ({self.name})" if self.name else self.id

    def __repr__(self) -> str:
        return f"Genome({self.id!r}, features={len(self._features)}, subsystems={len(self._subsystems)})"
