"""Per-feature classification of subsystem spreadsheet cells."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from subsyshub.config import DEFAULT_FEATURE_TYPE, ClassificationOutcome
from subsyshub.index import GenomeRoleIndex
from subsyshub.models import Feature, Genome
from subsyshub.roles import RoleCatalog, RoleSet


@dataclass(frozen=True)
class CellEvent:
    """Outcome of one feature reference in one spreadsheet cell."""

    outcome: ClassificationOutcome
    column: int
    feature_id: str
    expected_role: str
    feature: Feature | None = None
    substitutes: tuple[str, ...] = ()


def expand_feature_token(genome_id: str, token: str) -> str | None:
    """Rebuild a full feature ID from a compact spreadsheet token.

    ``"4"`` is ``fig|<genome>.peg.4`` and ``"rna.6"`` is ``fig|<genome>.rna.6``.
    Tokens that are already full IDs are returned unchanged; blank tokens
    yield None.
    """

    cleaned = token.strip()
    if not cleaned:
        return None
    if cleaned.startswith("fig|"):
        return cleaned
    if "." in cleaned:
        return f"fig|{genome_id}.{cleaned}"
    return f"fig|{genome_id}.{DEFAULT_FEATURE_TYPE}.{cleaned}"


def split_cell(cell: str | None) -> list[str]:
    """Split a comma-separated spreadsheet cell into feature tokens."""

    if not cell:
        return []
    return [token.strip() for token in cell.split(",") if token.strip()]


class CellClassifier:
    """Decide Good / Missing / Replaceable / Incorrect for feature references."""

    def __init__(self, catalog: RoleCatalog) -> None:
        self.catalog = catalog

    def expected_roles(self, expected_role: str) -> RoleSet:
        return self.catalog.ids_for(expected_role)

    def classify_feature(
        self,
        genome: Genome,
        role_index: GenomeRoleIndex,
        column: int,
        expected_role: str,
        fid: str,
    ) -> CellEvent:
        expected = self.expected_roles(expected_role)
        feature = genome.feature(fid)

        if feature is not None:
            actual = self.catalog.ids_for(feature.function, insert=False)
            if actual.contains(expected):
                return CellEvent(ClassificationOutcome.GOOD, column, fid, expected_role, feature)

        substitutes = role_index.features_with_all(expected.ids)
        substitutes.discard(fid)
        if substitutes:
            return CellEvent(
                ClassificationOutcome.REPLACEABLE,
                column,
                fid,
                expected_role,
                feature,
                tuple(sorted(substitutes)),
            )
        if feature is None:
            return CellEvent(ClassificationOutcome.MISSING, column, fid, expected_role)
        return CellEvent(ClassificationOutcome.INCORRECT, column, fid, expected_role, feature)

    def classify(
        self,
        genome: Genome,
        role_index: GenomeRoleIndex,
        column: int,
        expected_role: str,
        tokens: Iterable[str],
    ) -> list[CellEvent]:
        """Classify each token of a cell, in the order listed."""

        events: list[CellEvent] = []
        for token in tokens:
            fid = expand_feature_token(genome.id, token)
            if fid is None:
                continue
            events.append(self.classify_feature(genome, role_index, column, expected_role, fid))
        return events
