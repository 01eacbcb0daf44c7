"""Per-genome index from role ID to the features carrying that role."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from subsyshub.models import Genome
from subsyshub.roles import RoleCatalog


class GenomeRoleIndex:
    """Transient lookup of which features in one genome perform each role."""

    def __init__(self, genome_id: str, mapping: dict[str, set[str]] | None = None) -> None:
        self.genome_id = genome_id
        self._features: dict[str, set[str]] = defaultdict(set)
        for role_id, fids in (mapping or {}).items():
            self._features[role_id].update(fids)

    @classmethod
    def build(cls, genome: Genome, catalog: RoleCatalog) -> "GenomeRoleIndex":
        """Index the protein-coding features of a genome against known roles.

        Only roles already in the catalog are indexed; the catalog is not
        modified.
        """

        index = cls(genome.id)
        for feature in genome.pegs():
            for role_id in catalog.ids_for(feature.function, insert=False).ids:
                index.add(role_id, feature.id)
        return index

    def add(self, role_id: str, fid: str) -> None:
        self._features[role_id].add(fid)

    def features_for(self, role_id: str | None) -> set[str]:
        if role_id is None:
            return set()
        return set(self._features.get(role_id, ()))

    def features_with_all(self, role_ids: Iterable[str]) -> set[str]:
        """Return the features carrying every one of the given roles."""

        found: set[str] | None = None
        for role_id in role_ids:
            fids = self.features_for(role_id)
            found = fids if found is None else found & fids
        return found or set()

    def has_role(self, role_id: str | None) -> bool:
        return role_id is not None and bool(self._features.get(role_id))

    def covers(self, role_ids: Iterable[str]) -> bool:
        """Return True if every role has at least one feature in the genome."""

        return all(self.has_role(role_id) for role_id in role_ids)

    def role_ids(self) -> list[str]:
        return sorted(role_id for role_id, fids in self._features.items() if fids)

    def __len__(self) -> int:
        return len(self.role_ids())

    def __contains__(self, role_id: object) -> bool:
        return isinstance(role_id, str) and self.has_role(role_id)
