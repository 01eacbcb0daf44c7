"""Subsystem projector: schemas, role catalog and the deduplicated variant catalog."""

from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jsonschema import exceptions as jsex
from jsonschema.validators import validator_for

from subsyshub.errors import BadCatalogFormatError
from subsyshub.index import GenomeRoleIndex
from subsyshub.models import Genome, SubsystemRow
from subsyshub.roles import RoleCatalog, RoleSet
from subsyshub.schema import SubsystemSchema
from subsyshub.variants import VariantIdentity

logger = logging.getLogger(__name__)

FORMAT_NAME = "subsyshub.projector"
FORMAT_VERSION = 1
SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "projector.schema.json"


class SubsystemProjector:
    """Durable catalog used to classify and install subsystems on genomes.

    Mutation goes through ``add_subsystem``, ``add_variant`` and role
    insertion only. ``add_variant`` is serialized by a lock so concurrent
    inserts of equal identities leave a single catalog entry.
    """

    def __init__(self, roles: RoleCatalog | None = None) -> None:
        self.roles = RoleCatalog() if roles is None else roles
        self._subsystems: dict[str, SubsystemSchema] = {}
        self._variants: dict[str, set[VariantIdentity]] = defaultdict(set)
        self._lock = threading.Lock()

    # Catalog mutation

    def add_subsystem(self, schema: SubsystemSchema) -> bool:
        """Register a subsystem schema; returns False if the name is already known."""

        with self._lock:
            if schema.name in self._subsystems:
                return False
            self._subsystems[schema.name] = schema
            for role in schema.roles:
                self.roles.ids_for(role)
            return True

    def add_variant(self, identity: VariantIdentity) -> bool:
        """Add a variant to the catalog; returns True only if it was not already there."""

        with self._lock:
            schema = self._subsystems.get(identity.subsystem)
            if schema is None:
                raise KeyError(f"Unknown subsystem for variant: {identity.subsystem}")
            if identity.active and max(identity.active) >= schema.role_count:
                raise ValueError(
                    f"Variant {identity} references columns beyond the {schema.role_count} "
                    f"roles of {schema.name}"
                )
            known = self._variants[identity.subsystem]
            if identity in known:
                return False
            known.add(identity)
            return True

    # Accessors

    @property
    def subsystems(self) -> list[SubsystemSchema]:
        return [self._subsystems[name] for name in sorted(self._subsystems)]

    def subsystem(self, name: str) -> SubsystemSchema | None:
        return self._subsystems.get(name)

    @property
    def variants(self) -> list[VariantIdentity]:
        return [
            variant
            for name in sorted(self._variants)
            for variant in self.variants_for(name)
        ]

    def variants_for(self, name: str) -> list[VariantIdentity]:
        """Variants of one subsystem, most active columns first."""

        return sorted(
            self._variants.get(name, ()),
            key=lambda variant: (-variant.cell_count, variant.code, sorted(variant.active)),
        )

    def column_roles(self, schema: SubsystemSchema) -> list[RoleSet]:
        return [self.roles.ids_for(role, insert=False) for role in schema.roles]

    # Projection

    def compute_role_index(self, genome: Genome) -> GenomeRoleIndex:
        return GenomeRoleIndex.build(genome, self.roles)

    def install(
        self,
        genome: Genome,
        schema: SubsystemSchema,
        variant_code: str,
        bindings: Mapping[int, list[str]],
    ) -> SubsystemRow:
        """Install a subsystem row built from per-column feature lists."""

        row = SubsystemRow(
            name=schema.name,
            variant_code=variant_code,
            classifications=schema.classifications,
            bindings=[
                (schema.role(column), sorted(set(bindings[column])))
                for column in sorted(bindings)
                if bindings[column]
            ],
        )
        genome.install_subsystem(row)
        return row

    def project(
        self,
        genome: Genome,
        active_only: bool = False,
        role_index: GenomeRoleIndex | None = None,
    ) -> int:
        """Install the best satisfiable variant of each subsystem on a genome.

        Subsystems already present on the genome are left alone. For the rest,
        variants are tried from most to fewest active columns and the first
        one whose every active column is covered by some feature is installed.
        Returns the number of rows installed.
        """

        if not genome.pegs():
            return 0

        index = self.compute_role_index(genome) if role_index is None else role_index
        installed = 0
        for schema in self.subsystems:
            if genome.subsystem(schema.name) is not None:
                continue
            column_roles = self.column_roles(schema)
            for variant in self.variants_for(schema.name):
                if not variant.active:
                    continue
                if active_only and not variant.is_active:
                    continue
                bindings = {
                    column: sorted(index.features_with_all(column_roles[column].ids))
                    for column in variant.active
                }
                if all(bindings.values()):
                    self.install(genome, schema, variant.code, bindings)
                    logger.debug("Projected %s onto %s.", variant, genome)
                    installed += 1
                    break

        return installed

    # Persistence

    def to_payload(self) -> dict[str, Any]:
        return {
            "format": FORMAT_NAME,
            "version": FORMAT_VERSION,
            "subsystems": [schema.to_record() for schema in self.subsystems],
            "roles": self.roles.to_records(),
            "variants": [
                variant.to_record(self._subsystems[variant.subsystem].role_count)
                for variant in self.variants
            ],
        }

    def save(self, path: str | Path) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with self._lock:
            payload = self.to_payload()
        with target.open("w") as stream:
            json.dump(payload, stream, indent=2)
        logger.info(
            "Saved projector with %d subsystems, %d roles and %d variants to %s.",
            len(payload["subsystems"]),
            len(payload["roles"]),
            len(payload["variants"]),
            target,
        )

    @classmethod
    def load(cls, path: str | Path) -> "SubsystemProjector":
        """Read a projector saved with ``save``.

        Raises ``BadCatalogFormatError`` if the file is not a valid projector
        document and ``FileNotFoundError`` if it does not exist.
        """

        source = Path(path)
        text = source.read_text()
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise BadCatalogFormatError(source, f"not JSON ({exc.msg} at line {exc.lineno})") from exc

        _validate_payload(source, payload)
        projector = cls._parse(source, payload)
        logger.info(
            "Loaded projector with %d subsystems and %d variants from %s.",
            len(projector._subsystems),
            len(projector.variants),
            source,
        )
        return projector

    @classmethod
    def _parse(cls, source: Path, payload: dict[str, Any]) -> "SubsystemProjector":
        projector = cls()
        for record in payload["roles"]:
            if record["id"] in projector.roles:
                raise BadCatalogFormatError(source, f"duplicate role ID {record['id']}")
            projector.roles.add(record["id"], record["descriptions"])

        for record in payload["subsystems"]:
            if not projector.add_subsystem(SubsystemSchema.from_record(record)):
                raise BadCatalogFormatError(source, f"duplicate subsystem {record['name']}")

        for record in payload["variants"]:
            schema = projector.subsystem(record["subsystem"])
            if schema is None:
                raise BadCatalogFormatError(
                    source, f"variant refers to unknown subsystem {record['subsystem']}"
                )
            if len(record["cells"]) != schema.role_count:
                raise BadCatalogFormatError(
                    source,
                    f"variant {record['code']} of {schema.name} has {len(record['cells'])} "
                    f"cells for {schema.role_count} roles",
                )
            projector.add_variant(
                VariantIdentity.from_cells(record["subsystem"], record["code"], record["cells"])
            )

        return projector

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SubsystemProjector):
            return NotImplemented
        return (
            [schema.to_record() for schema in self.subsystems]
            == [schema.to_record() for schema in other.subsystems]
            and self.roles.groupings() == other.roles.groupings()
            and set(self.variants) == set(other.variants)
        )

    __hash__ = None  # type: ignore[assignment]


def _validate_payload(source: Path, payload: Any) -> None:
    schema = json.loads(SCHEMA_PATH.read_text())
    validator_cls = validator_for(schema)
    validator_cls.check_schema(schema)
    validator = validator_cls(schema)

    errors: list[jsex.ValidationError] = sorted(
        validator.iter_errors(payload), key=lambda err: [str(part) for part in err.path]
    )
    if errors:
        first = errors[0]
        location = "/" + "/".join(str(part) for part in first.path)
        raise BadCatalogFormatError(source, f"{first.message} at {location} ({len(errors)} errors)")
