import json
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from subsyshub.errors import BadCatalogFormatError  # noqa: E402
from subsyshub.index import GenomeRoleIndex  # noqa: E402
from subsyshub.models import Feature, Genome, SubsystemRow  # noqa: E402
from subsyshub.projector import FORMAT_NAME, SubsystemProjector  # noqa: E402
from subsyshub.roles import RoleCatalog  # noqa: E402
from subsyshub.schema import SubsystemSchema  # noqa: E402
from subsyshub.variants import VariantIdentity  # noqa: E402

HIS_G = "ATP phosphoribosyltransferase (EC 2.4.2.17)"
HIS_D = "Histidinol dehydrogenase (EC 1.1.1.23)"
HIS_B = "Imidazoleglycerol-phosphate dehydratase (EC 4.2.1.19)"

HISTIDINE = SubsystemSchema(
    name="Histidine Biosynthesis",
    superclass="Amino Acids and Derivatives",
    klass="Histidine Metabolism",
    roles=(HIS_G, HIS_D, HIS_B),
)
PROLINE = SubsystemSchema(
    name="Proline Synthesis",
    superclass="Amino Acids and Derivatives",
    klass="Proline and 4-hydroxyproline",
    roles=("Glutamate 5-kinase (EC 2.7.2.11)", "Pyrroline-5-carboxylate reductase (EC 1.5.1.2)"),
)


def _projector() -> SubsystemProjector:
    projector = SubsystemProjector()
    projector.add_subsystem(HISTIDINE)
    projector.add_subsystem(PROLINE)
    return projector


def _full_genome() -> Genome:
    return Genome(
        "562.5",
        features=[
            Feature("fig|562.5.peg.1", function="ATP phosphoribosyltransferase"),
            Feature("fig|562.5.peg.2", function="Histidinol dehydrogenase"),
            Feature("fig|562.5.peg.5", function=HIS_B),
        ],
    )


def test_add_variant_reports_new_only_once() -> None:
    projector = _projector()
    variant = VariantIdentity.of("Histidine Biosynthesis", "1", [0, 1])

    assert projector.add_variant(variant) is True
    assert len(projector.variants) == 1
    assert projector.add_variant(VariantIdentity.of("Histidine Biosynthesis", "1", [1, 0])) is False
    assert len(projector.variants) == 1


def test_add_variant_rejects_unknown_subsystem_and_wide_variants() -> None:
    projector = _projector()

    with pytest.raises(KeyError):
        projector.add_variant(VariantIdentity.of("Unknown", "1", [0]))
    with pytest.raises(ValueError):
        projector.add_variant(VariantIdentity.of("Proline Synthesis", "1", [0, 2]))


def test_add_subsystem_registers_roles_once() -> None:
    projector = SubsystemProjector()

    assert projector.add_subsystem(HISTIDINE) is True
    assert projector.add_subsystem(SubsystemSchema(name="Histidine Biosynthesis")) is False
    assert len(projector.roles) == 3
    assert projector.subsystem("Histidine Biosynthesis").roles == HISTIDINE.roles


def test_concurrent_add_variant_keeps_one_entry() -> None:
    projector = _projector()

    def add(_: int) -> bool:
        return projector.add_variant(VariantIdentity.of("Histidine Biosynthesis", "1", [0, 1, 2]))

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(add, range(64)))

    assert results.count(True) == 1
    assert len(projector.variants) == 1


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    projector = _projector()
    projector.roles.find_or_insert("histidinol  dehydrogenase")
    projector.add_variant(VariantIdentity.of("Histidine Biosynthesis", "1", [0, 1, 2]))
    projector.add_variant(VariantIdentity.of("Histidine Biosynthesis", "2", [0]))
    projector.add_variant(VariantIdentity.of("Proline Synthesis", "-1", [1]))

    path = tmp_path / "nested" / "projector.json"
    projector.save(path)
    loaded = SubsystemProjector.load(path)

    assert loaded == projector
    assert loaded.roles.groupings() == projector.roles.groupings()
    assert set(loaded.variants) == set(projector.variants)
    assert [schema.to_record() for schema in loaded.subsystems] == [
        schema.to_record() for schema in projector.subsystems
    ]

    payload = json.loads(path.read_text())
    assert payload["format"] == FORMAT_NAME
    assert {"subsystem": "Proline Synthesis", "code": "-1", "cells": "01"} in payload["variants"]


def test_load_rejects_corrupt_and_foreign_files(tmp_path: Path) -> None:
    not_json = tmp_path / "garbage.json"
    not_json.write_text("this is not a projector")
    foreign = tmp_path / "foreign.json"
    foreign.write_text(json.dumps({"format": "something.else", "version": 1}))

    with pytest.raises(BadCatalogFormatError) as excinfo:
        SubsystemProjector.load(not_json)
    assert isinstance(excinfo.value, OSError)
    assert excinfo.value.path == not_json

    with pytest.raises(BadCatalogFormatError):
        SubsystemProjector.load(foreign)

    with pytest.raises(FileNotFoundError):
        SubsystemProjector.load(tmp_path / "absent.json")


def test_load_rejects_inconsistent_variants(tmp_path: Path) -> None:
    projector = _projector()
    projector.add_variant(VariantIdentity.of("Proline Synthesis", "1", [0, 1]))
    payload = projector.to_payload()
    payload["variants"][0]["cells"] = "110"
    path = tmp_path / "projector.json"
    path.write_text(json.dumps(payload))

    with pytest.raises(BadCatalogFormatError):
        SubsystemProjector.load(path)

    payload["variants"][0].update({"subsystem": "Unknown", "cells": "11"})
    path.write_text(json.dumps(payload))
    with pytest.raises(BadCatalogFormatError):
        SubsystemProjector.load(path)


def test_project_installs_the_largest_satisfiable_variant() -> None:
    projector = _projector()
    projector.add_variant(VariantIdentity.of("Histidine Biosynthesis", "1", [0, 1, 2]))
    projector.add_variant(VariantIdentity.of("Histidine Biosynthesis", "2", [0]))
    projector.add_variant(VariantIdentity.of("Proline Synthesis", "1", [0, 1]))

    full = _full_genome()
    partial = Genome("83333.1", features=[Feature("fig|83333.1.peg.4", function=HIS_G)])

    assert projector.project(full) == 1
    assert projector.project(partial) == 1

    row = full.subsystem("Histidine Biosynthesis")
    assert row.variant_code == "1"
    assert row.classifications == ("Amino Acids and Derivatives", "Histidine Metabolism", "")
    assert row.bindings == [
        (HIS_G, ["fig|562.5.peg.1"]),
        (HIS_D, ["fig|562.5.peg.2"]),
        (HIS_B, ["fig|562.5.peg.5"]),
    ]
    assert partial.subsystem("Histidine Biosynthesis").variant_code == "2"
    assert full.subsystem("Proline Synthesis") is None


def test_project_active_only_skips_inactive_variants() -> None:
    projector = _projector()
    projector.add_variant(VariantIdentity.of("Histidine Biosynthesis", "-1", [0]))

    skipped = _full_genome()
    assert projector.project(skipped, active_only=True) == 0
    assert skipped.subsystems() == []

    installed = _full_genome()
    assert projector.project(installed) == 1
    assert installed.subsystem("Histidine Biosynthesis").variant_code == "-1"


def test_project_leaves_existing_rows_and_empty_genomes_alone() -> None:
    projector = _projector()
    projector.add_variant(VariantIdentity.of("Histidine Biosynthesis", "1", [0, 1, 2]))
    projector.add_variant(VariantIdentity.of("Histidine Biosynthesis", "0", []))

    curated = _full_genome()
    curated.install_subsystem(SubsystemRow("Histidine Biosynthesis", "curated"))
    assert projector.project(curated) == 0
    assert curated.subsystem("Histidine Biosynthesis").variant_code == "curated"

    assert projector.project(Genome("0.0")) == 0
    rna_only = Genome("1.1", features=[Feature("fig|1.1.rna.1", type="rna", function=HIS_G)])
    assert projector.project(rna_only) == 0


def test_explicit_empty_catalog_and_index_are_used_as_given() -> None:
    roles = RoleCatalog()
    projector = SubsystemProjector(roles)
    assert projector.roles is roles

    projector.add_subsystem(HISTIDINE)
    projector.add_variant(VariantIdentity.of("Histidine Biosynthesis", "2", [0]))
    assert len(roles) == 3

    genome = _full_genome()
    assert projector.project(genome, role_index=GenomeRoleIndex(genome.id)) == 0
    assert genome.subsystems() == []
    assert projector.project(genome) == 1
