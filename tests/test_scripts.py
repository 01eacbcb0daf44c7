import importlib.util
import json
import subprocess
import sys
from pathlib import Path

import pytest

from subsystem_fixtures import (
    HIS_B,
    HIS_D,
    HIS_G,
    genome_payload,
    write_genomes,
    write_subsystem_tree,
)

REPO_ROOT = Path(__file__).resolve().parents[1]


def _load_script(name: str):
    module_path = REPO_ROOT / "scripts" / f"{name}.py"
    spec = importlib.util.spec_from_file_location(f"{name}_script", module_path)
    assert spec is not None
    assert spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    spec.loader.exec_module(module)
    return module


def _build(tmp_path: Path, capsys) -> tuple[Path, dict]:
    gto_dir = write_genomes(tmp_path / "gtos")
    subsys_dir = write_subsystem_tree(tmp_path / "subsystems")
    projector_path = tmp_path / "catalog" / "projector.json"

    module = _load_script("build_projector")
    exit_code = module.main(
        [
            str(gto_dir),
            str(subsys_dir),
            "--output-dir",
            str(tmp_path / "reports"),
            "-o",
            str(projector_path),
            "--genome-out",
            str(tmp_path / "updated"),
            "--batch-size",
            "2",
            "--log-level",
            "WARNING",
        ]
    )
    assert exit_code == 0
    return projector_path, json.loads(capsys.readouterr().out)


def test_build_projector_script_runs_all_analyzers(tmp_path: Path, capsys) -> None:
    projector_path, summary = _build(tmp_path, capsys)

    assert summary["profile"] == "coreseed"
    assert summary["subsystems"] == 1
    assert summary["genomes"] == 3
    assert summary["batches"] == 2
    assert summary["skipped_rows"] == 1
    assert summary["variants"] == 2
    assert summary["failed_analyzers"] == []
    assert summary["analyzers"]["catalog"]["instantiations"] == 1
    assert summary["analyzers"]["errors"]["errors"] == 3

    assert projector_path.is_file()
    assert (tmp_path / "reports" / "errors.tbl").is_file()
    assert (tmp_path / "reports" / "roles.tbl").is_file()

    updated = json.loads((tmp_path / "updated" / "562.5.gto").read_text())
    assert [row["name"] for row in updated["subsystems"]] == ["Histidine Biosynthesis"]
    assert updated["domain"] == "Bacteria"
    assert json.loads((tmp_path / "updated" / "83333.1.gto").read_text())["subsystems"] == []
    assert "subsystems" not in json.loads((tmp_path / "gtos" / "562.5.gto").read_text())


def test_project_genomes_script_normalizes_codes(tmp_path: Path, capsys) -> None:
    projector_path, _ = _build(tmp_path, capsys)
    inputs = tmp_path / "new"
    inputs.mkdir()
    (inputs / "999.1.gto").write_text(
        json.dumps(genome_payload("999.1", {"1": HIS_G, "2": HIS_D, "3": HIS_B}))
    )
    (inputs / "888.1.json").write_text(json.dumps(genome_payload("888.1", {"1": HIS_G})))
    output_dir = tmp_path / "projected"
    output_dir.mkdir()
    (output_dir / "stale.gto").write_text("{}")

    module = _load_script("project_genomes")
    exit_code = module.main(
        [
            str(projector_path),
            str(inputs),
            "--output-dir",
            str(output_dir),
            "--clear",
            "--active",
            "--patric",
            "--log-level",
            "WARNING",
        ]
    )
    summary = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert summary["genomes"]["999.1"] == {"installed": 1, "subsystems": 1, "codes_normalized": 1}
    assert summary["genomes"]["888.1"]["installed"] == 0
    assert not (output_dir / "stale.gto").exists()

    projected = json.loads((output_dir / "999.1.gto").read_text())
    row = projected["subsystems"][0]
    assert row["variant_code"] == "active"
    assert [binding["features"] for binding in row["role_bindings"]] == [
        ["fig|999.1.peg.1"],
        ["fig|999.1.peg.2"],
        ["fig|999.1.peg.3"],
    ]


def test_project_genomes_script_requires_projector(tmp_path: Path) -> None:
    module = _load_script("project_genomes")

    with pytest.raises(FileNotFoundError):
        module.main([str(tmp_path / "absent.json"), str(tmp_path), "--output-dir", str(tmp_path / "out")])


def test_subsystem_table_script_executes(tmp_path: Path) -> None:
    genome = genome_payload("999.1", {"1": HIS_G})
    genome["subsystems"] = [
        {
            "name": "Histidine Biosynthesis",
            "classification": ["Amino Acids and Derivatives", "Histidine Metabolism", ""],
            "variant_code": "active",
            "role_bindings": [{"role_id": HIS_G, "features": ["fig|999.1.peg.1"]}],
        }
    ]
    genome_path = tmp_path / "999.1.gto"
    genome_path.write_text(json.dumps(genome))

    result = subprocess.run(
        [
            sys.executable,
            str(REPO_ROOT / "scripts" / "subsystem_table.py"),
            str(genome_path),
            str(tmp_path / "table.tsv"),
        ],
        check=True,
        capture_output=True,
        text=True,
    )

    assert "1 subsystem bindings written for 999.1" in result.stdout
    lines = (tmp_path / "table.tsv").read_text().splitlines()
    assert lines[0].split("\t")[:3] == ["feature_id", "subsystem", "variant_code"]
    assert lines[1].startswith("fig|999.1.peg.1\tHistidine Biosynthesis\tactive")
