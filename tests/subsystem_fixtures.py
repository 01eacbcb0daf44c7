"""Shared on-disk fixtures: a small CoreSEED subsystem tree and genome records."""

import json
from pathlib import Path

HIS_G = "ATP phosphoribosyltransferase (EC 2.4.2.17)"
HIS_D = "Histidinol dehydrogenase (EC 1.1.1.23)"
HIS_B = "Imidazoleglycerol-phosphate dehydratase (EC 4.2.1.19)"
WRONG = "Histidinol-phosphate aminotransferase (EC 2.6.1.9)"

SPREADSHEET = (
    f"HisG\t{HIS_G}\n"
    f"HisD\t{HIS_D}\n"
    f"HisB\t{HIS_B}\n"
    "//\n"
    "groupA\t1\n"
    "//\n"
    "83333.1\t1\t4\t7\t\n"
    "511145.12\t1\t1\t2\t3\n"
    "562.5\t1\t1\t2\t3\n"
    "83333.1\t-1\t\t9\t\n"
)


def write_subsystem_tree(root: Path) -> Path:
    histidine = root / "Histidine_Biosynthesis"
    histidine.mkdir(parents=True)
    (histidine / "EXCHANGABLE").write_text("1\n")
    (histidine / "CLASSIFICATION").write_text(
        "Amino Acids and Derivatives\tHistidine Metabolism\t\n"
    )
    (histidine / "spreadsheet").write_text(SPREADSHEET)

    experimental = root / "Experimental_Stuff"
    experimental.mkdir()
    (experimental / "EXCHANGABLE").write_text("1\n")
    (experimental / "CLASSIFICATION").write_text("Experimental Subsystems\t\t\n")
    (experimental / "spreadsheet").write_text(f"HisG\t{HIS_G}\n//\n//\n83333.1\t1\t4\n")

    private = root / "Private_Work"
    private.mkdir()
    (private / "spreadsheet").write_text(f"HisG\t{HIS_G}\n//\n//\n83333.1\t1\t4\n")

    (root / "No_Spreadsheet").mkdir()
    return root


def genome_payload(genome_id: str, functions: dict[str, str], **extra) -> dict:
    payload = {
        "id": genome_id,
        "scientific_name": f"Genome {genome_id}",
        "features": [
            {"id": f"fig|{genome_id}.peg.{number}", "type": "CDS", "function": function}
            for number, function in functions.items()
        ],
    }
    payload.update(extra)
    return payload


def write_genomes(directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    payloads = [
        genome_payload("83333.1", {"4": HIS_G, "9": "hypothetical protein"}),
        genome_payload(
            "511145.12",
            {"1": "ATP phosphoribosyltransferase", "2": "Histidinol dehydrogenase", "3": WRONG},
        ),
        genome_payload(
            "562.5",
            {"1": HIS_G, "2": HIS_D, "3": "hypothetical protein", "5": HIS_B},
            domain="Bacteria",
        ),
    ]
    for payload in payloads:
        (directory / f"{payload['id']}.gto").write_text(json.dumps(payload))
    return directory
