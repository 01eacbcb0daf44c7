#!/usr/bin/env python3
"""Write the feature-to-subsystem table of a genome record."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from subsyshub import load_genome, write_subsystem_table  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Tabulate the subsystems installed on a genome")
    parser.add_argument("genome", help="Genome record (.gto or .json)")
    parser.add_argument("output", help="Output table (tab-separated)")
    args = parser.parse_args(argv)

    genome_path = Path(args.genome)
    if not genome_path.is_file():
        raise FileNotFoundError(f"Genome file {genome_path} not found or unreadable.")

    genome = load_genome(genome_path)
    count = write_subsystem_table(genome, args.output)
    print(f"{count} subsystem bindings written for {genome.id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
