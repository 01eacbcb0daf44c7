#!/usr/bin/env python3
"""Project a saved subsystem projector onto genome records."""

from __future__ import annotations

import argparse
import json
import logging
import shutil
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from subsyshub import (  # noqa: E402
    GenomeDirectory,
    SubsystemProjector,
    normalize_variant_codes,
    save_genome,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Project subsystems onto genome records")
    parser.add_argument("projector", help="Subsystem projector file")
    parser.add_argument("inputs", nargs="+", help="Genome files, directories or glob patterns")
    parser.add_argument("--output-dir", required=True, help="Directory for updated genomes")
    parser.add_argument("--clear", action="store_true", help="Clear the output directory first")
    parser.add_argument(
        "--active",
        action="store_true",
        help="Only project variants whose code marks the subsystem as active",
    )
    parser.add_argument(
        "--patric",
        action="store_true",
        help="Normalize variant codes to 'active' and 'inactive'",
    )
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="INFO")
    return parser.parse_args(argv)


def prepare_output_dir(output_dir: Path, clear: bool, logger: logging.Logger) -> None:
    if not output_dir.exists():
        logger.info("Creating output directory %s.", output_dir)
        output_dir.mkdir(parents=True)
    elif not output_dir.is_dir():
        raise FileNotFoundError(f"Output directory {output_dir} is invalid.")
    elif clear:
        logger.info("Erasing output directory %s.", output_dir)
        for child in output_dir.iterdir():
            if child.is_dir():
                shutil.rmtree(child)
            else:
                child.unlink()
    else:
        logger.info("Output will be to %s.", output_dir)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logger = logging.getLogger("subsyshub.project")

    projector_path = Path(args.projector)
    if not projector_path.is_file():
        raise FileNotFoundError(f"Projector file {projector_path} not found or unreadable.")
    output_dir = Path(args.output_dir)
    prepare_output_dir(output_dir, args.clear, logger)

    logger.info("Reading subsystem projector from %s.", projector_path)
    projector = SubsystemProjector.load(projector_path)

    directory = GenomeDirectory(args.inputs)
    logger.info("%d genomes found.", len(directory))
    summary: dict[str, dict[str, int]] = {}
    for genome in directory:
        installed = projector.project(genome, active_only=args.active)
        changed = normalize_variant_codes(genome) if args.patric else 0
        target = output_dir / f"{genome.id}.gto"
        logger.info("%d subsystems projected onto %s; saving to %s.", installed, genome, target)
        save_genome(genome, target)
        summary[genome.id] = {
            "installed": installed,
            "subsystems": len(genome.subsystems()),
            "codes_normalized": changed,
        }

    print(json.dumps({"genomes": summary}, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
