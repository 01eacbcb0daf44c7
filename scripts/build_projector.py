#!/usr/bin/env python3
"""Apply curated subsystem spreadsheets to genomes and build the projector.

Scans a CoreSEED subsystem directory, installs the subsystems on the genome
records found in the input directory (in place, or into ``--genome-out``),
and runs the analyzers configured by the profile: the variant catalog
builder, the error tracker and the role-mismatch counter.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from subsyshub import (  # noqa: E402
    GenomeDirectory,
    PipelineSettings,
    ProjectionProfile,
    ProjectionProfileLoader,
    SpreadsheetAnalyzer,
    SubsystemPipeline,
    SubsystemProjector,
    build_default_analyzer_registry,
    save_genome,
    scan_subsystem_directory,
)
from subsyshub.models import Genome  # noqa: E402
from subsyshub.registry import AnalyzerContext, AnalyzerPluginSpec  # noqa: E402

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a subsystem projector from curated spreadsheets")
    parser.add_argument("gto_dir", help="Input genome directory")
    parser.add_argument("subsys_dir", help="CoreSEED subsystem directory")
    parser.add_argument("--output-dir", default=".", help="Directory for analyzer reports")
    parser.add_argument("--projector", "-o", help="Output file for the subsystem projector")
    parser.add_argument("--genome-out", help="Write updated genomes here instead of in place")
    parser.add_argument("--profile", default="coreseed", help="Profile name or JSON path")
    parser.add_argument("--profiles-dir", help="Directory holding profile JSON files")
    parser.add_argument("--batch-size", "-b", type=int, help="Number of genomes per batch")
    parser.add_argument("--workers", type=int, help="Threads used to index genomes in a batch")
    parser.add_argument(
        "--plugin",
        action="append",
        default=[],
        metavar="NAME=MODULE:CLASS",
        help="Register an extra analyzer class",
    )
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="INFO")
    return parser.parse_args(argv)


def resolve_settings(profile: ProjectionProfile, args: argparse.Namespace) -> PipelineSettings:
    settings = profile.settings
    return PipelineSettings(
        batch_size=args.batch_size if args.batch_size is not None else settings.batch_size,
        workers=args.workers if args.workers is not None else settings.workers,
        skip_inactive_rows=settings.skip_inactive_rows,
    )


def parse_plugin(raw: str) -> AnalyzerPluginSpec:
    name, _, target = raw.partition("=")
    module, _, class_name = target.partition(":")
    if not name or not module or not class_name:
        raise ValueError(f"Invalid plugin spec {raw!r}; expected NAME=MODULE:CLASS")
    return AnalyzerPluginSpec(name=name, module=module, class_name=class_name)


def build_analyzers(
    profile: ProjectionProfile,
    projector: SubsystemProjector,
    args: argparse.Namespace,
) -> list[SpreadsheetAnalyzer]:
    registry = build_default_analyzer_registry()
    for raw in args.plugin:
        registry.register_plugin(parse_plugin(raw))

    context = AnalyzerContext(
        projector=projector,
        output_dir=Path(args.output_dir),
        projector_path=Path(args.projector) if args.projector else None,
    )
    return registry.build(profile.analyzers, context)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logger = logging.getLogger("subsyshub.build")
    started = time.perf_counter()

    gto_dir = Path(args.gto_dir)
    if not gto_dir.is_dir():
        raise FileNotFoundError(f"GTO directory {gto_dir} not found or invalid.")

    profile = ProjectionProfileLoader(args.profiles_dir).load(args.profile)
    settings = resolve_settings(profile, args)
    logger.info("Profile %s loaded. Batch size is %d.", profile.name, settings.batch_size)

    spreadsheets = scan_subsystem_directory(args.subsys_dir, profile.layout)
    directory = GenomeDirectory(gto_dir)
    logger.info("%d genomes found to process.", len(directory))

    genome_out = Path(args.genome_out) if args.genome_out else None
    source_paths: dict[str, Path] = {}

    def genomes():
        for path, genome in directory.with_paths():
            genome.clear_subsystems()
            source_paths[genome.id] = path
            yield genome

    def save_batch(batch: list[Genome]) -> None:
        for genome in batch:
            source = source_paths.pop(genome.id)
            target = genome_out / source.name if genome_out is not None else source
            logger.info("Saving %s to %s.", genome, target)
            save_genome(genome, target)

    projector = SubsystemProjector()
    report = SubsystemPipeline(
        projector=projector,
        spreadsheets=spreadsheets,
        analyzers=build_analyzers(profile, projector, args),
        settings=settings,
        on_batch_complete=save_batch,
    ).run(genomes())

    payload = {
        "profile": profile.name,
        "subsystems": len(spreadsheets),
        "genomes": report.genomes,
        "batches": report.batches,
        "rows": report.rows,
        "skipped_rows": report.skipped_rows,
        "outcomes": dict(report.outcomes),
        "variants": len(projector.variants),
        "analyzers": {
            name: analyzer_report.counts
            for name, analyzer_report in report.analyzer_reports.items()
        },
        "failed_analyzers": report.failed_analyzers,
        "elapsed_seconds": round(time.perf_counter() - started, 2),
    }
    print(json.dumps(payload, indent=2))
    return 1 if report.failed_analyzers else 0


if __name__ == "__main__":
    raise SystemExit(main())
