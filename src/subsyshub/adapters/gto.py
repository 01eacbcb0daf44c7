"""JSON genome record (GTO) reader and writer."""

from __future__ import annotations

import glob
import json
import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from subsyshub.models import Feature, Genome, SubsystemRow

logger = logging.getLogger(__name__)

GENOME_SUFFIXES: tuple[str, ...] = (".gto", ".json")


def _is_genome_file(path: Path) -> bool:
    return path.suffix.lower() in GENOME_SUFFIXES


def expand_genome_paths(input_paths: str | Path | Iterable[str | Path]) -> list[Path]:
    """Expand file, directory, or glob inputs into concrete genome file paths."""

    if isinstance(input_paths, (str, Path)):
        items: list[str | Path] = [input_paths]
    else:
        items = list(input_paths)

    resolved: list[Path] = []
    for item in items:
        expanded_item = os.path.expandvars(os.path.expanduser(str(item)))
        item_path = Path(expanded_item)

        if item_path.is_dir():
            resolved.extend(
                sorted(
                    path
                    for path in item_path.iterdir()
                    if path.is_file() and _is_genome_file(path)
                )
            )
            continue

        if item_path.exists():
            resolved.append(item_path)
            continue

        matches = [Path(path) for path in glob.glob(expanded_item)]
        resolved.extend(sorted(match for match in matches if _is_genome_file(match)))

    return resolved


def _feature_type(fid: str) -> str:
    # fig|83333.1.peg.4 -> peg
    parts = fid.rsplit(".", 2)
    return parts[-2] if len(parts) == 3 else "peg"


def genome_from_payload(payload: dict[str, Any]) -> Genome:
    metadata = {
        key: value
        for key, value in payload.items()
        if key not in {"id", "scientific_name", "features", "subsystems"}
    }
    genome = Genome(
        str(payload["id"]),
        name=str(payload.get("scientific_name", "")),
        metadata=metadata,
    )
    for raw in payload.get("features", []):
        fid = str(raw["id"])
        genome.add_feature(
            Feature(
                id=fid,
                type=str(raw.get("type") or _feature_type(fid)),
                function=str(raw.get("function") or ""),
                metadata={
                    key: value
                    for key, value in raw.items()
                    if key not in {"id", "type", "function"}
                },
            )
        )
    for raw in payload.get("subsystems", []):
        genome.install_subsystem(SubsystemRow.from_row(raw))
    return genome


def genome_to_payload(genome: Genome) -> dict[str, Any]:
    payload = dict(genome.metadata)
    payload.update(
        {
            "id": genome.id,
            "scientific_name": genome.name,
            "features": [feature.to_row() for feature in genome.features()],
            "subsystems": [row.to_row() for row in genome.subsystems()],
        }
    )
    return payload


def load_genome(path: str | Path) -> Genome:
    source = Path(path)
    with source.open() as stream:
        return genome_from_payload(json.load(stream))


def save_genome(genome: Genome, path: str | Path) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w") as stream:
        json.dump(genome_to_payload(genome), stream, indent=2)


class GenomeDirectory:
    """Genome files found under one or more input paths, loaded lazily."""

    def __init__(self, input_paths: str | Path | Iterable[str | Path]) -> None:
        self.paths = expand_genome_paths(input_paths)

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[Genome]:
        for _, genome in self.with_paths():
            yield genome

    def with_paths(self) -> Iterator[tuple[Path, Genome]]:
        for path in self.paths:
            logger.debug("Loading genome from %s.", path)
            yield path, load_genome(path)
