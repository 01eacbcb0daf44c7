"""Projection profile loader for subsystem directory layouts and run settings."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from subsyshub.config import AnalyzerSpec, PipelineSettings, SubsystemLayout


@dataclass(frozen=True)
class ProjectionProfile:
    """Serializable profile describing how to scan subsystems and run analyzers."""

    name: str
    description: str
    layout: SubsystemLayout
    settings: PipelineSettings
    analyzers: tuple[AnalyzerSpec, ...]


class ProjectionProfileLoader:
    """Load profile JSON from ``config/profiles`` or a custom path."""

    def __init__(self, profiles_dir: str | Path | None = None) -> None:
        if profiles_dir is None:
            profiles_dir = Path(__file__).resolve().parents[2] / "config" / "profiles"
        self.profiles_dir = Path(profiles_dir)

    def list_profiles(self) -> list[str]:
        """Return available profile names from the configured profile directory."""

        return sorted(path.stem for path in self.profiles_dir.glob("*.json"))

    def load(self, name_or_path: str | Path) -> ProjectionProfile:
        """Load a profile by name (for example, ``coreseed``) or explicit path."""

        path = self._resolve_path(name_or_path)
        payload = json.loads(path.read_text())
        return self.parse(payload)

    def _resolve_path(self, name_or_path: str | Path) -> Path:
        requested = Path(name_or_path)

        if requested.exists():
            return requested

        candidate = self.profiles_dir / f"{requested}.json"
        if candidate.exists():
            return candidate

        raise FileNotFoundError(
            f"Profile not found: {name_or_path}. Available: {', '.join(self.list_profiles())}"
        )

    @staticmethod
    def parse(payload: dict[str, Any]) -> ProjectionProfile:
        raw_layout = payload.get("layout", {})
        if not isinstance(raw_layout, dict):
            raise ValueError("Profile layout must be an object")
        defaults = SubsystemLayout()
        layout = SubsystemLayout(
            spreadsheet_file=str(raw_layout.get("spreadsheet_file", defaults.spreadsheet_file)),
            classification_file=str(
                raw_layout.get("classification_file", defaults.classification_file)
            ),
            exchangeable_marker=str(
                raw_layout.get("exchangeable_marker", defaults.exchangeable_marker)
            ),
            excluded_tokens=tuple(
                str(token).strip().lower()
                for token in raw_layout.get("excluded_tokens", defaults.excluded_tokens)
                if str(token).strip()
            ),
        )

        raw_pipeline = payload.get("pipeline", {})
        if not isinstance(raw_pipeline, dict):
            raise ValueError("Profile pipeline must be an object")
        settings = PipelineSettings(
            batch_size=int(raw_pipeline.get("batch_size", 100)),
            workers=int(raw_pipeline.get("workers", 1)),
            skip_inactive_rows=bool(raw_pipeline.get("skip_inactive_rows", True)),
        )

        analyzers: list[AnalyzerSpec] = []
        for raw in payload.get("analyzers", []):
            params = raw.get("params", {})
            if not isinstance(params, dict):
                raise ValueError(f"Analyzer {raw.get('name')} params must be an object")
            analyzers.append(AnalyzerSpec(name=str(raw["name"]).strip().lower(), params=dict(params)))

        return ProjectionProfile(
            name=str(payload["name"]),
            description=str(payload.get("description", "")),
            layout=layout,
            settings=settings,
            analyzers=tuple(analyzers),
        )
