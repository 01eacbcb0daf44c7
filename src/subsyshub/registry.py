"""Analyzer registry: names from a profile to analyzers wired for one run."""

from __future__ import annotations

import importlib
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from subsyshub.analyzers import (
    CatalogBuilderAnalyzer,
    ErrorTrackingAnalyzer,
    RoleMismatchAnalyzer,
    SpreadsheetAnalyzer,
)
from subsyshub.config import AnalyzerSpec
from subsyshub.projector import SubsystemProjector

AnalyzerFactory = Callable[..., SpreadsheetAnalyzer]


@dataclass(frozen=True)
class AnalyzerContext:
    """State shared by every analyzer of one spreadsheet pass.

    ``projector`` is the catalog the pass fills, ``output_dir`` anchors
    relative report paths, and ``projector_path``, when set, is where the
    catalog builder saves the projector regardless of its profile entry.
    """

    projector: SubsystemProjector
    output_dir: Path = Path(".")
    projector_path: Path | None = None

    def report_path(self, value: str | Path) -> Path:
        path = Path(value)
        return path if path.is_absolute() else self.output_dir / path


@dataclass(frozen=True)
class AnalyzerPluginSpec:
    """Analyzer class imported at runtime and registered under ``name``."""

    name: str
    module: str
    class_name: str


class AnalyzerRegistry:
    """Map analyzer names to factories.

    Plain factories are called with the profile parameters only. Factories
    registered with ``uses_context=True`` also receive the run's
    ``AnalyzerContext`` as their first argument.
    """

    def __init__(self) -> None:
        self._factories: dict[str, tuple[AnalyzerFactory, bool]] = {}

    def register(self, name: str, factory: AnalyzerFactory, *, uses_context: bool = False) -> None:
        key = name.strip().lower()
        if not key:
            raise ValueError("Analyzer name cannot be empty")
        if key in self._factories:
            raise ValueError(f"Analyzer already registered: {name}")
        self._factories[key] = (factory, uses_context)

    def register_plugin(self, plugin: AnalyzerPluginSpec) -> None:
        module = importlib.import_module(plugin.module)
        self.register(plugin.name, getattr(module, plugin.class_name))

    def create(
        self,
        name: str,
        context: AnalyzerContext | None = None,
        **params: Any,
    ) -> SpreadsheetAnalyzer:
        """Instantiate a registered analyzer.

        Raises ``KeyError`` for an unknown name and ``ValueError`` when an
        analyzer that needs the run context is created without one.
        """

        key = name.strip().lower()
        if key not in self._factories:
            raise KeyError(
                f"Unknown analyzer '{name}'. Available: {', '.join(self.available())}"
            )
        factory, uses_context = self._factories[key]
        if not uses_context:
            return factory(**params)
        if context is None:
            raise ValueError(f"Analyzer '{key}' needs the run context")
        return factory(context, **params)

    def build(self, specs: Iterable[AnalyzerSpec], context: AnalyzerContext) -> list[SpreadsheetAnalyzer]:
        """Create the analyzers a profile lists, in order.

        A relative ``output_path`` parameter is taken to be under the
        context's output directory.
        """

        analyzers: list[SpreadsheetAnalyzer] = []
        for spec in specs:
            params: dict[str, Any] = dict(spec.params)
            if params.get("output_path") is not None:
                params["output_path"] = context.report_path(str(params["output_path"]))
            analyzers.append(self.create(spec.name, context, **params))
        return analyzers

    def available(self) -> list[str]:
        return sorted(self._factories)


def _catalog_builder(context: AnalyzerContext, **params: Any) -> CatalogBuilderAnalyzer:
    if context.projector_path is not None:
        params["output_path"] = context.projector_path
    return CatalogBuilderAnalyzer(projector=context.projector, **params)


def _report_writer(analyzer_cls: type[SpreadsheetAnalyzer], default_file: str) -> AnalyzerFactory:
    def factory(context: AnalyzerContext, **params: Any) -> SpreadsheetAnalyzer:
        output_path = params.pop("output_path", None)
        if output_path is None:
            output_path = context.report_path(default_file)
        return analyzer_cls(output_path=output_path, **params)

    return factory


def build_default_analyzer_registry() -> AnalyzerRegistry:
    """Create a registry preloaded with the built-in analyzers.

    Without an ``output_path`` the error tracker writes ``errors.tbl`` and
    the mismatch counter ``roles.tbl`` in the output directory.
    """

    registry = AnalyzerRegistry()
    registry.register(CatalogBuilderAnalyzer.name, _catalog_builder, uses_context=True)
    registry.register(
        ErrorTrackingAnalyzer.name,
        _report_writer(ErrorTrackingAnalyzer, "errors.tbl"),
        uses_context=True,
    )
    registry.register(
        RoleMismatchAnalyzer.name,
        _report_writer(RoleMismatchAnalyzer, "roles.tbl"),
        uses_context=True,
    )
    return registry
