"""Analyzer that builds the variant catalog and installs rows on genomes."""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path

from subsyshub.analyzers.base import AnalyzerReport, SpreadsheetAnalyzer
from subsyshub.models import Feature
from subsyshub.projector import SubsystemProjector
from subsyshub.variants import VariantIdentity

logger = logging.getLogger(__name__)


class CatalogBuilderAnalyzer(SpreadsheetAnalyzer):
    """Record a variant identity per row and instantiate the usable rows.

    A column is active whenever its cell lists a feature, whatever the
    outcome. A row is installed on its genome only if none of its references
    were Missing or Incorrect; Replaceable cells are bound to the substitute
    features.
    """

    name = "catalog"

    def __init__(
        self,
        *,
        projector: SubsystemProjector,
        output_path: str | Path | None = None,
        instantiate: bool = True,
    ) -> None:
        super().__init__()
        self.projector = projector
        self.output_path = Path(output_path) if output_path is not None else None
        self.instantiate = instantiate
        self.rows_scanned = 0
        self.new_variants = 0
        self.instantiations = 0
        self._active: set[int] = set()
        self._bindings: dict[int, list[str]] = defaultdict(list)
        self._usable = True
        if self.output_path is not None:
            logger.info("Subsystem projector will be written to %s.", self.output_path)

    def start_row(self) -> None:
        self._active = set()
        self._bindings = defaultdict(list)
        self._usable = True

    def record_good(self, column: int, feature: Feature) -> None:
        self._active.add(column)
        self._bindings[column].append(feature.id)

    def record_missing(self, column: int, feature_id: str, expected_role: str) -> None:
        self._active.add(column)
        self._usable = False

    def record_replaceable(
        self,
        column: int,
        feature_id: str,
        expected_role: str,
        substitutes: tuple[str, ...],
    ) -> None:
        self._active.add(column)
        self._bindings[column].extend(substitutes)

    def record_incorrect(self, column: int, feature: Feature, expected_role: str) -> None:
        self._active.add(column)
        self._usable = False
        logger.info(
            "Bad variant %s in %s due to missing role \"%s\". Original feature was %s (%s).",
            self.variant_code,
            self.schema,
            expected_role,
            feature.id,
            feature.function,
        )

    def end_row(self) -> None:
        if self.schema is None or self.genome is None:
            raise RuntimeError("close_row called before open_row")
        self.rows_scanned += 1
        variant = VariantIdentity(self.schema.name, self.variant_code, frozenset(self._active))
        if self.projector.add_variant(variant):
            self.new_variants += 1
            logger.debug("Added new variant %s.", variant)

        if self.instantiate and self._usable and self._active:
            self.projector.install(self.genome, self.schema, self.variant_code, self._bindings)
            self.instantiations += 1
            logger.debug("Good variant %s stored in %s.", variant, self.genome)

    def finish(self) -> AnalyzerReport:
        logger.info(
            "%d subsystem rows scanned, producing %d variant specifications. %d genome updates were made.",
            self.rows_scanned,
            self.new_variants,
            self.instantiations,
        )
        if self.output_path is not None:
            self.projector.save(self.output_path)

        return AnalyzerReport(
            name=self.name,
            counts={
                "rows_scanned": self.rows_scanned,
                "new_variants": self.new_variants,
                "instantiations": self.instantiations,
            },
            output_path=self.output_path,
        )
