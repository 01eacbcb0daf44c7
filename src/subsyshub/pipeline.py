"""Single-pass spreadsheet classification driving a set of analyzers."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from subsyshub.adapters.base import SpreadsheetRow, SpreadsheetSource
from subsyshub.analyzers.base import AnalyzerReport, SpreadsheetAnalyzer
from subsyshub.classifier import CellClassifier, CellEvent
from subsyshub.config import ClassificationOutcome, PipelineSettings
from subsyshub.index import GenomeRoleIndex
from subsyshub.models import Genome
from subsyshub.projector import SubsystemProjector
from subsyshub.schema import SubsystemSchema
from subsyshub.variants import is_active

logger = logging.getLogger(__name__)

BatchCallback = Callable[[list[Genome]], None]


@dataclass
class PipelineRunReport:
    """Execution summary for a pipeline run."""

    genomes: int = 0
    batches: int = 0
    rows: int = 0
    skipped_rows: int = 0
    outcomes: Counter[str] = field(default_factory=Counter)
    analyzer_reports: dict[str, AnalyzerReport] = field(default_factory=dict)
    failed_analyzers: list[str] = field(default_factory=list)

    @property
    def events(self) -> int:
        return sum(self.outcomes.values())


@dataclass
class _RunState:
    report: PipelineRunReport
    live: list[SpreadsheetAnalyzer]


class SubsystemPipeline:
    """Classify every active spreadsheet row once and fan events out to analyzers.

    Genomes are processed in batches. Each batch gets fresh role indices
    (built in parallel when ``workers > 1``), then every spreadsheet is read
    in file order and the rows for genomes in the batch are classified. Row
    order and callback order are deterministic. An analyzer that fails with
    an I/O error is dropped; the others keep running.
    """

    def __init__(
        self,
        *,
        projector: SubsystemProjector,
        spreadsheets: Sequence[SpreadsheetSource],
        analyzers: Sequence[SpreadsheetAnalyzer],
        settings: PipelineSettings | None = None,
        on_batch_complete: BatchCallback | None = None,
    ) -> None:
        self.projector = projector
        self.spreadsheets = list(spreadsheets)
        self.analyzers = list(analyzers)
        self.settings = settings or PipelineSettings()
        self.on_batch_complete = on_batch_complete
        self.classifier = CellClassifier(projector.roles)

    def run(self, genomes: Iterable[Genome]) -> PipelineRunReport:
        state = _RunState(report=PipelineRunReport(), live=list(self.analyzers))

        for sheet in self.spreadsheets:
            self.projector.add_subsystem(sheet.schema)

        batch: list[Genome] = []
        for genome in genomes:
            if len(batch) >= self.settings.batch_size:
                self._process_batch(batch, state)
                batch = []
            batch.append(genome)
        if batch:
            self._process_batch(batch, state)

        for analyzer in list(state.live):
            try:
                state.report.analyzer_reports[analyzer.name] = analyzer.terminate()
            except OSError:
                logger.exception("Analyzer %s could not write its report.", analyzer.name)
                state.report.failed_analyzers.append(analyzer.name)

        logger.info(
            "All done. %d genomes in %d batches, %d rows classified (%d inactive skipped), %s.",
            state.report.genomes,
            state.report.batches,
            state.report.rows,
            state.report.skipped_rows,
            dict(state.report.outcomes),
        )
        return state.report

    def _process_batch(self, batch: list[Genome], state: _RunState) -> None:
        logger.info("Processing batch of %d genomes.", len(batch))
        state.report.batches += 1
        state.report.genomes += len(batch)
        genome_map = {genome.id: genome for genome in batch}
        indices = self._build_indices(batch)

        for sheet in self.spreadsheets:
            logger.info("Reading spreadsheet for subsystem %s.", sheet.schema.name)
            for row in sheet.rows():
                genome = genome_map.get(row.genome_id)
                if genome is None:
                    continue
                if self.settings.skip_inactive_rows and not is_active(row.variant_code):
                    state.report.skipped_rows += 1
                    continue
                self._process_row(genome, indices[genome.id], sheet.schema, row, state)

        if self.on_batch_complete is not None:
            self.on_batch_complete(batch)

    def _build_indices(self, batch: list[Genome]) -> dict[str, GenomeRoleIndex]:
        if self.settings.workers > 1 and len(batch) > 1:
            with ThreadPoolExecutor(max_workers=self.settings.workers) as pool:
                built = list(pool.map(self.projector.compute_role_index, batch))
        else:
            built = [self.projector.compute_role_index(genome) for genome in batch]
        return {genome.id: index for genome, index in zip(batch, built)}

    def _process_row(
        self,
        genome: Genome,
        role_index: GenomeRoleIndex,
        schema: SubsystemSchema,
        row: SpreadsheetRow,
        state: _RunState,
    ) -> None:
        events: list[CellEvent] = []
        for column, role in enumerate(schema.roles):
            events.extend(
                self.classifier.classify(genome, role_index, column, role, row.tokens(column))
            )

        state.report.rows += 1
        self._dispatch(state, "open_row", genome, role_index, schema, row.variant_code)
        for event in events:
            state.report.outcomes[event.outcome.value] += 1
            self._log_event(schema, event)
            if event.outcome is ClassificationOutcome.GOOD:
                self._dispatch(state, "good", event.column, event.feature)
            elif event.outcome is ClassificationOutcome.MISSING:
                self._dispatch(state, "missing", event.column, event.feature_id, event.expected_role)
            elif event.outcome is ClassificationOutcome.REPLACEABLE:
                self._dispatch(
                    state,
                    "replaceable",
                    event.column,
                    event.feature_id,
                    event.expected_role,
                    event.substitutes,
                )
            else:
                self._dispatch(state, "incorrect", event.column, event.feature, event.expected_role)
        self._dispatch(state, "close_row")

    def _dispatch(self, state: _RunState, method: str, *args: object) -> None:
        for analyzer in list(state.live):
            try:
                getattr(analyzer, method)(*args)
            except OSError:
                logger.exception("Analyzer %s failed during %s; dropping it.", analyzer.name, method)
                state.live.remove(analyzer)
                state.report.failed_analyzers.append(analyzer.name)
                try:
                    analyzer.abandon()
                except OSError:
                    logger.warning("Analyzer %s could not release its resources.", analyzer.name)

    @staticmethod
    def _log_event(schema: SubsystemSchema, event: CellEvent) -> None:
        if event.outcome is ClassificationOutcome.REPLACEABLE:
            logger.warning(
                "Feature ID %s does not carry role \"%s\" in subsystem %s: using %s.",
                event.feature_id,
                event.expected_role,
                schema,
                ", ".join(event.substitutes),
            )
        elif event.outcome is ClassificationOutcome.MISSING:
            logger.warning(
                "Feature ID %s not found for role \"%s\" in subsystem %s. No substitute found.",
                event.feature_id,
                event.expected_role,
                schema,
            )
        elif event.outcome is ClassificationOutcome.INCORRECT:
            logger.warning(
                "Feature ID %s does not contain role \"%s\" in subsystem %s. No substitute found.",
                event.feature_id,
                event.expected_role,
                schema,
            )
