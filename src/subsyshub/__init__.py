"""Subsystem projection primitives.

This package builds a deduplicated catalog of subsystem variants from
curated spreadsheets, reports curation errors found along the way, and
projects the catalog onto new genome records.
"""

from .adapters import (
    CoreSeedSpreadsheet,
    GenomeDirectory,
    InMemorySpreadsheet,
    SpreadsheetRow,
    SpreadsheetSource,
    load_genome,
    save_genome,
    scan_subsystem_directory,
)
from .analyzers import (
    AnalyzerReport,
    CatalogBuilderAnalyzer,
    ErrorTrackingAnalyzer,
    RoleMismatchAnalyzer,
    SpreadsheetAnalyzer,
)
from .classifier import CellClassifier, CellEvent, expand_feature_token
from .config import (
    AnalyzerSpec,
    ClassificationOutcome,
    PipelineSettings,
    SubsystemLayout,
)
from .errors import (
    AnalyzerClosedError,
    BadCatalogFormatError,
    SpreadsheetFormatError,
    SubsysHubError,
)
from .index import GenomeRoleIndex
from .models import Feature, Genome, SubsystemRow
from .pipeline import PipelineRunReport, SubsystemPipeline
from .profiles import ProjectionProfile, ProjectionProfileLoader
from .projector import SubsystemProjector
from .registry import (
    AnalyzerContext,
    AnalyzerPluginSpec,
    AnalyzerRegistry,
    build_default_analyzer_registry,
)
from .roles import RoleCatalog, RoleSet, normalize_role
from .schema import SubsystemSchema
from .tables import write_subsystem_table
from .variants import VariantIdentity, is_active, normalize_variant_codes

__all__ = [
    "AnalyzerClosedError",
    "AnalyzerContext",
    "AnalyzerPluginSpec",
    "AnalyzerRegistry",
    "AnalyzerReport",
    "AnalyzerSpec",
    "BadCatalogFormatError",
    "CatalogBuilderAnalyzer",
    "CellClassifier",
    "CellEvent",
    "ClassificationOutcome",
    "CoreSeedSpreadsheet",
    "ErrorTrackingAnalyzer",
    "Feature",
    "Genome",
    "GenomeDirectory",
    "GenomeRoleIndex",
    "InMemorySpreadsheet",
    "PipelineRunReport",
    "PipelineSettings",
    "ProjectionProfile",
    "ProjectionProfileLoader",
    "RoleCatalog",
    "RoleMismatchAnalyzer",
    "RoleSet",
    "SpreadsheetAnalyzer",
    "SpreadsheetFormatError",
    "SpreadsheetRow",
    "SpreadsheetSource",
    "SubsysHubError",
    "SubsystemLayout",
    "SubsystemPipeline",
    "SubsystemProjector",
    "SubsystemRow",
    "SubsystemSchema",
    "VariantIdentity",
    "build_default_analyzer_registry",
    "expand_feature_token",
    "is_active",
    "load_genome",
    "normalize_role",
    "normalize_variant_codes",
    "save_genome",
    "scan_subsystem_directory",
    "write_subsystem_table",
]
