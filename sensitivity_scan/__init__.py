"""
Sensitivity Scan

Classifies every column of a catalog schema against a user-supplied
sensitivity framework using an external classification oracle, then
aggregates the labels into per-table sensitivity summaries and handling
recommendations.

Pipeline:
- SchemaIntrospector: column metadata from the catalog's information schema
- PromptBuilder: one deterministic classification request per column
- ClassificationOrchestrator: bounded-concurrency oracle calls with retry,
  circuit breaker and cancellation
- ResultAggregator: per-table counts, HIGH/LOW sensitivity, actions
"""

from .aggregator import (
    ResultAggregator,
    SensitiveColumn,
    recommend,
    DEFAULT_ACTION,
    REVIEW_ACTION,
    UNCLASSIFIED,
)

from .catalog import (
    CatalogConnector,
    CatalogColumnRow,
    InMemoryCatalog,
    SnowflakeCatalog,
)

from .config import ScanSettings

from .exceptions import (
    ScanError,
    ConfigurationError,
    CatalogConnectionError,
    CatalogQueryError,
    NotFoundError,
    CatalogPermissionError,
    OracleError,
    TransientOracleError,
    ClassificationUnavailable,
    AnomalousLabel,
)

from .framework import (
    CategoryDef,
    SensitivityFramework,
    MAX_CATEGORIES,
    example_framework,
)

from .introspection import SchemaIntrospector

from .models import (
    ColumnMetadata,
    LabelScore,
    ClassificationResult,
    ClassificationRun,
    RunStatus,
    SensitivityLevel,
    TableSummary,
    SchemaSummary,
)

from .oracles import (
    ClassificationOracle,
    OracleOptions,
    OracleResponse,
    CortexClassifyOracle,
    OpenAIClassifyOracle,
    StaticLabelOracle,
)

from .orchestrator import ClassificationOrchestrator, classify_all
from .pipeline import SensitivityScanPipeline, build_oracle, run_scan
from .prompt_builder import PromptBuilder, ClassificationRequest, NO_COMMENT_PLACEHOLDER
from .report import ScanReport, ColumnDetail
from .type_normalizer import normalize_type
from .utils import ScanAuditLogger

__all__ = [
    # Pipeline
    "SensitivityScanPipeline",
    "run_scan",
    "build_oracle",
    "ScanSettings",
    "ScanReport",
    "ColumnDetail",
    # Introspection
    "SchemaIntrospector",
    "normalize_type",
    "CatalogConnector",
    "CatalogColumnRow",
    "InMemoryCatalog",
    "SnowflakeCatalog",
    # Framework and prompts
    "CategoryDef",
    "SensitivityFramework",
    "MAX_CATEGORIES",
    "example_framework",
    "PromptBuilder",
    "ClassificationRequest",
    "NO_COMMENT_PLACEHOLDER",
    # Oracles
    "ClassificationOracle",
    "OracleOptions",
    "OracleResponse",
    "CortexClassifyOracle",
    "OpenAIClassifyOracle",
    "StaticLabelOracle",
    # Classification
    "ClassificationOrchestrator",
    "classify_all",
    "ColumnMetadata",
    "LabelScore",
    "ClassificationResult",
    "ClassificationRun",
    "RunStatus",
    # Aggregation
    "ResultAggregator",
    "SensitiveColumn",
    "recommend",
    "SensitivityLevel",
    "TableSummary",
    "SchemaSummary",
    "DEFAULT_ACTION",
    "REVIEW_ACTION",
    "UNCLASSIFIED",
    # Errors
    "ScanError",
    "ConfigurationError",
    "CatalogConnectionError",
    "CatalogQueryError",
    "NotFoundError",
    "CatalogPermissionError",
    "OracleError",
    "TransientOracleError",
    "ClassificationUnavailable",
    "AnomalousLabel",
    # Audit
    "ScanAuditLogger",
]

__version__ = "1.0.0"
