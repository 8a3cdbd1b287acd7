"""
Sensitivity Scan Pipeline

Single invocable run: introspect a schema, classify every column, aggregate
results into a ScanReport.
"""

import logging
import threading
from datetime import datetime
from typing import Optional

from .aggregator import ResultAggregator
from .catalog.base import CatalogConnector
from .config import ScanSettings
from .exceptions import ClassificationUnavailable, ConfigurationError
from .framework import SensitivityFramework
from .introspection import SchemaIntrospector
from .models import ClassificationRun
from .oracles.base import ClassificationOracle
from .orchestrator import ClassificationOrchestrator
from .report import ColumnDetail, ScanReport
from .utils.logger import ScanAuditLogger

logger = logging.getLogger(__name__)


def build_oracle(settings: ScanSettings, catalog: Optional[CatalogConnector] = None) -> ClassificationOracle:
    """Instantiate the oracle named in the settings."""
    if settings.oracle == "openai":
        from .oracles.openai_oracle import OpenAIClassifyOracle
        return OpenAIClassifyOracle(model=settings.openai_model)

    from .catalog.snowflake import SnowflakeCatalog
    from .oracles.cortex import CortexClassifyOracle
    if not isinstance(catalog, SnowflakeCatalog):
        raise ConfigurationError("The cortex oracle requires a Snowflake catalog connection")
    return CortexClassifyOracle(catalog)


class SensitivityScanPipeline:
    """
    Wires introspection, classification and aggregation together.

    Configuration and catalog access errors propagate to the caller. A
    tripped circuit breaker is reported as a FAILED report that still holds
    the columns completed before the abort.
    """

    def __init__(
        self,
        catalog: CatalogConnector,
        oracle: ClassificationOracle,
        settings: Optional[ScanSettings] = None,
        audit_logger: Optional[ScanAuditLogger] = None,
        show_progress: bool = False
    ):
        self.settings = settings or ScanSettings()
        self.catalog = catalog
        self.oracle = oracle
        self.introspector = SchemaIntrospector(catalog)
        self.orchestrator = ClassificationOrchestrator(self.settings, show_progress=show_progress)
        self.audit_logger = audit_logger
        if self.audit_logger is None and self.settings.audit_log_dir:
            self.audit_logger = ScanAuditLogger(self.settings.audit_log_dir)

    def run(
        self,
        catalog_id: str,
        schema_id: str,
        framework: SensitivityFramework,
        cancel_event: Optional[threading.Event] = None
    ) -> ScanReport:
        """
        Scan one schema.

        Args:
            catalog_id: Database/catalog name (case-insensitive)
            schema_id: Schema name (case-insensitive)
            framework: Sensitivity framework to classify against
            cancel_event: Optional external cancellation signal

        Returns:
            ScanReport whose run status is success, partial, failed or cancelled
        """
        framework.validate()

        catalog_name, schema_name = self.introspector.normalize_identifiers(catalog_id, schema_id)
        columns = self.introspector.list_columns(catalog_name, schema_name)

        error = None
        try:
            run = self.orchestrator.classify_all(columns, framework, self.oracle, cancel_event)
        except ClassificationUnavailable as e:
            logger.error(str(e))
            run = e.run
            error = str(e)

        if self.audit_logger:
            self.audit_logger.log_run(catalog_name, schema_name, run, oracle=self.oracle.name, error=error)

        return self._build_report(catalog_name, schema_name, framework, run, error)

    def _build_report(
        self,
        catalog_name: str,
        schema_name: str,
        framework: SensitivityFramework,
        run: ClassificationRun,
        error: Optional[str]
    ) -> ScanReport:
        aggregator = ResultAggregator.for_framework(framework)

        columns = [
            ColumnDetail(
                table_name=r.table_name,
                column_name=r.column_name,
                data_type=r.data_type,
                comment=r.comment,
                primary_classification=r.primary_label,
                recommended_action=aggregator.recommend(r),
                failure_reason=r.failure_reason,
                anomalous_labels=list(r.anomalous_labels)
            )
            for r in run
        ]

        return ScanReport(
            catalog=catalog_name,
            schema=schema_name,
            generated_at=datetime.now().isoformat(),
            oracle=self.oracle.name,
            run=run,
            tables=aggregator.summarize(run),
            schema_summary=aggregator.summarize_schema(run, catalog_name, schema_name),
            columns=columns,
            sensitive_columns=aggregator.sensitive_columns(run),
            error=error
        )


def run_scan(
    catalog: CatalogConnector,
    catalog_id: str,
    schema_id: str,
    framework: SensitivityFramework,
    oracle: Optional[ClassificationOracle] = None,
    settings: Optional[ScanSettings] = None,
    cancel_event: Optional[threading.Event] = None
) -> ScanReport:
    """Run a one-off scan; the oracle defaults to the one named in settings."""
    settings = settings or ScanSettings()
    oracle = oracle or build_oracle(settings, catalog)
    pipeline = SensitivityScanPipeline(catalog, oracle, settings)
    return pipeline.run(catalog_id, schema_id, framework, cancel_event)
