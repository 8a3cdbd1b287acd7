"""
Scan Report

Table-level summary plus column-level detail for one schema scan, exportable
as a dict, JSON or Markdown.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .aggregator import SensitiveColumn
from .models import ClassificationRun, RunStatus, SchemaSummary, TableSummary


@dataclass
class ColumnDetail:
    """Column-level row of the report."""
    table_name: str
    column_name: str
    data_type: str
    comment: Optional[str]
    primary_classification: Optional[str]
    recommended_action: str
    failure_reason: Optional[str] = None
    anomalous_labels: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table_name": self.table_name,
            "column_name": self.column_name,
            "data_type": self.data_type,
            "comment": self.comment,
            "primary_classification": self.primary_classification,
            "recommended_action": self.recommended_action,
            "failure_reason": self.failure_reason,
            "anomalous_labels": self.anomalous_labels
        }


@dataclass
class ScanReport:
    """Complete sensitivity report for a scanned schema"""
    catalog: str
    schema: str
    generated_at: str
    oracle: str
    run: ClassificationRun
    tables: List[TableSummary]
    schema_summary: SchemaSummary
    columns: List[ColumnDetail]
    sensitive_columns: List[SensitiveColumn]
    error: Optional[str] = None

    @property
    def status(self) -> RunStatus:
        return self.run.status

    def to_dict(self) -> Dict[str, Any]:
        return {
            "catalog": self.catalog,
            "schema": self.schema,
            "generated_at": self.generated_at,
            "oracle": self.oracle,
            "run": self.run.to_dict(),
            "error": self.error,
            "summary": self.schema_summary.to_dict(),
            "tables": [t.to_dict() for t in self.tables],
            "columns": [c.to_dict() for c in self.columns],
            "sensitive_columns": [c.to_dict() for c in self.sensitive_columns]
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)

    def to_markdown(self) -> str:
        run = self.run
        lines = [
            f"# Sensitivity Report: {self.catalog}.{self.schema}",
            "",
            f"**Generated:** {self.generated_at}",
            f"**Oracle:** {self.oracle}",
            f"**Status:** {run.status.value.upper()} ({run.status_message})",
            "",
            "## Summary",
            f"- Columns in schema: {run.total_columns}",
            f"- Columns attempted: {run.attempted}",
            f"- Columns classified: {run.succeeded}",
            f"- Columns failed: {run.failed}",
            f"- Anomalous labels: {run.anomalous}",
            f"- High-sensitivity tables: {', '.join(self.schema_summary.high_sensitivity_tables) or '-'}",
        ]

        if self.error:
            lines.extend(["", f"**Error:** {self.error}"])

        labels: List[str] = []
        for table in self.tables:
            for label in table.count_per_category:
                if label not in labels:
                    labels.append(label)

        lines.extend(["", "## Tables", ""])
        header = ["Table", "Total"] + labels + ["Failed", "Sensitivity"]
        lines.append("| " + " | ".join(header) + " |")
        lines.append("|" + "---|" * len(header))
        for table in self.tables:
            cells = (
                [table.table_name, str(table.total_columns)]
                + [str(table.count(label)) for label in labels]
                + [str(table.failed_columns), table.sensitivity_level.value]
            )
            lines.append("| " + " | ".join(cells) + " |")

        lines.extend(["", "## Column Details", ""])
        lines.append("| Table | Column | Data Type | Comment | Classification | Recommended Action |")
        lines.append("|-------|--------|-----------|---------|----------------|--------------------|")
        for col in self.columns:
            if col.failure_reason:
                classification = f"FAILED: {col.failure_reason}"
            else:
                classification = col.primary_classification or "-"
            if col.anomalous_labels:
                classification += " (anomalous)"
            lines.append(
                f"| {col.table_name} | {col.column_name} | {col.data_type} | {col.comment or ''} | "
                f"{classification} | {col.recommended_action} |"
            )

        return "\n".join(lines)
