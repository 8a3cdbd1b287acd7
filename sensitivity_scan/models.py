"""
Sensitivity Scan Data Model

Records passed between introspection, classification and aggregation.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .exceptions import AnomalousLabel


@dataclass(frozen=True)
class ColumnMetadata:
    """Normalized metadata for one catalog column."""
    table_name: str
    column_name: str
    normalized_type: str
    is_nullable: bool
    ordinal_position: int
    comment: Optional[str] = None
    max_length: Optional[int] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.table_name, self.column_name)


@dataclass(frozen=True)
class LabelScore:
    """One label returned by the oracle, with its score when provided."""
    label: str
    score: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "score": self.score}


@dataclass(frozen=True)
class ClassificationResult:
    """Classification outcome for a single column."""
    table_name: str
    column_name: str
    labels: Tuple[LabelScore, ...] = ()
    data_type: str = ""
    comment: Optional[str] = None
    failure_reason: Optional[str] = None
    anomalous_labels: Tuple[str, ...] = ()
    attempts: int = 0
    below_threshold: bool = False

    @property
    def primary_label(self) -> Optional[str]:
        return self.labels[0].label if self.labels else None

    @property
    def primary_score(self) -> Optional[float]:
        return self.labels[0].score if self.labels else None

    @property
    def failed(self) -> bool:
        return self.failure_reason is not None

    @property
    def is_anomalous(self) -> bool:
        return bool(self.anomalous_labels)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table_name": self.table_name,
            "column_name": self.column_name,
            "data_type": self.data_type,
            "comment": self.comment,
            "primary_label": self.primary_label,
            "labels": [l.to_dict() for l in self.labels],
            "failure_reason": self.failure_reason,
            "anomalous_labels": list(self.anomalous_labels),
            "attempts": self.attempts,
            "below_threshold": self.below_threshold
        }


class RunStatus(Enum):
    """Overall outcome of a classification run."""
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class ClassificationRun:
    """
    Results of one classify_all invocation.

    Behaves as a read-only sequence of ClassificationResult in input order.
    When the run was cancelled or aborted, only completed results are held
    and total_columns still reports the size of the input.
    """
    results: List[ClassificationResult]
    total_columns: int
    cancelled: bool = False
    aborted_reason: Optional[str] = None
    elapsed_ms: float = 0.0

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[ClassificationResult]:
        return iter(self.results)

    def __getitem__(self, index):
        return self.results[index]

    @property
    def attempted(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if not r.failed)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.failed)

    @property
    def anomalous(self) -> int:
        return sum(1 for r in self.results if r.is_anomalous)

    @property
    def status(self) -> RunStatus:
        if self.cancelled:
            return RunStatus.CANCELLED
        if self.aborted_reason:
            return RunStatus.FAILED
        if self.attempted and self.failed == self.attempted:
            return RunStatus.FAILED
        if self.failed:
            return RunStatus.PARTIAL
        return RunStatus.SUCCESS

    @property
    def status_message(self) -> str:
        if self.cancelled:
            return f"run was cancelled, {self.attempted} of {self.total_columns} columns processed"
        if self.aborted_reason:
            return (
                f"run aborted: {self.aborted_reason} "
                f"({self.attempted} of {self.total_columns} columns processed)"
            )
        return (
            f"{self.status.value}: {self.succeeded} of {self.total_columns} columns classified, "
            f"{self.failed} failed"
        )

    def failures(self) -> List[ClassificationResult]:
        """Results that carry a failure marker."""
        return [r for r in self.results if r.failed]

    def raise_for_anomalies(self) -> None:
        """Raise AnomalousLabel if any result holds undeclared labels."""
        labels: List[str] = []
        for result in self.results:
            for label in result.anomalous_labels:
                if label not in labels:
                    labels.append(label)
        if labels:
            raise AnomalousLabel(labels)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.status_message,
            "total_columns": self.total_columns,
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "anomalous": self.anomalous,
            "elapsed_ms": round(self.elapsed_ms, 1)
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


class SensitivityLevel(Enum):
    """Table-level sensitivity rollup"""
    HIGH = "HIGH"
    LOW = "LOW"


@dataclass
class TableSummary:
    """Per-table tally of primary labels."""
    table_name: str
    total_columns: int
    count_per_category: Dict[str, int] = field(default_factory=dict)
    failed_columns: int = 0
    sensitivity_level: SensitivityLevel = SensitivityLevel.LOW

    def count(self, label: str) -> int:
        return self.count_per_category.get(label, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table_name": self.table_name,
            "total_columns": self.total_columns,
            "count_per_category": dict(self.count_per_category),
            "failed_columns": self.failed_columns,
            "sensitivity_level": self.sensitivity_level.value
        }


@dataclass
class SchemaSummary:
    """Rollup of all tables in one scanned schema."""
    catalog: str
    schema: str
    table_count: int
    high_sensitivity_tables: List[str]
    total_columns: int
    count_per_category: Dict[str, int] = field(default_factory=dict)
    failed_columns: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "catalog": self.catalog,
            "schema": self.schema,
            "table_count": self.table_count,
            "high_sensitivity_tables": list(self.high_sensitivity_tables),
            "total_columns": self.total_columns,
            "count_per_category": dict(self.count_per_category),
            "failed_columns": self.failed_columns
        }
