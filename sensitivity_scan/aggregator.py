"""
Result Aggregator

Folds per-column classification results into table and schema summaries
and an action-recommendation view. The baseline (non-sensitive) label is
configuration; no label spelling is assumed here.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .framework import SensitivityFramework
from .models import ClassificationResult, SchemaSummary, SensitivityLevel, TableSummary

logger = logging.getLogger(__name__)

DEFAULT_ACTION = "Standard handling"
REVIEW_ACTION = "Manual review required"
UNCLASSIFIED = "UNCLASSIFIED"

_LEVEL_ORDER = {SensitivityLevel.HIGH: 0, SensitivityLevel.LOW: 1}


def recommend(result: ClassificationResult, action_table: Mapping[str, str]) -> str:
    """
    Recommended handling for a column.

    Direct lookup of the primary label; unmapped labels get the default
    action and unlabeled (failed or below-threshold) columns need review.
    """
    label = result.primary_label
    if label is None:
        return REVIEW_ACTION
    return action_table.get(label) or DEFAULT_ACTION


@dataclass(frozen=True)
class SensitiveColumn:
    """One row of the action-recommendation view."""
    table_name: str
    column_name: str
    sensitivity_type: str
    recommended_action: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table_name": self.table_name,
            "column_name": self.column_name,
            "sensitivity_type": self.sensitivity_type,
            "recommended_action": self.recommended_action
        }


class ResultAggregator:
    """
    Aggregates classification results.

    Args:
        baseline_label: Label treated as non-sensitive; None means every
            labeled column counts as sensitive
        categories: Declared labels, reported with zero counts when absent
        action_table: Label -> recommended action
    """

    def __init__(
        self,
        baseline_label: Optional[str] = None,
        categories: Sequence[str] = (),
        action_table: Optional[Mapping[str, str]] = None
    ):
        self.baseline_label = baseline_label
        self.categories = list(categories)
        self.action_table = dict(action_table or {})

    @classmethod
    def for_framework(cls, framework: SensitivityFramework) -> "ResultAggregator":
        return cls(
            baseline_label=framework.baseline_label,
            categories=framework.labels,
            action_table=framework.actions
        )

    def _empty_counts(self) -> Dict[str, int]:
        return OrderedDict((label, 0) for label in self.categories)

    def _tally(self, results: Iterable[ClassificationResult]):
        counts = self._empty_counts()
        total = 0
        failed = 0
        for result in results:
            total += 1
            if result.failed:
                failed += 1
                continue
            label = result.primary_label or UNCLASSIFIED
            counts[label] = counts.get(label, 0) + 1
        return total, counts, failed

    def _level(self, counts: Mapping[str, int]) -> SensitivityLevel:
        for label, count in counts.items():
            if count > 0 and label not in (self.baseline_label, UNCLASSIFIED):
                return SensitivityLevel.HIGH
        return SensitivityLevel.LOW

    def summarize(self, results: Iterable[ClassificationResult]) -> List[TableSummary]:
        """
        Per-table tallies of primary labels.

        Ordered HIGH sensitivity first, then by table name.
        """
        groups: Dict[str, List[ClassificationResult]] = {}
        for result in results:
            groups.setdefault(result.table_name, []).append(result)

        summaries = []
        for table_name, table_results in groups.items():
            total, counts, failed = self._tally(table_results)
            summaries.append(TableSummary(
                table_name=table_name,
                total_columns=total,
                count_per_category=dict(counts),
                failed_columns=failed,
                sensitivity_level=self._level(counts)
            ))

        summaries.sort(key=lambda s: (_LEVEL_ORDER[s.sensitivity_level], s.table_name))
        return summaries

    def summarize_schema(
        self,
        results: Iterable[ClassificationResult],
        catalog: str = "",
        schema: str = ""
    ) -> SchemaSummary:
        """Schema-wide rollup across all tables."""
        results = list(results)
        tables = self.summarize(results)
        total, counts, failed = self._tally(results)

        return SchemaSummary(
            catalog=catalog,
            schema=schema,
            table_count=len(tables),
            high_sensitivity_tables=sorted(
                t.table_name for t in tables if t.sensitivity_level == SensitivityLevel.HIGH
            ),
            total_columns=total,
            count_per_category=dict(counts),
            failed_columns=failed
        )

    def recommend(self, result: ClassificationResult, action_table: Optional[Mapping[str, str]] = None) -> str:
        return recommend(result, self.action_table if action_table is None else action_table)

    def sensitive_columns(self, results: Iterable[ClassificationResult]) -> List[SensitiveColumn]:
        """Labeled, non-baseline columns with their recommended action."""
        rows = [
            SensitiveColumn(
                table_name=r.table_name,
                column_name=r.column_name,
                sensitivity_type=r.primary_label,
                recommended_action=self.recommend(r)
            )
            for r in results
            if r.primary_label is not None and r.primary_label != self.baseline_label
        ]
        rows.sort(key=lambda row: (row.table_name, row.column_name))
        return rows
