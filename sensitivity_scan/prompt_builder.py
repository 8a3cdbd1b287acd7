"""
Prompt Builder

Renders a column plus the active framework into a classification request.
Rendering is deterministic: the same (column, framework) pair always yields
byte-identical text.
"""

from dataclasses import dataclass
from typing import Tuple

from .framework import CategoryDef, SensitivityFramework
from .models import ColumnMetadata
from .oracles.base import OracleOptions

NO_COMMENT_PLACEHOLDER = "No comment"


@dataclass(frozen=True)
class ClassificationRequest:
    """Ephemeral payload for a single oracle call"""
    rendered_text: str
    categories: Tuple[CategoryDef, ...]
    options: OracleOptions


class PromptBuilder:
    """Builds oracle requests with fixed field order and labels."""

    FIELD_TEMPLATE = "Column name: {column} Data type: {data_type} Comment: {comment} Context: {context}"

    def __init__(self, options: OracleOptions = OracleOptions()):
        self.options = options

    def render(self, column: ColumnMetadata, framework: SensitivityFramework) -> str:
        comment = column.comment.strip() if column.comment and column.comment.strip() else NO_COMMENT_PLACEHOLDER
        return self.FIELD_TEMPLATE.format(
            column=column.column_name,
            data_type=column.normalized_type,
            comment=comment,
            context=framework.policy_text
        )

    def build(self, column: ColumnMetadata, framework: SensitivityFramework) -> ClassificationRequest:
        return ClassificationRequest(
            rendered_text=self.render(column, framework),
            categories=framework.categories,
            options=self.options
        )
