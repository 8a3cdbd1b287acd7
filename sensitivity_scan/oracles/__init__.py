"""
Classification Oracles - implementations of the label-assigning service
"""

from .base import (
    ClassificationOracle,
    OracleOptions,
    OracleResponse,
    parse_labels,
    DEFAULT_TASK_DESCRIPTION
)
from .cortex import CortexClassifyOracle
from .openai_oracle import OpenAIClassifyOracle
from .static import StaticLabelOracle

__all__ = [
    "ClassificationOracle",
    "OracleOptions",
    "OracleResponse",
    "parse_labels",
    "DEFAULT_TASK_DESCRIPTION",
    "CortexClassifyOracle",
    "OpenAIClassifyOracle",
    "StaticLabelOracle"
]
