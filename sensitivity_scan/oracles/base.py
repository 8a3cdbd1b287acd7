# /// script
# dependencies = [
#   "cryptography>=41.0.0",
#   "openai>=1.0.0",
#   "pytest-cov>=4.0.0",
#   "pytest>=7.0.0",
#   "python-dotenv>=1.0.0",
#   "pyyaml>=6.0",
#   "snowflake-connector-python>=3.0.0",
#   "tqdm>=4.65.0",
# ]
# ///
"""
Base classes for classification oracles - abstract interface for the external
service that assigns sensitivity labels to a column description.
Enables swapping oracles without changing the pipeline (no vendor lock-in).
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from ..exceptions import ConfigurationError, OracleError
from ..framework import CategoryDef
from ..models import LabelScore

OUTPUT_MODES = ("single", "multi")

DEFAULT_TASK_DESCRIPTION = (
    "Classify this database column based on the sensitivity framework provided"
)


@dataclass(frozen=True)
class OracleOptions:
    """Options sent with every classification request"""
    task_description: str = DEFAULT_TASK_DESCRIPTION
    output_mode: str = "single"

    def __post_init__(self):
        if self.output_mode not in OUTPUT_MODES:
            raise ConfigurationError(
                f"output_mode must be one of {', '.join(OUTPUT_MODES)}, got '{self.output_mode}'"
            )

    def to_dict(self) -> Dict[str, str]:
        return {"task_description": self.task_description, "output_mode": self.output_mode}


@dataclass
class OracleResponse:
    """Standardized oracle response; labels ordered by descending relevance"""
    labels: List[LabelScore]
    raw: Any = None
    model: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


class ClassificationOracle(ABC):
    """
    Abstract interface for classification oracles

    Implementations:
    - CortexClassifyOracle (Snowflake AI_CLASSIFY)
    - OpenAIClassifyOracle (chat completions, JSON mode)
    - StaticLabelOracle (deterministic stub for tests)

    Implementations must raise TransientOracleError for timeouts and
    rate limiting, and OracleError for anything that will not succeed
    on retry. They may be called from several threads at once.
    """

    @abstractmethod
    def classify(
        self,
        text: str,
        categories: Sequence[CategoryDef],
        options: OracleOptions
    ) -> OracleResponse:
        """
        Assign labels to a column description

        Args:
            text: Rendered column description
            categories: Allowed categories
            options: Task description and output mode

        Returns:
            OracleResponse with labels, entry 0 being primary
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Oracle name/identifier"""
        pass


def parse_labels(payload: Any) -> List[LabelScore]:
    """
    Parse an AI_CLASSIFY style payload into LabelScore entries.

    Accepts a JSON string or a mapping with a 'labels' array whose entries
    are either plain strings or {label, score} objects.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise OracleError(f"Oracle returned invalid JSON: {e}") from e

    if not isinstance(payload, dict) or "labels" not in payload:
        raise OracleError(f"Oracle response has no 'labels' array: {str(payload)[:200]}")

    raw_labels = payload["labels"]
    if not isinstance(raw_labels, list):
        raise OracleError("Oracle 'labels' must be an array")

    labels: List[LabelScore] = []
    for entry in raw_labels:
        if isinstance(entry, str):
            labels.append(LabelScore(label=entry))
        elif isinstance(entry, dict) and entry.get("label"):
            score = entry.get("score")
            try:
                score = float(score) if score is not None else None
            except (TypeError, ValueError):
                score = None
            labels.append(LabelScore(label=str(entry["label"]), score=score))
        else:
            raise OracleError(f"Unrecognized label entry: {entry!r}")

    return labels
