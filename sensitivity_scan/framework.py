"""
Sensitivity Framework

User-supplied policy text plus a bounded, ordered set of classification
categories. Validated when constructed, so an invalid framework never
reaches the oracle.

Frameworks can be defined in code, or loaded from JSON/YAML files:

    policy_text: |
      PII includes: SSN, email addresses, ...
    baseline_label: PUBLIC
    categories:
      - label: SENSITIVE_PII
        description: Personal Identifiable Information that requires protection
        action: Requires encryption and access controls
      - label: PUBLIC
        description: Non-sensitive, publicly available information
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Hard ceiling imposed by the classification oracle
MAX_CATEGORIES = 500


@dataclass(frozen=True)
class CategoryDef:
    """A classification category: label plus description."""
    label: str
    description: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"label": self.label, "description": self.description}


@dataclass(frozen=True)
class SensitivityFramework:
    """
    Policy text and category taxonomy driving classification.

    Attributes:
        policy_text: Free text describing what counts as sensitive
        categories: Ordered categories, unique labels, 1..500 entries
        baseline_label: Label designated as non-sensitive (optional)
        actions: Recommended handling per label (optional)
    """
    policy_text: str
    categories: Tuple[CategoryDef, ...]
    baseline_label: Optional[str] = None
    actions: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        categories = tuple(
            c if isinstance(c, CategoryDef) else CategoryDef(**c)
            for c in (self.categories or ())
        )
        object.__setattr__(self, "categories", categories)
        object.__setattr__(self, "actions", MappingProxyType(dict(self.actions or {})))
        self.validate()

    def validate(self) -> None:
        """Check cardinality, uniqueness and cross-references."""
        if not self.categories:
            raise ConfigurationError("Sensitivity framework must declare at least one category")

        if len(self.categories) > MAX_CATEGORIES:
            raise ConfigurationError(
                f"Sensitivity framework declares {len(self.categories)} categories; "
                f"the limit is {MAX_CATEGORIES}"
            )

        seen = set()
        for category in self.categories:
            if not isinstance(category.label, str) or not category.label.strip():
                raise ConfigurationError("Category labels must be non-empty strings")
            if category.label in seen:
                raise ConfigurationError(f"Duplicate category label: {category.label}")
            seen.add(category.label)

        if self.baseline_label is not None and self.baseline_label not in seen:
            raise ConfigurationError(
                f"Baseline label '{self.baseline_label}' is not a declared category"
            )

        unknown = [label for label in self.actions if label not in seen]
        if unknown:
            raise ConfigurationError(
                f"Actions reference undeclared categories: {', '.join(sorted(unknown))}"
            )

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(c.label for c in self.categories)

    def has_label(self, label: str) -> bool:
        return any(c.label == label for c in self.categories)

    def to_oracle_categories(self) -> List[Dict[str, str]]:
        """Category payload in the shape the oracle expects."""
        return [c.to_dict() for c in self.categories]

    def to_dict(self) -> Dict[str, Any]:
        categories = []
        for category in self.categories:
            entry = category.to_dict()
            if category.label in self.actions:
                entry["action"] = self.actions[category.label]
            categories.append(entry)
        return {
            "policy_text": self.policy_text,
            "baseline_label": self.baseline_label,
            "categories": categories
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SensitivityFramework":
        """
        Build a framework from a mapping.

        Categories may carry an optional 'action' key; an explicit 'actions'
        mapping is merged on top.
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError("Framework definition must be a mapping")

        raw_categories = data.get("categories") or []
        if not isinstance(raw_categories, Sequence) or isinstance(raw_categories, str):
            raise ConfigurationError("'categories' must be a list of {label, description} entries")

        categories: List[CategoryDef] = []
        actions: Dict[str, str] = {}
        for entry in raw_categories:
            if not isinstance(entry, Mapping) or "label" not in entry:
                raise ConfigurationError(f"Invalid category entry: {entry!r}")
            label = str(entry["label"])
            categories.append(CategoryDef(label=label, description=str(entry.get("description", ""))))
            if entry.get("action"):
                actions[label] = str(entry["action"])

        actions.update(data.get("actions") or {})

        return cls(
            policy_text=str(data.get("policy_text", "")),
            categories=tuple(categories),
            baseline_label=data.get("baseline_label"),
            actions=actions
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SensitivityFramework":
        """Load a framework from a .json, .yaml or .yml file."""
        file_path = Path(path)
        if not file_path.exists():
            raise ConfigurationError(f"Framework file not found: {file_path}")

        text = file_path.read_text(encoding="utf-8")

        if file_path.suffix.lower() in (".yaml", ".yml"):
            import yaml
            try:
                data = yaml.safe_load(text)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {file_path}: {e}") from e
        else:
            try:
                data = json.loads(text)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in {file_path}: {e}") from e

        framework = cls.from_dict(data or {})
        logger.info(f"Loaded sensitivity framework with {len(framework.categories)} categories from {file_path}")
        return framework


EXAMPLE_POLICY_TEXT = (
    "PII includes: SSN, credit card numbers, bank accounts, email addresses, phone numbers, "
    "dates of birth, driver license numbers.\n"
    "PHI includes: medical record numbers, health conditions, prescriptions, diagnoses.\n"
    "Financial includes: salary, compensation, stock grants, account balances.\n"
    "Public data includes: company names, job titles, publicly available information."
)


def example_framework() -> SensitivityFramework:
    """A PII/PHI/financial framework with PUBLIC as the baseline."""
    return SensitivityFramework(
        policy_text=EXAMPLE_POLICY_TEXT,
        categories=(
            CategoryDef("SENSITIVE_PII", "Personal Identifiable Information that requires protection"),
            CategoryDef("SENSITIVE_PHI", "Protected Health Information under HIPAA"),
            CategoryDef("SENSITIVE_FINANCIAL", "Financial or compensation data"),
            CategoryDef("PUBLIC", "Non-sensitive, publicly available information"),
        ),
        baseline_label="PUBLIC",
        actions={
            "SENSITIVE_PII": "Requires encryption and access controls",
            "SENSITIVE_PHI": "HIPAA compliance required",
            "SENSITIVE_FINANCIAL": "SOX compliance may apply",
        }
    )
