"""
Scan Configuration Module

Centralized settings for a sensitivity scan: oracle selection, concurrency,
retry/backoff and circuit-breaker thresholds, and audit log location.
Values come from explicit arguments or SENSITIVITY_SCAN_* environment
variables.
"""

import os
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

from .exceptions import ConfigurationError
from .oracles.base import DEFAULT_TASK_DESCRIPTION, OUTPUT_MODES, OracleOptions

ENV_PREFIX = "SENSITIVITY_SCAN_"
ORACLE_CHOICES = ("cortex", "openai")


def _env(name: str, cast: Callable[[str], Any], default: Any) -> Any:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {ENV_PREFIX + name}: {raw!r}") from e


def _optional_float(raw: str) -> Optional[float]:
    return None if raw.lower() in ("none", "off", "disabled") else float(raw)


@dataclass(frozen=True)
class ScanSettings:
    """Tunables for one scan run."""

    # Oracle
    oracle: str = "cortex"
    openai_model: str = "gpt-4o-mini"
    output_mode: str = "single"
    task_description: str = DEFAULT_TASK_DESCRIPTION

    # Concurrency and retry
    max_concurrency: int = 4
    max_retries: int = 3
    backoff_base: float = 0.5
    backoff_max: float = 8.0

    # Circuit breaker; failure_threshold=None disables it
    failure_threshold: Optional[float] = 0.5
    min_calls_before_trip: int = 5

    # Optional confidence filter, off unless configured
    confidence_threshold: Optional[float] = None

    # Audit logging; None disables the JSONL audit trail
    audit_log_dir: Optional[str] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.oracle not in ORACLE_CHOICES:
            raise ConfigurationError(f"oracle must be one of {', '.join(ORACLE_CHOICES)}, got '{self.oracle}'")
        if self.output_mode not in OUTPUT_MODES:
            raise ConfigurationError(f"output_mode must be one of {', '.join(OUTPUT_MODES)}")
        if self.max_concurrency < 1:
            raise ConfigurationError("max_concurrency must be at least 1")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries cannot be negative")
        if self.backoff_base < 0 or self.backoff_max < 0:
            raise ConfigurationError("backoff values cannot be negative")
        if self.failure_threshold is not None and not 0 < self.failure_threshold <= 1:
            raise ConfigurationError("failure_threshold must be in (0, 1]")
        if self.min_calls_before_trip < 1:
            raise ConfigurationError("min_calls_before_trip must be at least 1")
        if self.confidence_threshold is not None and not 0 <= self.confidence_threshold <= 1:
            raise ConfigurationError("confidence_threshold must be in [0, 1]")

    @property
    def oracle_options(self) -> OracleOptions:
        return OracleOptions(task_description=self.task_description, output_mode=self.output_mode)

    def with_overrides(self, **overrides: Any) -> "ScanSettings":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_env(cls) -> "ScanSettings":
        """Build settings from SENSITIVITY_SCAN_* environment variables."""
        defaults = cls()
        return cls(
            oracle=_env("ORACLE", str, defaults.oracle),
            openai_model=_env("OPENAI_MODEL", str, defaults.openai_model),
            output_mode=_env("OUTPUT_MODE", str, defaults.output_mode),
            task_description=_env("TASK_DESCRIPTION", str, defaults.task_description),
            max_concurrency=_env("MAX_CONCURRENCY", int, defaults.max_concurrency),
            max_retries=_env("MAX_RETRIES", int, defaults.max_retries),
            backoff_base=_env("BACKOFF_BASE", float, defaults.backoff_base),
            backoff_max=_env("BACKOFF_MAX", float, defaults.backoff_max),
            failure_threshold=_env("FAILURE_THRESHOLD", _optional_float, defaults.failure_threshold),
            min_calls_before_trip=_env("MIN_CALLS_BEFORE_TRIP", int, defaults.min_calls_before_trip),
            confidence_threshold=_env("CONFIDENCE_THRESHOLD", _optional_float, defaults.confidence_threshold),
            audit_log_dir=_env("AUDIT_LOG_DIR", str, defaults.audit_log_dir)
        )
