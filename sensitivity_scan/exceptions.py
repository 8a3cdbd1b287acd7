"""
Sensitivity Scan Exceptions

Error taxonomy for the scan pipeline. Configuration and catalog access errors
surface to the caller immediately; oracle errors are absorbed per column by
the orchestrator and only escalate as ClassificationUnavailable.
"""

from typing import Any, Optional, Sequence


class ScanError(Exception):
    """Base class for all sensitivity scan errors."""
    pass


class ConfigurationError(ScanError):
    """Raised when a framework, setting or identifier is invalid."""
    pass


class CatalogConnectionError(ScanError):
    """Raised when the catalog connection fails."""
    pass


class CatalogQueryError(ScanError):
    """Raised when a catalog metadata query fails."""
    pass


class NotFoundError(ScanError):
    """Raised when a catalog or schema does not exist or is not visible."""

    def __init__(self, catalog: str, schema: str, message: Optional[str] = None):
        self.catalog = catalog
        self.schema = schema
        super().__init__(message or f"Schema not found or inaccessible: {catalog}.{schema}")


class CatalogPermissionError(ScanError, PermissionError):
    """Raised when the caller lacks metadata-read rights on a schema."""

    def __init__(self, catalog: str, schema: str, message: Optional[str] = None):
        self.catalog = catalog
        self.schema = schema
        super().__init__(message or f"Insufficient privileges to read metadata of {catalog}.{schema}")


class OracleError(ScanError):
    """Raised by an oracle for a permanent (non-retryable) failure."""
    pass


class TransientOracleError(OracleError):
    """Raised by an oracle for timeouts and rate-limit responses."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        self.retry_after = retry_after
        super().__init__(message)


class ClassificationUnavailable(ScanError):
    """
    Raised when too many oracle calls fail outright.

    The run attribute holds the results completed before the abort.
    """

    def __init__(self, message: str, run: Any = None):
        self.run = run
        super().__init__(message)


class AnomalousLabel(ScanError):
    """Raised on request when the oracle returned labels outside the framework."""

    def __init__(self, labels: Sequence[str]):
        self.labels = list(labels)
        super().__init__(f"Oracle returned undeclared labels: {', '.join(self.labels)}")
