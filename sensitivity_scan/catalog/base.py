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
Base Catalog Connector

Abstract base class for catalog metadata sources with:
- Common list_columns interface for all catalogs
- Identifier validation
- Connection lifecycle as a context manager
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

from ..exceptions import ConfigurationError

_IDENTIFIER_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_$]*$')


@dataclass(frozen=True)
class CatalogColumnRow:
    """One raw column row as reported by a catalog's metadata store."""
    table: str
    column: str
    type: str
    nullable: Any = True
    precision: Optional[Any] = None
    scale: Optional[Any] = None
    max_length: Optional[Any] = None
    ordinal: int = 0
    comment: Optional[str] = None


class CatalogConnector(ABC):
    """
    Abstract base class for catalog metadata sources.

    The scan pipeline depends only on list_columns; connection handling is
    left to each implementation.
    """

    def __init__(self, connection_timeout: int = 30, query_timeout: int = 300):
        self.connection_timeout = connection_timeout
        self.query_timeout = query_timeout
        self._connected = False

    @property
    @abstractmethod
    def catalog_type(self) -> str:
        """Return the catalog type identifier."""
        pass

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the catalog."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close the catalog connection."""
        pass

    @abstractmethod
    def list_columns(self, catalog_id: str, schema_id: str) -> List[CatalogColumnRow]:
        """
        List every column of every table in a schema.

        Args:
            catalog_id: Database/catalog identifier, already upper-cased
            schema_id: Schema identifier, already upper-cased

        Returns:
            Rows ordered by table name and ordinal position

        Raises:
            NotFoundError: Schema does not exist or is not visible
            CatalogPermissionError: Caller lacks metadata-read rights
        """
        pass

    @property
    def is_connected(self) -> bool:
        """Check if currently connected."""
        return self._connected

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    @staticmethod
    def validate_identifier(identifier: str) -> str:
        """Validate an identifier (database/schema name) before it is spliced into SQL."""
        if not identifier:
            raise ConfigurationError("Identifier cannot be empty")

        if not _IDENTIFIER_RE.match(identifier):
            raise ConfigurationError(f"Invalid identifier: {identifier}")

        return identifier
