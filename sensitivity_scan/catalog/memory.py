"""
In-memory catalog, for tests, demos and offline dry runs.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .base import CatalogConnector, CatalogColumnRow
from ..exceptions import CatalogPermissionError, NotFoundError

logger = logging.getLogger(__name__)


class InMemoryCatalog(CatalogConnector):
    """
    Serves column rows from a dict keyed by (catalog, schema).

    Keys are upper-cased on registration, matching how the introspector
    normalizes identifiers before querying.
    """

    def __init__(
        self,
        schemas: Optional[Dict[Tuple[str, str], Iterable[CatalogColumnRow]]] = None,
        denied: Optional[Iterable[Tuple[str, str]]] = None
    ):
        super().__init__()
        self._schemas: Dict[Tuple[str, str], List[CatalogColumnRow]] = {}
        self._denied: Set[Tuple[str, str]] = {(c.upper(), s.upper()) for c, s in (denied or ())}
        self.queries: List[Tuple[str, str]] = []

        for (catalog_id, schema_id), rows in (schemas or {}).items():
            self.add_schema(catalog_id, schema_id, rows)

    @property
    def catalog_type(self) -> str:
        return "memory"

    def connect(self) -> None:
        self._connected = True

    def disconnect(self) -> None:
        self._connected = False

    def add_schema(self, catalog_id: str, schema_id: str, rows: Iterable[CatalogColumnRow]) -> None:
        self._schemas[(catalog_id.upper(), schema_id.upper())] = list(rows)

    def deny(self, catalog_id: str, schema_id: str) -> None:
        self._denied.add((catalog_id.upper(), schema_id.upper()))

    def list_columns(self, catalog_id: str, schema_id: str) -> List[CatalogColumnRow]:
        key = (catalog_id, schema_id)
        self.queries.append(key)

        if key in self._denied:
            raise CatalogPermissionError(catalog_id, schema_id)
        if key not in self._schemas:
            raise NotFoundError(catalog_id, schema_id)

        rows = sorted(self._schemas[key], key=lambda r: (r.table, r.ordinal))
        logger.debug(f"Serving {len(rows)} in-memory columns for {catalog_id}.{schema_id}")
        return rows
