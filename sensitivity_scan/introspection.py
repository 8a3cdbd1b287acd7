"""
Schema Introspector

Turns raw catalog rows into ordered, normalized ColumnMetadata records.
"""

import logging
from typing import Any, Callable, List, Tuple

from .catalog.base import CatalogConnector, CatalogColumnRow
from .models import ColumnMetadata
from .type_normalizer import normalize_type

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"YES", "Y", "TRUE", "T", "1"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return True
    return str(value).strip().upper() in _TRUE_VALUES


def _as_int(value: Any):
    return int(value) if value is not None else None


class SchemaIntrospector:
    """
    Produces column metadata for one catalog schema.

    Read-only: no caching, no catalog mutation.
    """

    def __init__(
        self,
        catalog: CatalogConnector,
        type_normalizer: Callable[..., str] = normalize_type
    ):
        self.catalog = catalog
        self.type_normalizer = type_normalizer

    @staticmethod
    def normalize_identifiers(catalog_id: str, schema_id: str) -> Tuple[str, str]:
        """Strip, validate and upper-case a (catalog, schema) pair."""
        return (
            CatalogConnector.validate_identifier((catalog_id or "").strip()).upper(),
            CatalogConnector.validate_identifier((schema_id or "").strip()).upper()
        )

    def list_columns(self, catalog_id: str, schema_id: str) -> List[ColumnMetadata]:
        """
        List a schema's columns ordered by (table_name, ordinal_position).

        Identifiers are upper-cased before querying.

        Raises:
            ConfigurationError: invalid identifier
            NotFoundError: schema missing or not visible
            CatalogPermissionError: no metadata-read rights
        """
        catalog_name, schema_name = self.normalize_identifiers(catalog_id, schema_id)

        rows = self.catalog.list_columns(catalog_name, schema_name)
        columns = [self._to_metadata(row) for row in rows]
        columns.sort(key=lambda c: (c.table_name, c.ordinal_position))

        logger.info(
            f"Introspected {catalog_name}.{schema_name}: "
            f"{len(columns)} columns in {len({c.table_name for c in columns})} tables"
        )
        return columns

    def _to_metadata(self, row: CatalogColumnRow) -> ColumnMetadata:
        return ColumnMetadata(
            table_name=row.table,
            column_name=row.column,
            normalized_type=self.type_normalizer(row.type, row.precision, row.scale, row.max_length),
            is_nullable=_as_bool(row.nullable),
            ordinal_position=int(row.ordinal),
            comment=row.comment or None,
            max_length=_as_int(row.max_length)
        )
