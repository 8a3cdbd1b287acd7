"""
Catalog Connectors

Metadata sources the schema introspector can read from.
"""

from .base import CatalogConnector, CatalogColumnRow
from .memory import InMemoryCatalog
from .snowflake import SnowflakeCatalog

__all__ = [
    "CatalogConnector",
    "CatalogColumnRow",
    "InMemoryCatalog",
    "SnowflakeCatalog"
]
