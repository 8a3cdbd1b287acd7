"""
Unit tests for schema introspection
"""

from unittest.mock import Mock

import pytest

from sensitivity_scan.catalog import CatalogColumnRow, CatalogConnector, InMemoryCatalog
from sensitivity_scan.exceptions import CatalogPermissionError, ConfigurationError, NotFoundError
from sensitivity_scan.introspection import SchemaIntrospector


class TestSchemaIntrospector:
    """Test cases for SchemaIntrospector"""

    @pytest.fixture
    def introspector(self, hr_catalog):
        return SchemaIntrospector(hr_catalog)

    def test_columns_ordered_by_table_and_ordinal(self):
        """Test output order is (table_name, ordinal_position) whatever the catalog order"""
        catalog = Mock(spec=CatalogConnector)
        catalog.list_columns.return_value = [
            CatalogColumnRow("ORDERS", "TOTAL", "NUMBER", "YES", 10, 2, None, 2),
            CatalogColumnRow("CUSTOMERS", "NAME", "VARCHAR", "YES", None, None, 100, 2),
            CatalogColumnRow("ORDERS", "ID", "NUMBER", "NO", 38, 0, None, 1),
            CatalogColumnRow("CUSTOMERS", "ID", "NUMBER", "NO", 38, 0, None, 1),
        ]

        columns = SchemaIntrospector(catalog).list_columns("db", "sales")

        assert [c.key for c in columns] == [
            ("CUSTOMERS", "ID"),
            ("CUSTOMERS", "NAME"),
            ("ORDERS", "ID"),
            ("ORDERS", "TOTAL"),
        ]

    def test_identifiers_upper_cased(self):
        """Test identifiers are trimmed and upper-cased before querying"""
        catalog = Mock(spec=CatalogConnector)
        catalog.list_columns.return_value = []

        SchemaIntrospector(catalog).list_columns(" my_db ", "hr")

        catalog.list_columns.assert_called_once_with("MY_DB", "HR")

    def test_invalid_identifier_never_queries(self):
        """Test a malformed identifier is rejected before the catalog is touched"""
        catalog = Mock(spec=CatalogConnector)

        with pytest.raises(ConfigurationError):
            SchemaIntrospector(catalog).list_columns("my_db; DROP TABLE x", "hr")

        catalog.list_columns.assert_not_called()

    def test_normalize_identifiers(self):
        assert SchemaIntrospector.normalize_identifiers(" my_db ", "hr$1") == ("MY_DB", "HR$1")

        with pytest.raises(ConfigurationError):
            SchemaIntrospector.normalize_identifiers("my_db", "hr.x")

    def test_metadata_normalized(self, introspector):
        """Test types, nullability and comments are normalized"""
        columns = {c.column_name: c for c in introspector.list_columns("my_db", "hr")}

        assert columns["CUSTOMER_ID"].normalized_type == "NUMBER(38,0)"
        assert columns["CUSTOMER_ID"].is_nullable is False
        assert columns["SSN"].normalized_type == "VARCHAR(11)"
        assert columns["SSN"].is_nullable is True
        assert columns["SSN"].max_length == 11
        assert columns["SALARY"].normalized_type == "NUMBER(10,2)"
        assert columns["EMAIL"].comment is None
        assert columns["SSN"].comment == "Social security number"

    def test_empty_schema(self):
        """Test an existing schema with no tables yields an empty list"""
        catalog = InMemoryCatalog(schemas={("MY_DB", "EMPTY"): []})

        assert SchemaIntrospector(catalog).list_columns("MY_DB", "EMPTY") == []

    def test_missing_schema(self, introspector):
        """Test a missing schema raises NotFoundError"""
        with pytest.raises(NotFoundError) as exc_info:
            introspector.list_columns("MY_DB", "NOPE")

        assert exc_info.value.schema == "NOPE"

    def test_permission_denied(self, hr_catalog, introspector):
        """Test missing privileges raise CatalogPermissionError"""
        hr_catalog.deny("my_db", "hr")

        with pytest.raises(CatalogPermissionError):
            introspector.list_columns("MY_DB", "HR")

    def test_custom_type_normalizer(self, hr_catalog):
        """Test the type normalizer can be swapped"""
        introspector = SchemaIntrospector(hr_catalog, type_normalizer=lambda t, p, s, m: t.lower())

        columns = introspector.list_columns("MY_DB", "HR")

        assert columns[0].normalized_type == "number"


if __name__ == "__main__":
    pytest.main([__file__])
