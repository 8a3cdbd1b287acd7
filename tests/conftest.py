"""
Shared fixtures for the sensitivity scan tests
"""

import pytest

from sensitivity_scan.catalog import CatalogColumnRow, InMemoryCatalog
from sensitivity_scan.config import ScanSettings
from sensitivity_scan.framework import example_framework
from sensitivity_scan.models import ColumnMetadata
from sensitivity_scan.oracles import StaticLabelOracle


HR_ROWS = [
    CatalogColumnRow("CUSTOMERS", "CUSTOMER_ID", "NUMBER", "NO", 38, 0, None, 1, "Unique customer identifier"),
    CatalogColumnRow("CUSTOMERS", "SSN", "VARCHAR", "YES", None, None, 11, 2, "Social security number"),
    CatalogColumnRow("CUSTOMERS", "EMAIL", "VARCHAR", "YES", None, None, 255, 3, None),
    CatalogColumnRow("CUSTOMERS", "SALARY", "NUMBER", "YES", 10, 2, None, 4, "Annual salary"),
    CatalogColumnRow("EMPLOYEES", "EMPLOYEE_ID", "NUMBER", "NO", 38, 0, None, 1, None),
    CatalogColumnRow("EMPLOYEES", "MEDICAL_RECORD_NUM", "VARCHAR", "YES", None, None, 20, 2, "MRN"),
    CatalogColumnRow("EMPLOYEES", "DIAGNOSIS_CODE", "VARCHAR", "YES", None, None, 10, 3, "ICD-10 code"),
]

HR_LABELS = {
    "CUSTOMER_ID": "PUBLIC",
    "SSN": "SENSITIVE_PII",
    "EMAIL": "SENSITIVE_PII",
    "SALARY": "SENSITIVE_FINANCIAL",
    "EMPLOYEE_ID": "PUBLIC",
    "MEDICAL_RECORD_NUM": "SENSITIVE_PHI",
    "DIAGNOSIS_CODE": "SENSITIVE_PHI",
}


@pytest.fixture
def framework():
    """PII/PHI/financial framework with PUBLIC as baseline"""
    return example_framework()


@pytest.fixture
def fast_settings():
    """Settings with no backoff delay so retry tests run instantly"""
    return ScanSettings(backoff_base=0.0, backoff_max=0.0)


@pytest.fixture
def hr_catalog():
    """In-memory catalog holding MY_DB.HR with CUSTOMERS and EMPLOYEES"""
    return InMemoryCatalog(schemas={("MY_DB", "HR"): HR_ROWS})


@pytest.fixture
def hr_oracle():
    """Oracle answering the HR schema labels"""
    return StaticLabelOracle(HR_LABELS)


@pytest.fixture
def make_columns():
    """Factory for ColumnMetadata lists named C1..Cn in one table"""
    def _make(count, table="T"):
        return [
            ColumnMetadata(
                table_name=table,
                column_name=f"C{i}",
                normalized_type="VARCHAR(100)",
                is_nullable=True,
                ordinal_position=i
            )
            for i in range(1, count + 1)
        ]
    return _make
