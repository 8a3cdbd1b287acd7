"""
Sensitivity Scan - Usage Examples

Runs the full pipeline offline against an in-memory catalog and a static
oracle, then shows how to point it at Snowflake.
"""

import logging
import os
from pathlib import Path

from sensitivity_scan import (
    CatalogColumnRow,
    InMemoryCatalog,
    ScanSettings,
    SensitivityFramework,
    SensitivityScanPipeline,
    SnowflakeCatalog,
    StaticLabelOracle,
    build_oracle,
)

FRAMEWORK_PATH = Path(__file__).parent / "sensitivity_framework.yaml"


def example_offline_scan():
    """Scan an in-memory schema with fixed labels."""
    print("=" * 60)
    print("EXAMPLE 1: Offline scan")
    print("=" * 60)

    catalog = InMemoryCatalog(schemas={
        ("MY_DB", "HR"): [
            CatalogColumnRow("CUSTOMERS", "CUSTOMER_ID", "NUMBER", "NO", 38, 0, None, 1, "Unique customer identifier"),
            CatalogColumnRow("CUSTOMERS", "SSN", "VARCHAR", "YES", None, None, 11, 2, "Social security number"),
            CatalogColumnRow("CUSTOMERS", "EMAIL", "VARCHAR", "YES", None, None, 255, 3),
            CatalogColumnRow("CUSTOMERS", "SALARY", "NUMBER", "YES", 10, 2, None, 4, "Annual salary"),
            CatalogColumnRow("EMPLOYEES", "EMPLOYEE_ID", "NUMBER", "NO", 38, 0, None, 1),
            CatalogColumnRow("EMPLOYEES", "MEDICAL_RECORD_NUM", "VARCHAR", "YES", None, None, 20, 2),
            CatalogColumnRow("EMPLOYEES", "DIAGNOSIS_CODE", "VARCHAR", "YES", None, None, 10, 3),
        ]
    })

    oracle = StaticLabelOracle({
        "SSN": "SENSITIVE_PII",
        "EMAIL": "SENSITIVE_PII",
        "SALARY": "SENSITIVE_FINANCIAL",
        "MEDICAL_RECORD_NUM": "SENSITIVE_PHI",
        "DIAGNOSIS_CODE": "SENSITIVE_PHI",
    }, default="PUBLIC")

    framework = SensitivityFramework.from_file(FRAMEWORK_PATH)
    report = SensitivityScanPipeline(catalog, oracle).run("my_db", "hr", framework)

    print(f"\nStatus: {report.run.status_message}")
    for table in report.tables:
        print(f"  {table.table_name}: {table.sensitivity_level.value} {dict(table.count_per_category)}")

    print("\nSensitive columns:")
    for column in report.sensitive_columns:
        print(f"  {column.table_name}.{column.column_name}: {column.sensitivity_type} -> {column.recommended_action}")

    print("\n" + report.to_markdown())


def example_snowflake_scan():
    """Scan a live Snowflake schema with Cortex AI_CLASSIFY."""
    print("\n" + "=" * 60)
    print("EXAMPLE 2: Snowflake scan")
    print("=" * 60)

    if not os.getenv("SNOWFLAKE_ACCOUNT"):
        print("Skipped: SNOWFLAKE_ACCOUNT not set")
        return

    settings = ScanSettings.from_env()
    framework = SensitivityFramework.from_file(FRAMEWORK_PATH)

    with SnowflakeCatalog() as catalog:
        pipeline = SensitivityScanPipeline(catalog, build_oracle(settings, catalog), settings, show_progress=True)
        report = pipeline.run(
            os.getenv("SNOWFLAKE_DATABASE", "MY_DB"),
            os.getenv("SNOWFLAKE_SCHEMA", "PUBLIC"),
            framework
        )

    if report.error:
        print(f"Run aborted: {report.error}")
    print(report.to_json())


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s [%(levelname)s] %(message)s')
    example_offline_scan()
    example_snowflake_scan()
