"""
Tests for the command line entry point
"""

import json

import pytest

from sensitivity_scan.catalog import InMemoryCatalog
from sensitivity_scan.cli import EXIT_CANCELLED, EXIT_CODES, EXIT_FAILED, EXIT_PARTIAL, EXIT_SUCCESS, main
from sensitivity_scan.framework import example_framework
from sensitivity_scan.models import RunStatus
from sensitivity_scan.oracles import StaticLabelOracle
from tests.conftest import HR_LABELS, HR_ROWS


class TrackingCatalog(InMemoryCatalog):
    """In-memory catalog recording disconnect calls"""

    def __init__(self):
        super().__init__(schemas={("MY_DB", "HR"): HR_ROWS})
        self.disconnects = 0

    def disconnect(self):
        super().disconnect()
        self.disconnects += 1


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("SENSITIVITY_SCAN_ORACLE", raising=False)
    monkeypatch.delenv("SENSITIVITY_SCAN_AUDIT_LOG_DIR", raising=False)


@pytest.fixture
def framework_file(tmp_path):
    path = tmp_path / "framework.json"
    path.write_text(json.dumps(example_framework().to_dict()), encoding="utf-8")
    return str(path)


class TestMain:
    """Test cases for exit codes and report output"""

    def test_success(self, hr_catalog, hr_oracle, framework_file, capsys):
        code = main(["my_db", "hr", "--framework", framework_file], catalog=hr_catalog, oracle=hr_oracle)

        assert code == EXIT_SUCCESS
        assert "# Sensitivity Report: MY_DB.HR" in capsys.readouterr().out

    def test_json_output_file(self, hr_catalog, hr_oracle, framework_file, tmp_path):
        output = tmp_path / "report.json"

        code = main(
            ["MY_DB", "HR", "--framework", framework_file, "--format", "json", "--output", str(output)],
            catalog=hr_catalog,
            oracle=hr_oracle
        )

        assert code == EXIT_SUCCESS
        report = json.loads(output.read_text(encoding="utf-8"))
        assert report["summary"]["high_sensitivity_tables"] == ["CUSTOMERS", "EMPLOYEES"]

    def test_partial(self, hr_catalog, framework_file):
        oracle = StaticLabelOracle({**HR_LABELS, "EMAIL": []})

        assert main(["MY_DB", "HR", "--framework", framework_file], catalog=hr_catalog, oracle=oracle) == EXIT_PARTIAL

    def test_breaker_trip_fails(self, hr_catalog, framework_file):
        code = main(
            ["MY_DB", "HR", "--framework", framework_file, "--max-concurrency", "1"],
            catalog=hr_catalog,
            oracle=StaticLabelOracle({})
        )

        assert code == EXIT_FAILED

    def test_no_circuit_breaker(self, hr_catalog, framework_file):
        """Test a run where every column fails still completes when the breaker is off"""
        oracle = StaticLabelOracle({})

        code = main(
            ["MY_DB", "HR", "--framework", framework_file, "--no-circuit-breaker"],
            catalog=hr_catalog,
            oracle=oracle
        )

        assert code == EXIT_FAILED
        assert oracle.call_count == 7

    def test_missing_schema(self, hr_catalog, hr_oracle, framework_file):
        code = main(["MY_DB", "NOPE", "--framework", framework_file], catalog=hr_catalog, oracle=hr_oracle)

        assert code == EXIT_FAILED

    def test_missing_framework_file(self, hr_catalog, hr_oracle, tmp_path):
        code = main(
            ["MY_DB", "HR", "--framework", str(tmp_path / "missing.yaml")],
            catalog=hr_catalog,
            oracle=hr_oracle
        )

        assert code == EXIT_FAILED
        assert hr_oracle.call_count == 0

    def test_strict_labels(self, hr_catalog, framework_file):
        oracle = StaticLabelOracle({**HR_LABELS, "SSN": "NATIONAL_ID"})
        args = ["MY_DB", "HR", "--framework", framework_file]

        assert main(args, catalog=hr_catalog, oracle=oracle) == EXIT_SUCCESS
        assert main(args + ["--strict-labels"], catalog=hr_catalog, oracle=oracle) == EXIT_FAILED

    def test_audit_log_dir_writes_stats(self, hr_catalog, hr_oracle, framework_file, tmp_path):
        log_dir = tmp_path / "audit"

        code = main(
            ["MY_DB", "HR", "--framework", framework_file, "--audit-log-dir", str(log_dir)],
            catalog=hr_catalog,
            oracle=hr_oracle
        )

        assert code == EXIT_SUCCESS
        assert (log_dir / "scans.jsonl").exists()
        stats = json.loads((log_dir / "stats.json").read_text(encoding="utf-8"))
        assert len(stats) == 1

    @pytest.mark.parametrize("schema,expected", [("HR", EXIT_SUCCESS), ("NOPE", EXIT_FAILED)])
    def test_default_catalog_disconnected(self, monkeypatch, hr_oracle, framework_file, schema, expected):
        """Test the catalog the CLI builds itself is closed on success and on error"""
        catalog = TrackingCatalog()
        monkeypatch.setattr("sensitivity_scan.cli.SnowflakeCatalog", lambda: catalog)

        assert main(["MY_DB", schema, "--framework", framework_file], oracle=hr_oracle) == expected
        assert catalog.disconnects == 1

    def test_injected_catalog_left_open(self, hr_catalog, hr_oracle, framework_file):
        hr_catalog.connect()

        main(["MY_DB", "HR", "--framework", framework_file], catalog=hr_catalog, oracle=hr_oracle)

        assert hr_catalog.is_connected

    def test_exit_code_table(self):
        assert EXIT_CODES[RunStatus.CANCELLED] == EXIT_CANCELLED == 3
        assert EXIT_CODES[RunStatus.PARTIAL] == 2

    def test_framework_required(self):
        with pytest.raises(SystemExit):
            main(["MY_DB", "HR"])


if __name__ == "__main__":
    pytest.main([__file__])
