"""
Unit tests for the JSONL audit logger
"""

import json

import pytest

from sensitivity_scan.models import ClassificationResult, ClassificationRun, LabelScore
from sensitivity_scan.utils import ScanAuditLogger


@pytest.fixture
def run():
    return ClassificationRun(
        results=[
            ClassificationResult("CUSTOMERS", "SSN", labels=(LabelScore("SENSITIVE_PII", 0.9),), attempts=1),
            ClassificationResult("CUSTOMERS", "NOTE", failure_reason="oracle error: boom", attempts=1),
        ],
        total_columns=2,
        elapsed_ms=120.0
    )


class TestScanAuditLogger:
    """Test cases for ScanAuditLogger"""

    def test_log_run(self, tmp_path, run):
        """Test one column entry per result plus a run entry"""
        audit = ScanAuditLogger(str(tmp_path))

        run_entry = audit.log_run("MY_DB", "HR", run, oracle="static")

        lines = (tmp_path / "scans.jsonl").read_text(encoding="utf-8").splitlines()
        entries = [json.loads(line) for line in lines]
        assert [e["type"] for e in entries] == ["column", "column", "run"]
        assert entries[0]["primary_label"] == "SENSITIVE_PII"
        assert entries[0]["labels"] == [{"label": "SENSITIVE_PII", "score": 0.9}]
        assert entries[1]["failure_reason"] == "oracle error: boom"
        assert run_entry["status"] == "partial"
        assert run_entry["session_id"] == audit.session_id
        assert entries[-1] == run_entry

    def test_read_entries(self, tmp_path, run):
        audit = ScanAuditLogger(str(tmp_path))
        audit.log_run("MY_DB", "HR", run)

        assert len(audit.read_entries()) == 3
        assert audit.read_entries(last_n=1)[0]["type"] == "run"

    def test_read_entries_without_log(self, tmp_path):
        assert ScanAuditLogger(str(tmp_path / "new")).read_entries() == []

    def test_session_stats(self, tmp_path, run):
        """Test session statistics accumulate across runs"""
        audit = ScanAuditLogger(str(tmp_path))
        audit.log_run("MY_DB", "HR", run)
        audit.log_run("MY_DB", "HR", run)

        stats = audit.get_session_stats()

        assert stats["total_scans"] == 2
        assert stats["total_columns"] == 4
        assert stats["total_failed"] == 2
        assert stats["success_rate"] == 0.5
        assert stats["avg_elapsed_ms"] == 120.0

    def test_save_session_stats(self, tmp_path, run):
        """Test stats are appended to stats.json"""
        audit = ScanAuditLogger(str(tmp_path))
        audit.log_run("MY_DB", "HR", run)

        audit.save_session_stats()
        audit.save_session_stats()

        saved = json.loads((tmp_path / "stats.json").read_text(encoding="utf-8"))
        assert len(saved) == 2
        assert saved[0]["session_id"] == audit.session_id


if __name__ == "__main__":
    pytest.main([__file__])
