"""
Structured Audit Logger for Sensitivity Scans
JSONL audit trail of every column classification and run outcome
"""

import os
import json
import logging
from datetime import datetime
from typing import Dict, Any, Optional, List, Iterable
from dataclasses import dataclass, asdict
from pathlib import Path

from ..models import ClassificationResult, ClassificationRun

logger = logging.getLogger(__name__)


@dataclass
class SessionStats:
    """Statistics for a session"""
    total_scans: int = 0
    total_columns: int = 0
    total_succeeded: int = 0
    total_failed: int = 0
    total_anomalous: int = 0
    total_elapsed_ms: float = 0.0
    failed_scans: int = 0
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class ScanAuditLogger:
    """
    JSON-based audit logger for sensitivity scans

    Features:
    - JSONL format for easy analysis
    - One 'column' entry per classification, one 'run' entry per scan
    - Session statistics persisted to stats.json
    """

    def __init__(
        self,
        log_dir: str = "./logs",
        log_file: str = "scans.jsonl",
        stats_file: str = "stats.json"
    ):
        """
        Initialize audit logger

        Args:
            log_dir: Directory for log files
            log_file: Name of scan log file (JSONL format)
            stats_file: Name of statistics file (JSON format)
        """
        self.log_dir = log_dir
        self.log_path = os.path.join(log_dir, log_file)
        self.stats_path = os.path.join(log_dir, stats_file)

        Path(log_dir).mkdir(parents=True, exist_ok=True)

        self._session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        self._session_stats = SessionStats(start_time=datetime.now().isoformat())

    @property
    def session_id(self) -> str:
        return self._session_id

    def _write(self, entries: Iterable[Dict[str, Any]]) -> None:
        try:
            with open(self.log_path, 'a', encoding='utf-8') as f:
                for entry in entries:
                    f.write(json.dumps(entry, ensure_ascii=False, default=str) + '\n')
        except OSError as e:
            logger.error(f"Failed to write audit log: {e}")

    def log_run(
        self,
        catalog: str,
        schema: str,
        run: ClassificationRun,
        oracle: str = "",
        error: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Log every column result of a run followed by the run summary

        Args:
            catalog: Scanned catalog
            schema: Scanned schema
            run: Classification run (possibly partial)
            oracle: Oracle name
            error: Error message if the run aborted

        Returns:
            The run entry written
        """
        timestamp = datetime.now().isoformat()
        entries: List[Dict[str, Any]] = [
            self._column_entry(timestamp, catalog, schema, result) for result in run
        ]

        run_entry = {
            "timestamp": timestamp,
            "type": "run",
            "session_id": self._session_id,
            "catalog": catalog,
            "schema": schema,
            "oracle": oracle,
            "error": error,
            **run.to_dict()
        }
        entries.append(run_entry)
        self._write(entries)

        self._update_session_stats(run)
        logger.info(
            f"Audit: {catalog}.{schema} {run.status.value} | "
            f"{run.succeeded}/{run.total_columns} classified | {run.elapsed_ms:.0f}ms"
        )
        return run_entry

    def _column_entry(
        self,
        timestamp: str,
        catalog: str,
        schema: str,
        result: ClassificationResult
    ) -> Dict[str, Any]:
        return {
            "timestamp": timestamp,
            "type": "column",
            "session_id": self._session_id,
            "catalog": catalog,
            "schema": schema,
            **result.to_dict()
        }

    def _update_session_stats(self, run: ClassificationRun) -> None:
        """Update session statistics"""
        self._session_stats.total_scans += 1
        self._session_stats.total_columns += run.total_columns
        self._session_stats.total_succeeded += run.succeeded
        self._session_stats.total_failed += run.failed
        self._session_stats.total_anomalous += run.anomalous
        self._session_stats.total_elapsed_ms += run.elapsed_ms
        if run.status.value == "failed":
            self._session_stats.failed_scans += 1
        self._session_stats.end_time = datetime.now().isoformat()

    def get_session_stats(self) -> Dict[str, Any]:
        """Get current session statistics"""
        stats = asdict(self._session_stats)

        if self._session_stats.total_scans > 0:
            stats["avg_elapsed_ms"] = (
                self._session_stats.total_elapsed_ms /
                self._session_stats.total_scans
            )
        if self._session_stats.total_columns > 0:
            stats["success_rate"] = (
                self._session_stats.total_succeeded /
                self._session_stats.total_columns
            )

        return stats

    def read_entries(self, last_n: int = 1000) -> List[Dict[str, Any]]:
        """Read the last N audit entries"""
        if not os.path.exists(self.log_path):
            return []

        entries = []
        with open(self.log_path, 'r', encoding='utf-8') as f:
            for line in f:
                if line.strip():
                    try:
                        entries.append(json.loads(line))
                    except json.JSONDecodeError:
                        continue

        return entries[-last_n:]

    def save_session_stats(self) -> None:
        """Save session statistics to file, keeping the last 100 sessions"""
        stats = self.get_session_stats()
        stats["session_id"] = self._session_id

        try:
            all_stats = []
            if os.path.exists(self.stats_path):
                with open(self.stats_path, 'r', encoding='utf-8') as f:
                    all_stats = json.load(f)

            all_stats.append(stats)
            all_stats = all_stats[-100:]

            with open(self.stats_path, 'w', encoding='utf-8') as f:
                json.dump(all_stats, f, indent=2, ensure_ascii=False)

        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to save stats: {e}")
