"""
Classification Orchestrator

Drives prompt -> oracle -> parse over every column with:
- Bounded concurrency (worker pool sized to the in-flight cap)
- Retry with exponential backoff on transient oracle errors
- Circuit breaker on the fraction of columns failing outright
- Cooperative cancellation through a threading.Event
- Output order identical to input order, whatever the completion order
"""

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Dict, List, Optional, Sequence

from tqdm import tqdm

from .config import ScanSettings
from .exceptions import ClassificationUnavailable, OracleError, TransientOracleError
from .framework import SensitivityFramework
from .models import ClassificationResult, ClassificationRun, ColumnMetadata
from .oracles.base import ClassificationOracle, OracleResponse
from .prompt_builder import PromptBuilder

logger = logging.getLogger(__name__)


class ClassificationOrchestrator:
    """
    Classifies a sequence of columns against a framework.

    Per-column failures never escape: a column whose oracle call fails
    permanently, raises an unexpected exception or exhausts its retries
    yields a result with no labels and a failure_reason.
    """

    # Seconds between cancellation checks while waiting on the pool
    poll_interval = 0.1

    def __init__(
        self,
        settings: Optional[ScanSettings] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        show_progress: bool = False
    ):
        self.settings = settings or ScanSettings()
        self.prompt_builder = prompt_builder or PromptBuilder(self.settings.oracle_options)
        self.show_progress = show_progress

    def classify_all(
        self,
        columns: Sequence[ColumnMetadata],
        framework: SensitivityFramework,
        oracle: ClassificationOracle,
        cancel_event: Optional[threading.Event] = None
    ) -> ClassificationRun:
        """
        Classify every column, preserving input order.

        Args:
            columns: Columns to classify
            framework: Active sensitivity framework
            oracle: Label-assigning oracle
            cancel_event: Set by the caller to stop the run early

        Returns:
            ClassificationRun; when cancelled it holds only the completed
            results and reports status CANCELLED

        Raises:
            ConfigurationError: invalid framework, before any oracle call
            ClassificationUnavailable: failure rate reached the breaker
                threshold; completed results are attached as .run
        """
        framework.validate()

        columns = list(columns)
        total = len(columns)
        cancel_event = cancel_event or threading.Event()
        start_time = time.time()

        if not columns:
            logger.info("No columns to classify")
            return ClassificationRun(results=[], total_columns=0)

        logger.info(
            f"Classifying {total} columns with {oracle.name} "
            f"(max {self.settings.max_concurrency} in flight)"
        )

        results: List[Optional[ClassificationResult]] = [None] * total
        completed = 0
        failed = 0
        aborted_reason: Optional[str] = None

        # Set on cancellation or breaker trip; workers stop starting/retrying calls
        stop = threading.Event()
        if cancel_event.is_set():
            stop.set()
        workers = min(self.settings.max_concurrency, total)

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="oracle") as pool, \
                tqdm(total=total, desc="Classifying columns", unit="col", disable=not self.show_progress) as progress:
            futures: Dict[Future, int] = {
                pool.submit(self._classify_one, column, framework, oracle, stop): index
                for index, column in enumerate(columns)
            }
            pending = set(futures)

            try:
                while pending:
                    done, pending = wait(pending, timeout=self.poll_interval, return_when=FIRST_COMPLETED)

                    for future in done:
                        if future.cancelled():
                            continue
                        result = future.result()
                        if result is None:
                            continue
                        results[futures[future]] = result
                        completed += 1
                        if result.failed:
                            failed += 1
                            logger.warning(
                                f"Column {result.table_name}.{result.column_name} failed: {result.failure_reason}"
                            )
                        progress.update(1)

                    if cancel_event.is_set() and not stop.is_set():
                        logger.warning(f"Cancellation requested after {completed} of {total} columns")
                        self._stop(stop, pending)

                    if aborted_reason is None and self._breaker_tripped(completed, failed):
                        aborted_reason = f"{failed} of {completed} oracle calls failed"
                        logger.error(f"Circuit breaker tripped: {aborted_reason}")
                        self._stop(stop, pending)
            finally:
                if pending:
                    self._stop(stop, pending)

        run = ClassificationRun(
            results=[r for r in results if r is not None],
            total_columns=total,
            cancelled=aborted_reason is None and cancel_event.is_set() and completed < total,
            aborted_reason=aborted_reason,
            elapsed_ms=(time.time() - start_time) * 1000
        )

        if aborted_reason is not None:
            raise ClassificationUnavailable(
                f"Classification unavailable: {aborted_reason}; {run.status_message}",
                run=run
            )

        logger.info(f"Classification finished: {run.status_message}")
        return run

    @staticmethod
    def _stop(stop: threading.Event, pending: set) -> None:
        stop.set()
        for future in pending:
            future.cancel()

    def _breaker_tripped(self, completed: int, failed: int) -> bool:
        threshold = self.settings.failure_threshold
        if threshold is None or completed < self.settings.min_calls_before_trip:
            return False
        return failed / completed >= threshold

    def _backoff_delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        delay = min(self.settings.backoff_max, self.settings.backoff_base * (2 ** (attempt - 1)))
        if retry_after is not None:
            delay = max(delay, retry_after)
        return delay

    def _classify_one(
        self,
        column: ColumnMetadata,
        framework: SensitivityFramework,
        oracle: ClassificationOracle,
        stop: threading.Event
    ) -> Optional[ClassificationResult]:
        """Classify one column; None means the run stopped before it finished."""
        if stop.is_set():
            return None

        request = self.prompt_builder.build(column, framework)
        max_attempts = self.settings.max_retries + 1
        attempt = 0

        while True:
            attempt += 1
            try:
                response = oracle.classify(request.rendered_text, request.categories, request.options)
            except TransientOracleError as e:
                if attempt >= max_attempts:
                    return self._failure(column, f"transient oracle failure after {attempt} attempts: {e}", attempt)
                delay = self._backoff_delay(attempt, e.retry_after)
                logger.info(
                    f"Attempt {attempt}/{max_attempts} for {column.table_name}.{column.column_name} "
                    f"raised {e}; retrying in {delay:.1f}s"
                )
                if stop.wait(delay):
                    return None
                continue
            except OracleError as e:
                return self._failure(column, f"oracle error: {e}", attempt)
            except Exception as e:
                logger.exception(f"Unexpected error classifying {column.table_name}.{column.column_name}")
                return self._failure(column, f"unexpected oracle error: {e}", attempt)

            return self._to_result(column, response, framework, attempt)

    @staticmethod
    def _failure(column: ColumnMetadata, reason: str, attempts: int) -> ClassificationResult:
        return ClassificationResult(
            table_name=column.table_name,
            column_name=column.column_name,
            data_type=column.normalized_type,
            comment=column.comment,
            failure_reason=reason,
            attempts=attempts
        )

    def _to_result(
        self,
        column: ColumnMetadata,
        response: OracleResponse,
        framework: SensitivityFramework,
        attempts: int
    ) -> ClassificationResult:
        labels = list(response.labels)
        if not labels:
            return self._failure(column, "oracle returned no labels", attempts)

        declared = set(framework.labels)
        anomalies: List[str] = []
        for entry in labels:
            if entry.label not in declared and entry.label not in anomalies:
                anomalies.append(entry.label)
        if anomalies:
            logger.warning(
                f"Undeclared labels for {column.table_name}.{column.column_name}: {', '.join(anomalies)}"
            )

        below_threshold = False
        threshold = self.settings.confidence_threshold
        if threshold is not None:
            # Unscored labels cannot be filtered and are kept
            labels = [l for l in labels if l.score is None or l.score >= threshold]
            below_threshold = not labels

        return ClassificationResult(
            table_name=column.table_name,
            column_name=column.column_name,
            labels=tuple(labels),
            data_type=column.normalized_type,
            comment=column.comment,
            anomalous_labels=tuple(anomalies),
            attempts=attempts,
            below_threshold=below_threshold
        )


def classify_all(
    columns: Sequence[ColumnMetadata],
    framework: SensitivityFramework,
    oracle: ClassificationOracle,
    settings: Optional[ScanSettings] = None,
    cancel_event: Optional[threading.Event] = None
) -> ClassificationRun:
    """Classify columns with a one-off orchestrator."""
    return ClassificationOrchestrator(settings).classify_all(columns, framework, oracle, cancel_event)
