"""
Static Label Oracle

Deterministic oracle backed by a fixed column-name -> labels table.
Used in tests and dry runs; never calls an external service.
"""

import re
import threading
import time
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .base import ClassificationOracle, OracleOptions, OracleResponse
from ..exceptions import OracleError
from ..framework import CategoryDef
from ..models import LabelScore

_COLUMN_NAME_RE = re.compile(r"^Column name: (.*?) Data type: ")

LabelSpec = Union[str, LabelScore, Sequence[Union[str, LabelScore]]]


def _as_label_scores(spec: LabelSpec) -> List[LabelScore]:
    if isinstance(spec, (str, LabelScore)):
        spec = [spec]
    return [s if isinstance(s, LabelScore) else LabelScore(label=s) for s in spec]


class StaticLabelOracle(ClassificationOracle):
    """
    Fixed-table oracle.

    Args:
        labels_by_column: Column name -> label, LabelScore or list of them
        default: Labels for columns missing from the table; if None,
            unknown columns raise OracleError
        failures: Column name -> list of exceptions raised on successive
            calls before the column succeeds (an exception repeated more
            times than the retry budget makes a permanent failure)
        delays: Column name -> seconds to sleep before answering, to force
            out-of-order completion in concurrent runs
    """

    def __init__(
        self,
        labels_by_column: Mapping[str, LabelSpec],
        default: Optional[LabelSpec] = None,
        failures: Optional[Mapping[str, Iterable[Exception]]] = None,
        delays: Optional[Mapping[str, float]] = None
    ):
        self._labels = {k: _as_label_scores(v) for k, v in labels_by_column.items()}
        self._default = _as_label_scores(default) if default is not None else None
        self._failures: Dict[str, List[Exception]] = {k: list(v) for k, v in (failures or {}).items()}
        self._delays = dict(delays or {})
        self._lock = threading.Lock()
        self._in_flight = 0
        self.max_in_flight = 0
        self.calls: List[str] = []

    @property
    def name(self) -> str:
        return "static"

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @staticmethod
    def column_name(text: str) -> str:
        match = _COLUMN_NAME_RE.match(text)
        return match.group(1) if match else text

    def classify(
        self,
        text: str,
        categories: Sequence[CategoryDef],
        options: OracleOptions
    ) -> OracleResponse:
        column = self.column_name(text)

        with self._lock:
            self.calls.append(column)
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
            pending = self._failures.get(column)
            failure = pending.pop(0) if pending else None

        try:
            delay = self._delays.get(column)
            if delay:
                time.sleep(delay)

            if failure is not None:
                raise failure

            labels = self._labels.get(column, self._default)
            if labels is None:
                raise OracleError(f"No static label configured for column {column}")

            if options.output_mode == "single":
                labels = labels[:1]

            return OracleResponse(
                labels=list(labels),
                raw={"labels": [l.to_dict() for l in labels]},
                model=self.name
            )
        finally:
            with self._lock:
                self._in_flight -= 1
