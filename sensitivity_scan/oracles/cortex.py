"""
Snowflake Cortex Oracle
Classifies column descriptions with Snowflake's AI_CLASSIFY function,
reusing the catalog connection.
"""

import json
import logging
from typing import Sequence

from .base import ClassificationOracle, OracleOptions, OracleResponse, parse_labels
from ..catalog.snowflake import SnowflakeCatalog
from ..exceptions import CatalogQueryError, OracleError, TransientOracleError
from ..framework import CategoryDef

logger = logging.getLogger(__name__)

CLASSIFY_QUERY = (
    "SELECT AI_CLASSIFY(%(text)s, PARSE_JSON(%(categories)s), PARSE_JSON(%(options)s)) "
    "AS CLASSIFICATION_RESULT"
)

# Driver errors worth retrying: throttling, timeouts, dropped connections
TRANSIENT_MARKERS = (
    "rate limit",
    "too many requests",
    "429",
    "timeout",
    "timed out",
    "throttl",
    "temporarily unavailable",
    "connection reset",
)
TRANSIENT_ERROR_TYPES = ("OperationalError", "InterfaceError")


class CortexClassifyOracle(ClassificationOracle):
    """
    Oracle backed by Snowflake Cortex AI_CLASSIFY.

    The response is a VARIANT like {"labels": ["SENSITIVE_PII"]}; the
    labels array may also hold {label, score} objects.
    """

    def __init__(self, catalog: SnowflakeCatalog):
        self.catalog = catalog

    @property
    def name(self) -> str:
        return "snowflake-cortex-ai-classify"

    def classify(
        self,
        text: str,
        categories: Sequence[CategoryDef],
        options: OracleOptions
    ) -> OracleResponse:
        parameters = {
            "text": text,
            "categories": json.dumps([c.to_dict() for c in categories]),
            "options": json.dumps(options.to_dict()),
        }

        try:
            rows = self.catalog.execute_query(CLASSIFY_QUERY, parameters)
        except CatalogQueryError as e:
            if self._is_transient(e):
                raise TransientOracleError(f"AI_CLASSIFY transient failure: {e.__cause__ or e}") from e
            raise OracleError(f"AI_CLASSIFY failed: {e.__cause__ or e}") from e

        if not rows:
            raise OracleError("AI_CLASSIFY returned no rows")

        payload = rows[0].get("CLASSIFICATION_RESULT")
        return OracleResponse(labels=parse_labels(payload), raw=payload, model=self.name)

    @staticmethod
    def _is_transient(error: CatalogQueryError) -> bool:
        cause = error.__cause__
        if cause is not None and type(cause).__name__ in TRANSIENT_ERROR_TYPES:
            return True
        message = str(cause or error).lower()
        return any(marker in message for marker in TRANSIENT_MARKERS)
