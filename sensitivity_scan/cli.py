# /// script
# dependencies = [
#   "cryptography>=41.0.0",
#   "openai>=1.0.0",
#   "pytest-cov>=4.0.0",
#   "pytest>=7.0.0",
#   "python-dotenv>=1.0.0",
#   "pyyaml>=6.0",
#   "snowflake-connector-python>=3.0.0",
#   "tqdm>=4.65.0",
# ]
# ///
#!/usr/bin/env python3
"""
Sensitivity Scan CLI

Usage:
    sensitivity-scan MY_DB MY_SCHEMA --framework framework.yaml
    sensitivity-scan MY_DB MY_SCHEMA --framework framework.yaml --oracle openai --format json

Exit codes:
    0  every column classified
    1  run failed (no column classified, breaker tripped, or a
       configuration / catalog access error)
    2  partial: some columns failed
    3  cancelled
"""

import argparse
import logging
import signal
import sys
import threading
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .catalog.base import CatalogConnector
from .catalog.snowflake import SnowflakeCatalog
from .config import ORACLE_CHOICES, ScanSettings
from .exceptions import AnomalousLabel, ScanError
from .framework import SensitivityFramework
from .models import RunStatus
from .oracles.base import ClassificationOracle
from .pipeline import SensitivityScanPipeline, build_oracle

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILED = 1
EXIT_PARTIAL = 2
EXIT_CANCELLED = 3

EXIT_CODES = {
    RunStatus.SUCCESS: EXIT_SUCCESS,
    RunStatus.PARTIAL: EXIT_PARTIAL,
    RunStatus.FAILED: EXIT_FAILED,
    RunStatus.CANCELLED: EXIT_CANCELLED,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sensitivity-scan",
        description="Classify catalog columns against a sensitivity framework"
    )

    parser.add_argument("catalog", help="Database/catalog to scan")
    parser.add_argument("schema", help="Schema to scan")

    parser.add_argument(
        "--framework",
        required=True,
        help="Sensitivity framework file (.yaml, .yml or .json)"
    )

    parser.add_argument(
        "--oracle",
        choices=ORACLE_CHOICES,
        help="Classification oracle (default: SENSITIVITY_SCAN_ORACLE or cortex)"
    )

    parser.add_argument("--model", help="OpenAI model for the openai oracle")

    parser.add_argument(
        "--format",
        choices=["markdown", "json"],
        default="markdown",
        help="Report format (default: markdown)"
    )

    parser.add_argument("--output", help="Write the report to this file instead of stdout")

    parser.add_argument("--max-concurrency", type=int, help="Maximum in-flight oracle calls")
    parser.add_argument("--max-retries", type=int, help="Retries per column on transient errors")

    parser.add_argument(
        "--confidence-threshold",
        type=float,
        help="Drop labels scored below this value (off by default)"
    )

    parser.add_argument(
        "--multi-label",
        action="store_true",
        help="Ask the oracle for every applicable label"
    )

    parser.add_argument(
        "--no-circuit-breaker",
        action="store_true",
        help="Never abort the run on a high failure rate"
    )

    parser.add_argument("--audit-log-dir", help="Directory for the JSONL audit trail")

    parser.add_argument(
        "--strict-labels",
        action="store_true",
        help="Fail when the oracle returns labels outside the framework"
    )

    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    parser.add_argument("--env-file", help="Load environment variables from this file")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")

    return parser


def _settings_from_args(args: argparse.Namespace) -> ScanSettings:
    settings = ScanSettings.from_env().with_overrides(
        oracle=args.oracle,
        openai_model=args.model,
        output_mode="multi" if args.multi_label else None,
        max_concurrency=args.max_concurrency,
        max_retries=args.max_retries,
        confidence_threshold=args.confidence_threshold,
        audit_log_dir=args.audit_log_dir
    )
    if args.no_circuit_breaker:
        settings = replace(settings, failure_threshold=None)
    return settings


def main(
    argv: Optional[List[str]] = None,
    catalog: Optional[CatalogConnector] = None,
    oracle: Optional[ClassificationOracle] = None
) -> int:
    """
    Run a scan from the command line.

    catalog and oracle may be injected; by default a SnowflakeCatalog is
    built from SNOWFLAKE_* variables and the oracle from the settings.
    """
    args = build_parser().parse_args(argv)

    if args.env_file:
        load_dotenv(args.env_file)
    else:
        load_dotenv()

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S'
    )

    cancel_event = threading.Event()
    owned_catalog = None
    previous_handler = None
    if threading.current_thread() is threading.main_thread():
        previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel_event.set())

    try:
        settings = _settings_from_args(args)
        framework = SensitivityFramework.from_file(args.framework)
        if catalog is None:
            catalog = owned_catalog = SnowflakeCatalog()
        oracle = oracle or build_oracle(settings, catalog)

        pipeline = SensitivityScanPipeline(catalog, oracle, settings, show_progress=args.progress)
        report = pipeline.run(args.catalog, args.schema, framework, cancel_event)
        if pipeline.audit_logger:
            pipeline.audit_logger.save_session_stats()

        if args.strict_labels:
            report.run.raise_for_anomalies()
    except AnomalousLabel as e:
        logger.error(str(e))
        return EXIT_FAILED
    except ScanError as e:
        logger.error(f"Scan failed: {e}")
        return EXIT_FAILED
    finally:
        if owned_catalog is not None:
            owned_catalog.disconnect()
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    output = report.to_json() if args.format == "json" else report.to_markdown()
    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        logger.info(f"Report written to {args.output}")
    else:
        print(output)

    logger.info(report.run.status_message)
    return EXIT_CODES[report.status]


if __name__ == "__main__":
    sys.exit(main())
