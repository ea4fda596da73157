"""
Superstore Report CLI

Builds the full report from one CSV:

    superstore-report --input data/superstore.csv --output-dir reports/
"""

import argparse
import sys
from typing import List, Optional

import structlog

from superstore_analytics.config.logging import configure_logging
from superstore_analytics.config.settings import get_settings
from superstore_analytics.errors import AnalysisError
from superstore_analytics.pipeline import AnalysisPipeline
from superstore_analytics.reporting.writer import ReportWriter

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_INPUT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Superstore sales and profit report")
    parser.add_argument(
        "--input",
        default=settings.input.path,
        help=f"Order-line CSV (default: {settings.input.path})",
    )
    parser.add_argument(
        "--output-dir",
        default=settings.report.output_dir,
        help=f"Directory for tables, heatmaps and model summary (default: {settings.report.output_dir})",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "--no-model",
        action="store_true",
        help="Skip the profit regression",
    )
    parser.add_argument(
        "--allow-incomplete",
        action="store_true",
        help="Continue when declared columns have empty cells",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    pipeline = AnalysisPipeline(
        fit_model=False if args.no_model else None,
        require_complete=False if args.allow_incomplete else None,
    )

    try:
        report = pipeline.run(args.input)
    except AnalysisError as e:
        logger.error("Analysis aborted", error=str(e), error_type=type(e).__name__)
        return EXIT_INPUT_ERROR

    paths = ReportWriter(args.output_dir, pipeline.settings.report).write(report)

    logger.info(
        "Report ready",
        output_dir=args.output_dir,
        files=len(paths),
        rows=report.input_rows,
        r_squared=round(report.model.r_squared, 4) if report.model else None,
        model_error=report.model_error,
    )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
