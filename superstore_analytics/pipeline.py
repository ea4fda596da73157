"""
Analysis Pipeline

Orchestrates load -> clean -> derive -> aggregate -> model. Every stage
returns a new table; a failed regression does not invalidate the
aggregates computed before it.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

import polars as pl
import structlog

from superstore_analytics.analytics.sections import SectionResult, build_report_sections
from superstore_analytics.config.settings import Settings, get_settings
from superstore_analytics.errors import IncompleteDataError, ModelFitError
from superstore_analytics.ingestion.loader import OrderLoader
from superstore_analytics.ml.regression import FittedProfitModel, ProfitModel
from superstore_analytics.transformation.cleaners import CleaningResult, DataCleaner
from superstore_analytics.transformation.features import FeatureDeriver

logger = structlog.get_logger(__name__)


@dataclass
class AnalysisReport:
    """Everything one run produces"""
    source: str
    input_rows: int
    cleaning: CleaningResult
    table: pl.DataFrame
    sections: Dict[str, SectionResult] = field(default_factory=dict)
    model: Optional[FittedProfitModel] = None
    model_error: Optional[str] = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    @property
    def duration_seconds(self) -> float:
        if self.completed_at is None:
            return 0.0
        return (self.completed_at - self.started_at).total_seconds()

    def quality_summary(self) -> Dict[str, Any]:
        """Data-quality findings as plain data"""
        completeness = self.cleaning.completeness
        return {
            "source": self.source,
            "rows": self.input_rows,
            "completion_rate": completeness.completion_rate,
            "incomplete_columns": completeness.failing_columns,
            "categories": {
                check.column: check.details.get("distinct_values", [])
                for check in self.cleaning.categories.checks
            },
            "findings": self.cleaning.findings,
        }


class AnalysisPipeline:
    """
    Main analysis pipeline orchestrator.

    Example:
        pipeline = AnalysisPipeline()
        report = pipeline.run("data/superstore.csv")
        report.sections["segment"].table
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fit_model: Optional[bool] = None,
        require_complete: Optional[bool] = None,
    ):
        self.settings = settings or get_settings()
        self.fit_model = self.settings.report.fit_model if fit_model is None else fit_model
        self.require_complete = (
            self.settings.input.require_complete if require_complete is None else require_complete
        )
        self.loader = OrderLoader(self.settings.input)
        self.cleaner = DataCleaner(self.settings.input)
        self.deriver = FeatureDeriver.from_settings(self.settings.input)
        self.model = ProfitModel()

    def _fit(self, table: pl.DataFrame, report: AnalysisReport) -> pl.DataFrame:
        try:
            fitted = self.model.fit(table)
        except ModelFitError as e:
            logger.error("Profit model could not be fitted", error=str(e))
            report.model_error = str(e)
            return table

        report.model = fitted
        return fitted.with_predictions(table)

    def run_frame(self, raw: pl.DataFrame, source: str = "<frame>") -> AnalysisReport:
        """Run every stage after loading on an in-memory frame"""
        started_at = datetime.now(timezone.utc)
        logger.info("Starting analysis", source=source, rows=raw.height)

        cleaning = self.cleaner.clean(raw)
        completeness = cleaning.completeness
        if self.require_complete and not completeness.is_complete:
            raise IncompleteDataError(completeness.completion_rate, completeness.failing_columns)

        table = self.deriver.derive(cleaning.table)

        report = AnalysisReport(
            source=source,
            input_rows=raw.height,
            cleaning=cleaning,
            table=table,
            started_at=started_at,
        )
        report.sections = build_report_sections(table)

        if self.fit_model:
            report.table = self._fit(table, report)

        report.completed_at = datetime.now(timezone.utc)
        logger.info(
            "Analysis complete",
            source=source,
            sections=len(report.sections),
            model_fitted=report.model is not None,
            duration_seconds=round(report.duration_seconds, 3),
        )
        return report

    def run(self, file_path: Union[str, Path, None] = None) -> AnalysisReport:
        """
        Load the CSV and run the full analysis.

        Raises:
            MalformedInputError: unreadable or incomplete input
            DivisionUndefinedError: a row has zero sales
        """
        path = Path(file_path or self.settings.input.path)
        raw = self.loader.load(path)
        return self.run_frame(raw, source=str(path))


def run_analysis(
    file_path: Union[str, Path, None] = None,
    settings: Optional[Settings] = None,
) -> AnalysisReport:
    """Convenience function to run the pipeline once"""
    return AnalysisPipeline(settings).run(file_path)
