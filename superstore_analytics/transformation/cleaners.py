"""
Data Cleaning Module

Cleaning transformations for Superstore order lines.
Handles:
- Column name normalization
- Schema enforcement (required, optional and unknown columns)
- Strict type coercion, including the two date columns
- Completeness reporting
- Categorical allow-list and boundary checks

Nothing here corrects values. Findings are reported and surfaced as
DataQualityWarning; values that cannot be typed raise MalformedInputError.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import re
import warnings

import polars as pl
import structlog

from superstore_analytics.config.settings import InputSettings
from superstore_analytics.errors import DataQualityWarning, MalformedInputError
from superstore_analytics.quality.validators import (
    ValidationResult,
    create_boundary_validator,
    create_category_validator,
    create_completeness_validator,
)
from superstore_analytics.schema import ORDER_LINE_COLUMNS, known_columns

logger = structlog.get_logger(__name__)

_SEPARATORS = re.compile(r"[\s\-\.]+")
_REPEATED_UNDERSCORES = re.compile(r"_+")


def normalize_column_name(name: str) -> str:
    """
    Normalize a header to lower snake_case.

    >>> normalize_column_name("Sub-Category")
    'sub_category'
    >>> normalize_column_name(" Row ID ")
    'row_id'
    """
    normalized = _SEPARATORS.sub("_", name.strip().lower())
    return _REPEATED_UNDERSCORES.sub("_", normalized).strip("_")


@dataclass
class CompletenessReport:
    """Null profile of the declared order-line columns"""
    total_rows: int
    null_counts: Dict[str, int] = field(default_factory=dict)
    validation: Optional[ValidationResult] = None

    @property
    def total_cells(self) -> int:
        return self.total_rows * len(self.null_counts)

    @property
    def null_cells(self) -> int:
        return sum(self.null_counts.values())

    @property
    def completion_rate(self) -> float:
        """Share of non-null cells, 1.0 for an empty table"""
        if self.total_cells == 0:
            return 1.0
        return 1 - self.null_cells / self.total_cells

    @property
    def failing_columns(self) -> List[str]:
        return [col for col, nulls in self.null_counts.items() if nulls > 0]

    @property
    def is_complete(self) -> bool:
        return not self.failing_columns


@dataclass
class CleaningResult:
    """Cleaned table plus everything found while cleaning it"""
    table: pl.DataFrame
    completeness: CompletenessReport
    categories: ValidationResult
    boundaries: ValidationResult

    @property
    def findings(self) -> List[str]:
        """Human-readable list of every data-quality finding"""
        messages = []
        if not self.completeness.is_complete:
            messages.append(
                f"Completion rate {self.completeness.completion_rate:.4f}; "
                f"empty cells in {self.completeness.failing_columns}"
            )
        for result in (self.categories, self.boundaries):
            messages.extend(check.message for check in result.failures)
        return messages


class DataCleaner:
    """
    Order-line cleaner.

    Example:
        cleaner = DataCleaner()
        result = cleaner.clean(raw_df)
        result.completeness.completion_rate
    """

    def __init__(self, settings: Optional[InputSettings] = None):
        self.settings = settings or InputSettings()

    def normalize_columns(self, df: pl.DataFrame) -> pl.DataFrame:
        """Rename every column to its normalized form"""
        mapping = {col: normalize_column_name(col) for col in df.columns}

        seen: Dict[str, str] = {}
        for original, normalized in mapping.items():
            if normalized in seen:
                raise MalformedInputError(
                    f"Columns '{seen[normalized]}' and '{original}' both normalize to '{normalized}'",
                    column=normalized,
                )
            seen[normalized] = original

        return df.rename(mapping)

    def drop_index_column(self, df: pl.DataFrame) -> pl.DataFrame:
        """Drop the row-number column carried over from the export"""
        index_column = normalize_column_name(self.settings.index_column)
        drop = [col for col in df.columns if col == index_column or col == ""]
        if drop:
            logger.debug("Dropping row-number column", columns=drop)
            df = df.drop(drop)
        return df

    def check_schema(self, df: pl.DataFrame) -> None:
        """Reject missing required columns and unknown columns"""
        missing = [col for col in ORDER_LINE_COLUMNS if col not in df.columns]
        if missing:
            raise MalformedInputError(f"Missing required columns: {missing}", column=missing[0])

        allowed = known_columns()
        unknown = [col for col in df.columns if col not in allowed]
        if unknown:
            raise MalformedInputError(f"Unknown columns: {unknown}", column=unknown[0])

    def _trim_strings(self, df: pl.DataFrame) -> pl.DataFrame:
        """Trim whitespace from string columns"""
        string_cols = [
            col for col, dtype in zip(df.columns, df.dtypes)
            if dtype == pl.Utf8
        ]
        if not string_cols:
            return df
        return df.with_columns([pl.col(col).str.strip_chars() for col in string_cols])

    def _coerce_expr(self, column: str, source: pl.DataType, target: pl.DataType) -> pl.Expr:
        if source == pl.Utf8 and target == pl.Date:
            return pl.col(column).str.strptime(pl.Date, self.settings.date_format, strict=False)
        return pl.col(column).cast(target, strict=False)

    def coerce_types(self, df: pl.DataFrame) -> pl.DataFrame:
        """
        Cast every known column to its declared type.

        Nulls stay null. A non-null value that cannot be cast raises
        MalformedInputError naming the column and offending values.
        """
        schema = known_columns()
        exprs = []

        for column, source in zip(df.columns, df.dtypes):
            target = schema.get(column)
            if target is None or source == target:
                continue

            expr = self._coerce_expr(column, source, target)
            probe = df.select(
                pl.col(column).alias("_raw"),
                expr.alias("_parsed"),
            )
            bad = probe.filter(pl.col("_raw").is_not_null() & pl.col("_parsed").is_null())
            if bad.height:
                expected = self.settings.date_format if target == pl.Date else str(target)
                raise MalformedInputError(
                    f"{bad.height} values in '{column}' cannot be read as {expected}",
                    column=column,
                    samples=bad["_raw"].head(5).to_list(),
                )
            exprs.append(expr.alias(column))

        return df.with_columns(exprs) if exprs else df

    def check_completeness(self, df: pl.DataFrame) -> CompletenessReport:
        """Count empty cells in every declared column present in the table"""
        declared = [col for col in ORDER_LINE_COLUMNS if col in df.columns]
        validation = create_completeness_validator(declared).validate(df)
        report = CompletenessReport(
            total_rows=len(df),
            null_counts={check.column: check.failed_rows for check in validation.checks},
            validation=validation,
        )

        logger.info(
            "Completeness checked",
            completion_rate=round(report.completion_rate, 6),
            failing_columns=report.failing_columns,
        )
        return report

    def check_categories(self, df: pl.DataFrame) -> ValidationResult:
        """Compare each categorical column with its allow-list"""
        return create_category_validator().validate(df)

    def check_boundaries(self, df: pl.DataFrame) -> ValidationResult:
        """Numeric and date boundary checks"""
        return create_boundary_validator().validate(df)

    def prepare(self, df: pl.DataFrame) -> pl.DataFrame:
        """Normalize, drop the row-number column, enforce schema and types"""
        df = self.normalize_columns(df)
        df = self.drop_index_column(df)
        self.check_schema(df)
        df = self._trim_strings(df)
        df = self.coerce_types(df)
        # Required columns first, in source order; optional ones after
        ordered = list(ORDER_LINE_COLUMNS) + [c for c in df.columns if c not in ORDER_LINE_COLUMNS]
        return df.select(ordered)

    def clean(self, df: pl.DataFrame) -> CleaningResult:
        """
        Produce a typed order-line table and report its quality.

        Returns a new table; the input frame is left untouched.
        """
        table = self.prepare(df)

        completeness = self.check_completeness(table)
        categories = self.check_categories(table)
        boundaries = self.check_boundaries(table)

        result = CleaningResult(
            table=table,
            completeness=completeness,
            categories=categories,
            boundaries=boundaries,
        )

        for message in result.findings:
            warnings.warn(message, DataQualityWarning, stacklevel=2)

        logger.info(
            "Cleaning complete",
            rows=len(table),
            columns=len(table.columns),
            findings=len(result.findings),
        )
        return result


def clean_orders(df: pl.DataFrame, settings: Optional[InputSettings] = None) -> CleaningResult:
    """
    Convenience function to clean an order-line DataFrame.

    Args:
        df: Raw or partially typed order lines
        settings: Parsing configuration

    Returns:
        CleaningResult with the typed table and quality findings
    """
    return DataCleaner(settings).clean(df)
