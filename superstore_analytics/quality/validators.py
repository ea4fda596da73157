"""
Data Validation Module

Rule-based quality checks over a polars DataFrame.

Features:
- Null checks
- Uniqueness checks
- Range/boundary checks
- Allowed-value (enum) checks with distinct value profiling
- Row-level expression checks
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

import polars as pl
import structlog

from superstore_analytics.schema import ALLOWED_VALUES

logger = structlog.get_logger(__name__)


class ValidationSeverity(str, Enum):
    """Severity levels for validation failures"""
    ERROR = "error"  # Critical - blocks pipeline
    WARNING = "warning"  # Non-critical - logged but continues
    INFO = "info"  # Informational only


class ValidationStatus(str, Enum):
    """Overall validation status"""
    PASSED = "passed"
    FAILED = "failed"
    PARTIAL = "partial"


@dataclass
class ValidationCheck:
    """Single validation check result"""
    name: str
    passed: bool
    severity: ValidationSeverity
    message: str
    column: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    failed_rows: int = 0
    total_rows: int = 0


@dataclass
class ValidationResult:
    """Complete validation suite result"""
    status: ValidationStatus
    total_checks: int
    passed_checks: int
    failed_checks: int
    warning_count: int
    checks: List[ValidationCheck] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    @property
    def success_rate(self) -> float:
        """Percentage of passed checks"""
        if self.total_checks == 0:
            return 100.0
        return (self.passed_checks / self.total_checks) * 100

    @property
    def failures(self) -> List[ValidationCheck]:
        """Checks that did not pass, in run order"""
        return [c for c in self.checks if not c.passed]

    def get(self, name: str) -> Optional[ValidationCheck]:
        """Look up a check by name"""
        for check in self.checks:
            if check.name == name:
                return check
        return None


def _missing_column(name: str, column: str, severity: ValidationSeverity) -> ValidationCheck:
    return ValidationCheck(
        name=name,
        passed=False,
        severity=severity,
        message=f"Column '{column}' not found",
        column=column,
    )


class DataValidator:
    """
    Data validator with a chainable check suite.

    Example:
        validator = DataValidator()
        validator.add_not_null_check("order_id")
        validator.add_range_check("discount", min_value=0, max_value=1, max_inclusive=False)
        result = validator.validate(df)
    """

    def __init__(self):
        self._checks: List[Callable[[pl.DataFrame], ValidationCheck]] = []

    def add_not_null_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for null values in column"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"not_null_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            null_count = df[column].null_count()
            total = len(df)
            passed = null_count == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {null_count} null values" if not passed else f"Column '{column}' has no null values",
                column=column,
                details={"null_count": null_count, "null_percentage": (null_count / total) * 100 if total > 0 else 0},
                failed_rows=null_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_unique_check(
        self,
        column: str,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for uniqueness of column values"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"unique_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            total = len(df)
            unique_count = df[column].n_unique()
            duplicate_count = total - unique_count
            passed = duplicate_count == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {duplicate_count} duplicate values" if not passed else f"Column '{column}' values are unique",
                column=column,
                details={"unique_count": unique_count, "duplicate_count": duplicate_count},
                failed_rows=duplicate_count,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_range_check(
        self,
        column: str,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        min_inclusive: bool = True,
        max_inclusive: bool = True,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values within specified range"""
        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"range_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            conditions = []
            if min_value is not None:
                conditions.append(
                    pl.col(column) < min_value if min_inclusive else pl.col(column) <= min_value
                )
            if max_value is not None:
                conditions.append(
                    pl.col(column) > max_value if max_inclusive else pl.col(column) >= max_value
                )

            if not conditions:
                return ValidationCheck(
                    name=name,
                    passed=True,
                    severity=severity,
                    message="No range specified",
                    column=column,
                )

            combined = conditions[0]
            for cond in conditions[1:]:
                combined = combined | cond

            out_of_range = df.filter(combined).height
            total = len(df)
            passed = out_of_range == 0
            lower = "[" if min_inclusive else "("
            upper = "]" if max_inclusive else ")"
            bounds = f"{lower}{min_value}, {max_value}{upper}"

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {out_of_range} values outside {bounds}" if not passed else "All values in range",
                column=column,
                details={"min": min_value, "max": max_value, "out_of_range_count": out_of_range},
                failed_rows=out_of_range,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_positive_check(
        self,
        column: str,
        allow_zero: bool = True,
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for positive values"""
        return self.add_range_check(column, min_value=0, min_inclusive=allow_zero, severity=severity)

    def add_enum_check(
        self,
        column: str,
        allowed_values: Sequence[Any],
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check for values in allowed set; records the distinct values seen"""
        allowed = list(allowed_values)

        def check(df: pl.DataFrame) -> ValidationCheck:
            name = f"enum_{column}"
            if column not in df.columns:
                return _missing_column(name, column, severity)

            distinct = sorted(df[column].drop_nulls().unique().to_list())
            unexpected = [v for v in distinct if v not in allowed]
            invalid = df.filter(
                ~pl.col(column).is_in(allowed) & pl.col(column).is_not_null()
            ).height
            total = len(df)
            passed = invalid == 0

            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message=f"Column '{column}' has {invalid} values outside the allowed set: {unexpected}" if not passed else "All values are valid",
                column=column,
                details={
                    "allowed_values": allowed,
                    "distinct_values": distinct,
                    "invalid_values": unexpected,
                    "invalid_count": invalid,
                },
                failed_rows=invalid,
                total_rows=total,
            )

        self._checks.append(check)
        return self

    def add_row_check(
        self,
        name: str,
        violation: pl.Expr,
        message_on_fail: str,
        columns: Sequence[str] = (),
        severity: ValidationSeverity = ValidationSeverity.ERROR,
    ) -> "DataValidator":
        """Add check that no row satisfies the ``violation`` expression"""
        required = list(columns)

        def check(df: pl.DataFrame) -> ValidationCheck:
            missing = [c for c in required if c not in df.columns]
            if missing:
                return _missing_column(name, missing[0], severity)

            violations = df.filter(violation.fill_null(False)).height
            passed = violations == 0
            return ValidationCheck(
                name=name,
                passed=passed,
                severity=severity,
                message="Check passed" if passed else f"{violations} rows: {message_on_fail}",
                details={"violation_count": violations},
                failed_rows=violations,
                total_rows=len(df),
            )

        self._checks.append(check)
        return self

    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """
        Run all validation checks on DataFrame.

        Args:
            df: DataFrame to validate

        Returns:
            ValidationResult with all check results
        """
        started_at = datetime.now(timezone.utc)
        results = []

        logger.debug("Running validation checks", checks=len(self._checks), rows=len(df))

        for check_func in self._checks:
            result = check_func(df)
            results.append(result)

            if not result.passed:
                logger.warning(
                    f"Validation failed: {result.name}",
                    message=result.message,
                    severity=result.severity.value,
                )

        completed_at = datetime.now(timezone.utc)

        passed_checks = sum(1 for r in results if r.passed)
        failed_checks = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.ERROR)
        warning_count = sum(1 for r in results if not r.passed and r.severity == ValidationSeverity.WARNING)

        if failed_checks > 0:
            status = ValidationStatus.FAILED
        elif warning_count > 0:
            status = ValidationStatus.PARTIAL
        else:
            status = ValidationStatus.PASSED

        validation_result = ValidationResult(
            status=status,
            total_checks=len(results),
            passed_checks=passed_checks,
            failed_checks=failed_checks,
            warning_count=warning_count,
            checks=results,
            started_at=started_at,
            completed_at=completed_at,
        )

        logger.info(
            f"Validation complete: {status.value}",
            passed=passed_checks,
            failed=failed_checks,
            warnings=warning_count,
        )

        return validation_result


# Pre-built validators for the order-line table
def create_completeness_validator(columns: Sequence[str]) -> DataValidator:
    """Not-null check per declared column; empty cells are warnings"""
    validator = DataValidator()
    for column in columns:
        validator.add_not_null_check(column, severity=ValidationSeverity.WARNING)
    return validator


def create_category_validator() -> DataValidator:
    """Allow-list checks for every categorical column; findings are warnings"""
    validator = DataValidator()
    for column, allowed in ALLOWED_VALUES.items():
        validator.add_enum_check(column, allowed, severity=ValidationSeverity.WARNING)
    return validator


def create_boundary_validator() -> DataValidator:
    """Numeric and date boundary checks for order lines; findings are warnings"""
    return (
        DataValidator()
        .add_unique_check("row_id", severity=ValidationSeverity.WARNING)
        .add_positive_check("sales", allow_zero=False, severity=ValidationSeverity.WARNING)
        .add_range_check("quantity", min_value=1, severity=ValidationSeverity.WARNING)
        .add_range_check(
            "discount", min_value=0, max_value=1, max_inclusive=False,
            severity=ValidationSeverity.WARNING,
        )
        .add_row_check(
            "ship_after_order",
            pl.col("ship_date") < pl.col("order_date"),
            "ship_date is before order_date",
            columns=["order_date", "ship_date"],
            severity=ValidationSeverity.WARNING,
        )
    )
