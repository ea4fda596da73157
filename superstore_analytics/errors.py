"""
Error Taxonomy

Fatal errors derive from AnalysisError. Data-quality findings that should be
reviewed by a human but must not stop the run are DataQualityWarning.
"""

from typing import Any, List, Optional, Sequence


class AnalysisError(Exception):
    """Base class for all analysis failures"""


class MalformedInputError(AnalysisError):
    """Input file, column set or value types do not match the order-line schema"""

    def __init__(
        self,
        message: str,
        column: Optional[str] = None,
        samples: Optional[Sequence[Any]] = None,
    ):
        self.column = column
        self.samples: List[Any] = list(samples or [])
        if self.samples:
            message = f"{message} (e.g. {self.samples[:5]!r})"
        super().__init__(message)


class IncompleteDataError(MalformedInputError):
    """Declared columns contain empty cells"""

    def __init__(self, completion_rate: float, failing_columns: Sequence[str]):
        self.completion_rate = completion_rate
        self.failing_columns = list(failing_columns)
        super().__init__(
            f"Input is {completion_rate:.2%} complete; empty cells in {self.failing_columns}"
        )


class NegativeTurnaroundError(MalformedInputError):
    """A row ships before it was ordered"""

    def __init__(self, row_ids: Sequence[Any]):
        self.row_ids = list(row_ids)
        super().__init__(
            f"{len(self.row_ids)} rows have ship_date before order_date",
            column="ship_date",
            samples=self.row_ids,
        )


class DivisionUndefinedError(AnalysisError):
    """Margin requested for a row with zero sales"""

    def __init__(self, row_ids: Sequence[Any]):
        self.row_ids = list(row_ids)
        super().__init__(
            f"Margin undefined for {len(self.row_ids)} rows with zero sales "
            f"(row_id {self.row_ids[:5]!r})"
        )


class ModelFitError(AnalysisError):
    """The profit regression cannot be fitted; aggregates are unaffected"""


class MissingModelInputError(ModelFitError):
    """Model input columns contain nulls"""

    def __init__(self, row_ids: Sequence[Any]):
        self.row_ids = list(row_ids)
        super().__init__(
            f"Model inputs contain nulls in {len(self.row_ids)} rows "
            f"(row_id {self.row_ids[:5]!r})"
        )


class SingularFitError(ModelFitError):
    """Design matrix of the regression is rank-deficient"""

    def __init__(self, message: str, rank: Optional[int] = None, n_params: Optional[int] = None, nobs: Optional[int] = None):
        self.rank = rank
        self.n_params = n_params
        self.nobs = nobs
        super().__init__(message)


class DataQualityWarning(UserWarning):
    """Suspicious data surfaced for review; the run continues"""
