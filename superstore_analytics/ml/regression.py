"""
Profit Regression

Ordinary least squares of profit on discount, sub-category and sales with
the full three-way interaction:

    profit ~ discount * C(sub_category) * sales

sub_category is reference-coded (first level alphabetically is the
baseline); discount and sales are the continuous columns, never the
discount bucket.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import numpy as np
import pandas as pd
import polars as pl
import statsmodels.formula.api as smf
import structlog

from superstore_analytics.errors import MissingModelInputError, SingularFitError
from superstore_analytics.schema import MODEL_COLUMNS

logger = structlog.get_logger(__name__)

PROFIT_FORMULA = "profit ~ discount * C(sub_category) * sales"
MODEL_INPUTS = ["discount", "sub_category", "sales"]
TARGET = "profit"


def _to_frame(rows: pl.DataFrame, columns: List[str]) -> pd.DataFrame:
    missing = [col for col in columns if col not in rows.columns]
    if missing:
        raise ValueError(f"Missing model columns: {missing}")
    return rows.select(columns).to_pandas()


@dataclass
class FittedProfitModel:
    """Fitted regression with prediction helpers"""
    formula: str
    results: Any  # statsmodels RegressionResultsWrapper
    levels: List[str]

    @property
    def r_squared(self) -> float:
        return float(self.results.rsquared)

    @property
    def adj_r_squared(self) -> float:
        return float(self.results.rsquared_adj)

    @property
    def nobs(self) -> int:
        return int(self.results.nobs)

    @property
    def coefficients(self) -> Dict[str, float]:
        """One coefficient per design term, keyed by term name"""
        return {name: float(value) for name, value in self.results.params.items()}

    def _check_levels(self, frame: pd.DataFrame) -> None:
        unseen = sorted(set(frame["sub_category"]) - set(self.levels))
        if unseen:
            raise ValueError(f"Sub-categories not seen during fit: {unseen}")

    def predict(self, rows: pl.DataFrame) -> np.ndarray:
        """Fitted profit for each row"""
        frame = _to_frame(rows, MODEL_INPUTS)
        self._check_levels(frame)
        return np.asarray(self.results.predict(frame), dtype=float)

    def predict_row(self, row: Mapping[str, Any]) -> float:
        """Fitted profit for a single row"""
        frame = pl.DataFrame({col: [row[col]] for col in MODEL_INPUTS})
        return float(self.predict(frame)[0])

    def residual(self, row: Mapping[str, Any]) -> float:
        """Actual minus fitted profit for a single row"""
        return float(row[TARGET]) - self.predict_row(row)

    def with_predictions(self, table: pl.DataFrame) -> pl.DataFrame:
        """Return ``table`` with ``fitted_profit`` and ``residual`` appended"""
        already = [col for col in MODEL_COLUMNS if col in table.columns]
        if already:
            raise ValueError(f"Table already has model columns: {already}")

        fitted = pl.Series("fitted_profit", self.predict(table), dtype=pl.Float64)
        return table.with_columns(fitted).with_columns(
            (pl.col(TARGET) - pl.col("fitted_profit")).alias("residual")
        )

    def summary(self) -> Dict[str, Any]:
        """Fit statistics as plain data"""
        return {
            "formula": self.formula,
            "nobs": self.nobs,
            "n_params": len(self.results.params),
            "r_squared": self.r_squared,
            "adj_r_squared": self.adj_r_squared,
            "reference_level": self.levels[0] if self.levels else None,
            "coefficients": self.coefficients,
        }


class ProfitModel:
    """
    Builder for the profit regression.

    Example:
        fitted = ProfitModel().fit(features_df)
        fitted.r_squared
        scored = fitted.with_predictions(features_df)
    """

    def __init__(self, formula: str = PROFIT_FORMULA):
        self.formula = formula

    def fit(self, table: pl.DataFrame) -> FittedProfitModel:
        """
        Fit OLS on every row of ``table``.

        Raises:
            MissingModelInputError: a model input or the target is null
            SingularFitError: the design matrix is rank-deficient or leaves
                no residual degrees of freedom
        """
        columns = [TARGET] + MODEL_INPUTS
        frame = _to_frame(table, columns)
        incomplete = table.with_row_index("_position").filter(
            pl.any_horizontal(pl.col(columns).is_null())
        )
        if incomplete.height:
            key = "row_id" if "row_id" in table.columns else "_position"
            raise MissingModelInputError(incomplete[key].to_list())

        model = smf.ols(self.formula, data=frame)
        exog = np.asarray(model.exog, dtype=float)
        nobs, n_params = exog.shape
        rank = int(np.linalg.matrix_rank(exog))

        if rank < n_params:
            raise SingularFitError(
                f"Design matrix is rank-deficient: rank {rank} < {n_params} terms "
                f"({nobs} rows)",
                rank=rank,
                n_params=n_params,
                nobs=nobs,
            )
        if nobs <= n_params:
            raise SingularFitError(
                f"No residual degrees of freedom: {nobs} rows for {n_params} terms",
                rank=rank,
                n_params=n_params,
                nobs=nobs,
            )

        results = model.fit()
        fitted = FittedProfitModel(
            formula=self.formula,
            results=results,
            levels=sorted(frame["sub_category"].unique().tolist()),
        )

        logger.info(
            "Profit model fitted",
            nobs=fitted.nobs,
            n_params=n_params,
            r_squared=round(fitted.r_squared, 4),
        )
        return fitted


def fit_profit_model(table: pl.DataFrame, formula: Optional[str] = None) -> FittedProfitModel:
    """Convenience function to fit the profit regression"""
    return ProfitModel(formula or PROFIT_FORMULA).fit(table)
