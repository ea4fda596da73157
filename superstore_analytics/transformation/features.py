"""
Feature Derivation Module

Appends the derived order-line attributes:
- turnaround: days between order and shipment
- margin: profit as a fraction of sales
- discount_bucket: left-closed discount interval, ordered
- month: calendar month of the order, ordered

The continuous ``discount`` column is left as is next to its bucket.
"""

from typing import List, Optional

import polars as pl
import structlog

from superstore_analytics.config.settings import InputSettings
from superstore_analytics.errors import (
    DivisionUndefinedError,
    MalformedInputError,
    NegativeTurnaroundError,
)
from superstore_analytics.schema import FEATURE_COLUMNS, MONTH_DTYPE

logger = structlog.get_logger(__name__)

# Guards floor() against 0.3 / 0.1 == 2.9999999999999996
_BUCKET_PRECISION = 9


def _format_bound(value: float) -> str:
    return f"{round(value, _BUCKET_PRECISION):g}"


def discount_bucket_labels(width: float = 0.1) -> List[str]:
    """
    Labels of the left-closed buckets covering [0, 1).

    >>> discount_bucket_labels(0.25)
    ['[0,0.25)', '[0.25,0.5)', '[0.5,0.75)', '[0.75,1)']
    """
    count = round(1 / width)
    return [
        f"[{_format_bound(i * width)},{_format_bound((i + 1) * width)})"
        for i in range(count)
    ]


class FeatureDeriver:
    """
    Derives per-row features from a cleaned order-line table.

    Example:
        deriver = FeatureDeriver()
        features_df = deriver.derive(cleaned_df)
    """

    def __init__(
        self,
        margin_decimals: int = 2,
        bucket_width: float = 0.1,
    ):
        self.margin_decimals = margin_decimals
        self.bucket_width = bucket_width
        self.bucket_labels = discount_bucket_labels(bucket_width)
        self.bucket_dtype = pl.Enum(self.bucket_labels)

    @classmethod
    def from_settings(cls, settings: InputSettings) -> "FeatureDeriver":
        return cls(
            margin_decimals=settings.margin_decimals,
            bucket_width=settings.discount_bucket_width,
        )

    def turnaround(self, df: pl.DataFrame) -> pl.Series:
        """Whole days from order to shipment"""
        days = df.select(
            (pl.col("ship_date") - pl.col("order_date")).dt.total_days().alias("turnaround")
        )["turnaround"]

        negative = df.filter(days < 0)
        if negative.height:
            raise NegativeTurnaroundError(negative["row_id"].to_list())
        return days

    def margin(self, df: pl.DataFrame) -> pl.Series:
        """Profit over sales, rounded"""
        zero_sales = df.filter(pl.col("sales") == 0)
        if zero_sales.height:
            raise DivisionUndefinedError(zero_sales["row_id"].to_list())

        return df.select(
            (pl.col("profit") / pl.col("sales")).round(self.margin_decimals).alias("margin")
        )["margin"]

    def discount_bucket(self, df: pl.DataFrame) -> pl.Series:
        """Bucket label of each discount"""
        index = df.select(
            (pl.col("discount") / self.bucket_width)
            .round(_BUCKET_PRECISION)
            .floor()
            .cast(pl.Int64)
            .alias("bucket")
        )["bucket"]

        out_of_range = df.filter((index < 0) | (index >= len(self.bucket_labels)))
        if out_of_range.height:
            raise MalformedInputError(
                f"{out_of_range.height} discounts outside [0, 1)",
                column="discount",
                samples=out_of_range["discount"].head(5).to_list(),
            )

        return index.replace_strict(
            dict(enumerate(self.bucket_labels)),
            default=None,
            return_dtype=self.bucket_dtype,
        ).rename("discount_bucket")

    def month(self, df: pl.DataFrame) -> pl.Series:
        """Calendar month name of the order date"""
        return df.select(
            pl.col("order_date").dt.strftime("%B").cast(MONTH_DTYPE).alias("month")
        )["month"]

    def derive(self, df: pl.DataFrame) -> pl.DataFrame:
        """
        Append turnaround, margin, discount_bucket and month.

        Row order and row count are preserved and existing columns are not
        touched. Deriving into a table that already carries the feature
        columns is refused.
        """
        already = [col for col in FEATURE_COLUMNS if col in df.columns]
        if already:
            raise ValueError(f"Table already has derived columns: {already}")

        result = df.with_columns([
            self.turnaround(df),
            self.margin(df),
            self.discount_bucket(df),
            self.month(df),
        ])

        logger.info(
            "Features derived",
            rows=result.height,
            columns=FEATURE_COLUMNS,
            mean_turnaround=result["turnaround"].mean(),
        )
        return result


def derive_features(df: pl.DataFrame, settings: Optional[InputSettings] = None) -> pl.DataFrame:
    """Convenience function to derive the order-line features"""
    deriver = FeatureDeriver.from_settings(settings) if settings else FeatureDeriver()
    return deriver.derive(df)
