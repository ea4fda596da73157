"""
Unit Tests - Feature Derivation
"""
from datetime import date

import polars as pl
import pytest

from superstore_analytics.config import InputSettings
from superstore_analytics.errors import (
    DivisionUndefinedError,
    MalformedInputError,
    NegativeTurnaroundError,
)
from superstore_analytics.schema import FEATURE_COLUMNS
from superstore_analytics.transformation.features import (
    FeatureDeriver,
    derive_features,
    discount_bucket_labels,
)


class TestFeatureDeriver:
    """Tests for FeatureDeriver"""

    def test_turnaround_is_day_difference(self, sample_orders_df):
        result = FeatureDeriver().derive(sample_orders_df)

        expected = [
            (ship - order).days
            for order, ship in zip(sample_orders_df["order_date"], sample_orders_df["ship_date"])
        ]
        assert result["turnaround"].to_list() == expected
        assert result["turnaround"].min() >= 0

    def test_same_day_shipping_is_zero(self, make_orders):
        df = make_orders({"order_date": date(2015, 1, 20), "ship_date": date(2015, 1, 20)})

        assert FeatureDeriver().derive(df)["turnaround"].to_list() == [0]

    def test_negative_turnaround_is_surfaced(self, make_orders):
        df = make_orders({}, {"order_date": date(2016, 5, 10), "ship_date": date(2016, 5, 8)})

        with pytest.raises(NegativeTurnaroundError) as exc_info:
            FeatureDeriver().derive(df)

        assert exc_info.value.row_ids == [2]

    def test_margin(self, make_orders):
        df = make_orders({"sales": 1000.0, "profit": 200.0}, {"sales": 3.0, "profit": -1.0})

        result = FeatureDeriver().derive(df)

        assert result["margin"].to_list() == [0.2, -0.33]

    def test_margin_with_zero_sales_is_an_error(self, make_orders):
        df = make_orders({}, {"sales": 0.0, "profit": 5.0})

        with pytest.raises(DivisionUndefinedError) as exc_info:
            FeatureDeriver().derive(df)

        assert exc_info.value.row_ids == [2]

    @pytest.mark.parametrize(
        "discount, bucket",
        [
            (0.0, "[0,0.1)"),
            (0.1, "[0.1,0.2)"),
            (0.2, "[0.2,0.3)"),
            (0.3, "[0.3,0.4)"),
            (0.31, "[0.3,0.4)"),
            (0.7, "[0.7,0.8)"),
            (0.99, "[0.9,1)"),
        ],
    )
    def test_discount_bucket_is_left_closed(self, make_orders, discount, bucket):
        df = make_orders({"discount": discount})

        result = FeatureDeriver().derive(df)

        assert result["discount_bucket"].to_list() == [bucket]

    def test_discount_bucket_is_ordered(self, sample_orders_df):
        result = FeatureDeriver().derive(sample_orders_df)

        assert isinstance(result.schema["discount_bucket"], pl.Enum)
        assert result["discount_bucket"].cat.get_categories().to_list() == discount_bucket_labels(0.1)

    def test_null_discount_has_no_bucket(self, make_orders):
        df = make_orders({"discount": 0.45}, {"discount": None})

        result = FeatureDeriver().derive(df)

        assert result["discount_bucket"].to_list() == ["[0.4,0.5)", None]
        assert isinstance(result.schema["discount_bucket"], pl.Enum)

    def test_discount_outside_unit_interval(self, make_orders):
        df = make_orders({"discount": 1.0})

        with pytest.raises(MalformedInputError) as exc_info:
            FeatureDeriver().derive(df)

        assert exc_info.value.column == "discount"

    def test_raw_discount_is_kept(self, sample_orders_df):
        result = FeatureDeriver().derive(sample_orders_df)

        assert result.schema["discount"] == pl.Float64
        assert result["discount"].to_list() == sample_orders_df["discount"].to_list()

    def test_month_name(self, sample_orders_df):
        result = FeatureDeriver().derive(sample_orders_df)

        assert result["month"].cast(pl.Utf8).to_list() == [
            "November", "March", "January", "November", "July", "November",
        ]

    def test_derive_only_appends(self, sample_orders_df):
        original = sample_orders_df.clone()
        deriver = FeatureDeriver()

        first = deriver.derive(sample_orders_df)
        second = deriver.derive(sample_orders_df)

        assert sample_orders_df.equals(original)
        assert first.equals(second)
        assert first.height == sample_orders_df.height
        assert first.columns == sample_orders_df.columns + FEATURE_COLUMNS
        assert first.select(sample_orders_df.columns).equals(sample_orders_df)

    def test_refuses_to_rederive(self, sample_orders_df):
        derived = FeatureDeriver().derive(sample_orders_df)

        with pytest.raises(ValueError, match="already"):
            FeatureDeriver().derive(derived)

    def test_settings_drive_bucket_width(self, make_orders):
        df = make_orders({"discount": 0.3}, {"sales": 3.0, "profit": 1.0})
        settings = InputSettings(discount_bucket_width=0.25, margin_decimals=3)

        result = derive_features(df, settings)

        assert result["discount_bucket"].to_list() == ["[0.25,0.5)", "[0,0.25)"]
        assert result["margin"].to_list()[1] == 0.333


class TestBucketLabels:
    def test_default_labels(self):
        labels = discount_bucket_labels()

        assert len(labels) == 10
        assert labels[0] == "[0,0.1)"
        assert labels[-1] == "[0.9,1)"

    def test_quarter_labels(self):
        assert discount_bucket_labels(0.25) == ["[0,0.25)", "[0.25,0.5)", "[0.5,0.75)", "[0.75,1)"]
