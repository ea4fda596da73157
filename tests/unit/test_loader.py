"""
Unit Tests - Order-Line Loader
"""
from datetime import date

import polars as pl
import pytest

from superstore_analytics.config import InputSettings
from superstore_analytics.data.generators import write_superstore_csv
from superstore_analytics.errors import MalformedInputError
from superstore_analytics.ingestion.loader import OrderLoader, load_orders
from superstore_analytics.schema import ORDER_LINE_COLUMNS


class TestOrderLoader:
    """Tests for OrderLoader"""

    def test_load_generated_export(self, generated_csv):
        """Generated export loads with the declared schema and no row-number column"""
        loader = OrderLoader()
        df = loader.load(generated_csv)

        assert df.height == 1500
        assert df.columns == list(ORDER_LINE_COLUMNS)
        assert "x" not in df.columns
        assert df.schema["order_date"] == pl.Date
        assert df.schema["ship_date"] == pl.Date
        assert df.schema["sales"] == pl.Float64
        assert df.schema["quantity"] == pl.Int64

    def test_load_result_metadata(self, generated_csv):
        loader = OrderLoader()
        loader.load(generated_csv)

        assert loader.last_result.rows_loaded == 1500
        assert len(loader.last_result.file_hash) == 32
        assert loader.last_result.load_duration_seconds >= 0

    def test_dates_parsed_with_two_digit_year(self, sample_orders_df, write_raw_csv):
        path = write_raw_csv(sample_orders_df)

        df = load_orders(path)

        assert df["order_date"].to_list() == sample_orders_df["order_date"].to_list()
        assert df["ship_date"][0] == date(2016, 11, 11)

    def test_missing_file(self, tmp_path):
        with pytest.raises(MalformedInputError, match="not found"):
            load_orders(tmp_path / "nope.csv")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")

        with pytest.raises(MalformedInputError):
            load_orders(path)

    def test_header_only_file(self, sample_orders_df, write_raw_csv):
        path = write_raw_csv(sample_orders_df.head(0))

        with pytest.raises(MalformedInputError, match="no rows"):
            load_orders(path)

    def test_missing_required_column(self, sample_orders_df, write_raw_csv):
        path = write_raw_csv(sample_orders_df.drop("profit"))

        with pytest.raises(MalformedInputError) as exc_info:
            load_orders(path)

        assert exc_info.value.column == "profit"

    def test_unknown_column(self, sample_orders_df, write_raw_csv):
        path = write_raw_csv(sample_orders_df.with_columns(pl.lit("x").alias("Loyalty Tier")))

        with pytest.raises(MalformedInputError, match="Unknown columns"):
            load_orders(path)

    def test_optional_columns_are_kept(self, tmp_path):
        path = write_superstore_csv(tmp_path / "named.csv", n=20, with_customer_names=True)
        df = load_orders(path)

        assert "customer_name" in df.columns
        assert df["customer_name"].null_count() == 0

    def test_iso_date_rejected(self, sample_orders_df, write_raw_csv):
        path = write_raw_csv(sample_orders_df)
        text = path.read_text().replace("11/08/16", "2016-11-08", 1)
        path.write_text(text)

        with pytest.raises(MalformedInputError) as exc_info:
            load_orders(path)

        assert exc_info.value.column == "order_date"
        assert "2016-11-08" in exc_info.value.samples

    def test_out_of_range_date_rejected(self, make_orders, write_raw_csv):
        path = write_raw_csv(make_orders({}))
        path.write_text(path.read_text().replace("11/11/16", "13/45/16"))

        with pytest.raises(MalformedInputError) as exc_info:
            load_orders(path)

        assert exc_info.value.column == "ship_date"

    def test_non_numeric_value_rejected(self, make_orders, write_raw_csv):
        path = write_raw_csv(make_orders({"sales": 261.96}))
        path.write_text(path.read_text().replace("261.96", "n/a-ish"))

        with pytest.raises(MalformedInputError) as exc_info:
            load_orders(path)

        assert exc_info.value.column == "sales"

    def test_empty_cell_loads_as_null(self, make_orders, write_raw_csv):
        df = make_orders({}, {"customer_id": None})
        path = write_raw_csv(df)

        loaded = load_orders(path)

        assert loaded["customer_id"].null_count() == 1

    def test_custom_date_format(self, make_orders, write_raw_csv):
        path = write_raw_csv(make_orders({}))
        path.write_text(path.read_text().replace("11/08/16", "11/08/2016").replace("11/11/16", "11/11/2016"))

        df = load_orders(path, InputSettings(date_format="%m/%d/%Y"))

        assert df["order_date"][0] == date(2016, 11, 8)
