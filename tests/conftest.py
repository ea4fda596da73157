"""
Test Suite Configuration
"""
from datetime import date
from pathlib import Path
from typing import Callable, Dict

import polars as pl
import pytest

from superstore_analytics.config import InputSettings, Settings
from superstore_analytics.data.generators import write_superstore_csv
from superstore_analytics.ingestion.loader import load_orders
from superstore_analytics.schema import ORDER_LINE_COLUMNS
from superstore_analytics.transformation.cleaners import DataCleaner
from superstore_analytics.transformation.features import FeatureDeriver

RAW_HEADER_BY_COLUMN = {
    "row_id": "Row ID",
    "order_id": "Order ID",
    "order_date": "Order Date",
    "ship_date": "Ship Date",
    "ship_mode": "Ship Mode",
    "customer_id": "Customer ID",
    "segment": "Segment",
    "region": "Region",
    "product_id": "Product ID",
    "category": "Category",
    "sub_category": "Sub-Category",
    "sales": "Sales",
    "quantity": "Quantity",
    "discount": "Discount",
    "profit": "Profit",
}

DEFAULT_ORDER = {
    "row_id": 1,
    "order_id": "CA-2016-152156",
    "order_date": date(2016, 11, 8),
    "ship_date": date(2016, 11, 11),
    "ship_mode": "Second Class",
    "customer_id": "CG-12520",
    "segment": "Consumer",
    "region": "South",
    "product_id": "FUR-BO-10001798",
    "category": "Furniture",
    "sub_category": "Bookcases",
    "sales": 261.96,
    "quantity": 2,
    "discount": 0.0,
    "profit": 41.9136,
}


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(APP_ENV="testing")


@pytest.fixture
def input_settings() -> InputSettings:
    return InputSettings()


@pytest.fixture
def make_orders() -> Callable[..., pl.DataFrame]:
    """Build a typed order-line frame; each dict overrides the default row"""
    def build(*overrides: Dict) -> pl.DataFrame:
        rows = []
        for i, override in enumerate(overrides, start=1):
            row = {**DEFAULT_ORDER, "row_id": i, **override}
            rows.append(row)
        return pl.DataFrame(rows, schema=ORDER_LINE_COLUMNS)
    return build


@pytest.fixture
def sample_orders_df(make_orders) -> pl.DataFrame:
    """Six typed order lines across segments, regions and sub-categories"""
    return make_orders(
        {"segment": "Consumer", "region": "South", "category": "Furniture", "sub_category": "Chairs",
         "sales": 1000.0, "profit": 200.0, "discount": 0.0},
        {"segment": "Corporate", "region": "West", "category": "Office Supplies", "sub_category": "Binders",
         "sales": 50.0, "profit": -10.0, "discount": 0.2, "order_date": date(2017, 3, 2), "ship_date": date(2017, 3, 6)},
        {"segment": "Consumer", "region": "West", "category": "Technology", "sub_category": "Phones",
         "sales": 400.0, "profit": 60.0, "discount": 0.1, "ship_mode": "Same Day",
         "order_date": date(2015, 1, 20), "ship_date": date(2015, 1, 20)},
        {"segment": "Home Office", "region": "East", "category": "Furniture", "sub_category": "Tables",
         "sales": 700.0, "profit": -140.0, "discount": 0.31},
        {"segment": "Corporate", "region": "Central", "category": "Office Supplies", "sub_category": "Paper",
         "sales": 20.0, "profit": 9.5, "discount": 0.0, "ship_mode": "First Class",
         "order_date": date(2014, 7, 1), "ship_date": date(2014, 7, 3)},
        {"segment": "Consumer", "region": "South", "category": "Furniture", "sub_category": "Chairs",
         "sales": 300.0, "profit": 15.0, "discount": 0.2},
    )


@pytest.fixture
def two_row_orders(make_orders) -> pl.DataFrame:
    """Minimal fixture: one profitable Chairs line, one loss-making Tables line"""
    return make_orders(
        {"segment": "Consumer", "sales": 500.0, "profit": 100.0, "discount": 0.0,
         "category": "Furniture", "sub_category": "Chairs"},
        {"segment": "Consumer", "sales": 500.0, "profit": -50.0, "discount": 0.5,
         "category": "Furniture", "sub_category": "Tables"},
    )


@pytest.fixture
def write_raw_csv(tmp_path) -> Callable[..., Path]:
    """Write typed order lines back out the way the export looks"""
    def write(df: pl.DataFrame, name: str = "orders.csv", index_column: bool = True) -> Path:
        raw = df.with_columns(
            [pl.col(c).dt.strftime("%m/%d/%y") for c in ("order_date", "ship_date")]
        ).rename({c: h for c, h in RAW_HEADER_BY_COLUMN.items() if c in df.columns})
        if index_column:
            raw = raw.insert_column(7, pl.Series("X", list(range(1, raw.height + 1))))
        path = tmp_path / name
        raw.write_csv(path)
        return path
    return write


@pytest.fixture(scope="session")
def generated_csv(tmp_path_factory) -> Path:
    """Synthetic export large enough to fit the full regression"""
    path = tmp_path_factory.mktemp("data") / "superstore.csv"
    return write_superstore_csv(path, n=1500, seed=7)


@pytest.fixture(scope="session")
def generated_features(generated_csv) -> pl.DataFrame:
    """Generated export loaded, cleaned and with features derived"""
    cleaned = DataCleaner().clean(load_orders(generated_csv)).table
    return FeatureDeriver().derive(cleaned)
