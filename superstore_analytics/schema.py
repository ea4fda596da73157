"""
Order-Line Schema

Column names (after normalization), their types and the closed domains of
the categorical columns.
"""

import calendar
from typing import Dict, List

import polars as pl

# Required columns, in source order
ORDER_LINE_COLUMNS: Dict[str, pl.DataType] = {
    "row_id": pl.Int64,
    "order_id": pl.Utf8,
    "order_date": pl.Date,
    "ship_date": pl.Date,
    "ship_mode": pl.Utf8,
    "customer_id": pl.Utf8,
    "segment": pl.Utf8,
    "region": pl.Utf8,
    "product_id": pl.Utf8,
    "category": pl.Utf8,
    "sub_category": pl.Utf8,
    "sales": pl.Float64,
    "quantity": pl.Int64,
    "discount": pl.Float64,
    "profit": pl.Float64,
}

# Columns of the full Superstore export that are carried along untouched
OPTIONAL_COLUMNS: Dict[str, pl.DataType] = {
    "customer_name": pl.Utf8,
    "country": pl.Utf8,
    "city": pl.Utf8,
    "state": pl.Utf8,
    "postal_code": pl.Utf8,
    "product_name": pl.Utf8,
}


SHIP_MODES = ["Standard Class", "Second Class", "First Class", "Same Day"]
SEGMENTS = ["Consumer", "Corporate", "Home Office"]
REGIONS = ["East", "West", "Central", "South"]

SUB_CATEGORIES_BY_CATEGORY: Dict[str, List[str]] = {
    "Furniture": ["Bookcases", "Chairs", "Furnishings", "Tables"],
    "Office Supplies": [
        "Appliances", "Art", "Binders", "Envelopes", "Fasteners",
        "Labels", "Paper", "Storage", "Supplies",
    ],
    "Technology": ["Accessories", "Copiers", "Machines", "Phones"],
}
CATEGORIES = list(SUB_CATEGORIES_BY_CATEGORY)
SUB_CATEGORIES = sorted(
    sub for subs in SUB_CATEGORIES_BY_CATEGORY.values() for sub in subs
)

ALLOWED_VALUES: Dict[str, List[str]] = {
    "segment": SEGMENTS,
    "ship_mode": SHIP_MODES,
    "region": REGIONS,
    "category": CATEGORIES,
    "sub_category": SUB_CATEGORIES,
}

MONTHS = list(calendar.month_name)[1:]
MONTH_DTYPE = pl.Enum(MONTHS)

# Columns appended by the feature pass and the model pass
FEATURE_COLUMNS = ["turnaround", "margin", "discount_bucket", "month"]
MODEL_COLUMNS = ["fitted_profit", "residual"]


def known_columns() -> Dict[str, pl.DataType]:
    """All columns accepted at the input boundary"""
    return {**ORDER_LINE_COLUMNS, **OPTIONAL_COLUMNS}
