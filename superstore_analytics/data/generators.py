"""
Synthetic Data Generator

Generates Superstore-shaped order lines for tests and demos. The output
mirrors the raw export: original header names, %m/%d/%y dates and the
row-number column, so it exercises the loader end to end.
"""

from datetime import date, timedelta
from pathlib import Path
from typing import Dict, List, Tuple, Union

import numpy as np
import polars as pl
from faker import Faker

from superstore_analytics.schema import (
    REGIONS,
    SEGMENTS,
    SUB_CATEGORIES_BY_CATEGORY,
)


# =============================================================================
# CONFIGURATION
# =============================================================================

RAW_HEADERS = [
    "Row ID", "Order ID", "Order Date", "Ship Date", "Ship Mode", "Customer ID",
    "Segment", "X", "Region", "Product ID", "Category", "Sub-Category",
    "Sales", "Quantity", "Discount", "Profit",
]

# (ship mode, share, min days, max days)
SHIP_MODES: List[Tuple[str, float, int, int]] = [
    ("Standard Class", 0.60, 4, 7),
    ("Second Class", 0.19, 2, 5),
    ("First Class", 0.16, 1, 3),
    ("Same Day", 0.05, 0, 0),
]

SEGMENT_WEIGHTS = [0.52, 0.30, 0.18]
REGION_WEIGHTS = [0.28, 0.32, 0.23, 0.17]

DISCOUNT_LEVELS = [0.0, 0.1, 0.15, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8]
DISCOUNT_WEIGHTS = [0.48, 0.02, 0.01, 0.37, 0.02, 0.02, 0.02, 0.01, 0.04, 0.01]

# Typical list price and undiscounted margin per sub-category
SUB_CATEGORY_PROFILE: Dict[str, Tuple[float, float]] = {
    "Bookcases": (500.0, 0.15), "Chairs": (530.0, 0.20), "Furnishings": (95.0, 0.25),
    "Tables": (650.0, 0.10), "Appliances": (230.0, 0.30), "Art": (34.0, 0.30),
    "Binders": (130.0, 0.35), "Envelopes": (65.0, 0.42), "Fasteners": (14.0, 0.32),
    "Labels": (35.0, 0.45), "Paper": (57.0, 0.43), "Storage": (265.0, 0.18),
    "Supplies": (120.0, 0.10), "Accessories": (215.0, 0.30), "Copiers": (2200.0, 0.40),
    "Machines": (1650.0, 0.18), "Phones": (370.0, 0.22),
}

FIRST_ORDER_DATE = date(2014, 1, 3)
ORDER_SPAN_DAYS = 4 * 365


# =============================================================================
# GENERATORS
# =============================================================================

class SuperstoreGenerator:
    """Generate realistic Superstore order lines"""

    def __init__(self, seed: int = 42):
        self.rng = np.random.default_rng(seed)
        self.fake = Faker()
        self.fake.seed_instance(seed)
        self._sub_to_category = {
            sub: category
            for category, subs in SUB_CATEGORIES_BY_CATEGORY.items()
            for sub in subs
        }
        self._sub_categories = list(self._sub_to_category)

    def _customers(self, n: int) -> List[Tuple[str, str]]:
        """Customer ids and names, e.g. ('CG-12520', 'Claire Gute')"""
        customers = []
        for _ in range(n):
            first, last = self.fake.first_name(), self.fake.last_name()
            customer_id = f"{first[0]}{last[0]}-{self.rng.integers(10000, 99999)}"
            customers.append((customer_id, f"{first} {last}"))
        return customers

    def _profit(self, sub_category: str, sales: float, discount: float) -> float:
        _, base_margin = SUB_CATEGORY_PROFILE[sub_category]
        noise = self.rng.normal(0, 0.04)
        return round(sales * (base_margin - 1.25 * discount + noise), 4)

    def generate(self, n: int = 1000, with_customer_names: bool = False) -> pl.DataFrame:
        """
        Generate ``n`` order lines.

        Args:
            n: Number of rows
            with_customer_names: Add a "Customer Name" column

        Returns:
            DataFrame with raw Superstore headers and text dates
        """
        customers = self._customers(max(1, n // 6))
        modes = [m[0] for m in SHIP_MODES]
        mode_weights = [m[1] for m in SHIP_MODES]
        ship_days = {m[0]: (m[2], m[3]) for m in SHIP_MODES}

        rows = []
        for row_id in range(1, n + 1):
            order_date = FIRST_ORDER_DATE + timedelta(days=int(self.rng.integers(0, ORDER_SPAN_DAYS)))
            ship_mode = str(self.rng.choice(modes, p=mode_weights))
            low, high = ship_days[ship_mode]
            ship_date = order_date + timedelta(days=int(self.rng.integers(low, high + 1)))

            sub_category = str(self.rng.choice(self._sub_categories))
            category = self._sub_to_category[sub_category]
            list_price, _ = SUB_CATEGORY_PROFILE[sub_category]
            quantity = int(self.rng.integers(1, 10))
            discount = float(self.rng.choice(DISCOUNT_LEVELS, p=DISCOUNT_WEIGHTS))
            unit_price = list_price * float(self.rng.lognormal(0, 0.5)) / 3
            sales = round(max(0.5, unit_price * quantity * (1 - discount)), 4)

            customer_id, customer_name = customers[int(self.rng.integers(0, len(customers)))]

            row = {
                "Row ID": str(row_id),
                "Order ID": f"CA-{order_date.year}-{self.rng.integers(100000, 999999)}",
                "Order Date": order_date.strftime("%m/%d/%y"),
                "Ship Date": ship_date.strftime("%m/%d/%y"),
                "Ship Mode": ship_mode,
                "Customer ID": customer_id,
                "Segment": str(self.rng.choice(SEGMENTS, p=SEGMENT_WEIGHTS)),
                "X": str(row_id),
                "Region": str(self.rng.choice(REGIONS, p=REGION_WEIGHTS)),
                "Product ID": f"{category[:3].upper()}-{sub_category[:2].upper()}-{self.rng.integers(10000000, 99999999)}",
                "Category": category,
                "Sub-Category": sub_category,
                "Sales": str(sales),
                "Quantity": str(quantity),
                "Discount": str(discount),
                "Profit": str(self._profit(sub_category, sales, discount)),
            }
            if with_customer_names:
                row["Customer Name"] = customer_name
            rows.append(row)

        headers = RAW_HEADERS + (["Customer Name"] if with_customer_names else [])
        return pl.DataFrame(rows, schema={h: pl.Utf8 for h in headers})


def write_superstore_csv(
    path: Union[str, Path],
    n: int = 1000,
    seed: int = 42,
    with_customer_names: bool = False,
) -> Path:
    """Generate ``n`` rows and write them as CSV"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    SuperstoreGenerator(seed).generate(n, with_customer_names=with_customer_names).write_csv(path)
    return path
