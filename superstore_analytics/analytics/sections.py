"""
Report Sections

The fixed catalog of aggregations that make up the Superstore report:
which categories and sub-categories sell and earn, which regions and
segments are profitable, how discounts and months move profit, and how
fast each ship mode turns orders around.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import polars as pl
import structlog

from superstore_analytics.analytics.aggregator import Measure, aggregate, measure_name, pivot

logger = structlog.get_logger(__name__)

SALES_AND_PROFIT: List[Measure] = [("sales", "sum"), ("profit", "sum")]
PROFIT_SUM = measure_name("profit", "sum")


@dataclass(frozen=True)
class ReportSection:
    """One aggregation of the report"""
    name: str
    title: str
    group_by: Tuple[str, ...]
    measures: Tuple[Measure, ...]
    sort_by: Optional[str] = None
    heatmap_value: Optional[str] = None  # Two-key sections only

    @property
    def is_heatmap(self) -> bool:
        return self.heatmap_value is not None


@dataclass
class SectionResult:
    """Computed section: long table and, for heatmaps, the wide matrix"""
    section: ReportSection
    table: pl.DataFrame
    matrix: Optional[pl.DataFrame] = None


def _ranked(name: str, title: str, key: str) -> ReportSection:
    return ReportSection(
        name=name,
        title=title,
        group_by=(key,),
        measures=tuple(SALES_AND_PROFIT),
        sort_by=PROFIT_SUM,
    )


def _heatmap(name: str, title: str, rows: str, columns: str) -> ReportSection:
    return ReportSection(
        name=name,
        title=title,
        group_by=(rows, columns),
        measures=(("profit", "sum"),),
        heatmap_value=PROFIT_SUM,
    )


REPORT_SECTIONS: List[ReportSection] = [
    _ranked("category", "Sales and profit by category", "category"),
    _ranked("sub_category", "Sales and profit by sub-category", "sub_category"),
    _ranked("region", "Sales and profit by region", "region"),
    _ranked("segment", "Sales and profit by segment", "segment"),
    ReportSection(
        name="month",
        title="Sales and profit by order month",
        group_by=("month",),
        measures=tuple(SALES_AND_PROFIT),
    ),
    ReportSection(
        name="discount_bucket",
        title="Profit by discount bucket",
        group_by=("discount_bucket",),
        measures=(("sales", "sum"), ("profit", "sum"), ("profit", "mean"), ("row_id", "count")),
    ),
    ReportSection(
        name="ship_mode_turnaround",
        title="Mean turnaround days by ship mode",
        group_by=("ship_mode",),
        measures=(("turnaround", "mean"), ("row_id", "count")),
    ),
    ReportSection(
        name="sub_category_margin",
        title="Mean margin by sub-category",
        group_by=("sub_category",),
        measures=(("margin", "mean"),),
        sort_by=measure_name("margin", "mean"),
    ),
    _heatmap("segment_by_sub_category", "Profit by segment and sub-category", "segment", "sub_category"),
    _heatmap("region_by_sub_category", "Profit by region and sub-category", "region", "sub_category"),
    _heatmap("region_by_category", "Profit by region and category", "region", "category"),
    _heatmap(
        "discount_by_sub_category",
        "Profit by discount bucket and sub-category",
        "discount_bucket",
        "sub_category",
    ),
]


def build_section(table: pl.DataFrame, section: ReportSection) -> SectionResult:
    """Compute one section"""
    long = aggregate(
        table,
        group_by=section.group_by,
        measures=section.measures,
        sort_by=section.sort_by,
    )
    matrix = None
    if section.is_heatmap:
        rows, columns = section.group_by
        matrix = pivot(long, index=rows, columns=columns, values=section.heatmap_value)
    return SectionResult(section=section, table=long, matrix=matrix)


def build_report_sections(
    table: pl.DataFrame,
    sections: Sequence[ReportSection] = REPORT_SECTIONS,
) -> Dict[str, SectionResult]:
    """
    Compute every section of the report.

    Args:
        table: Order-line table with derived features
        sections: Catalog to compute, defaults to the full report

    Returns:
        Section results keyed by section name, in catalog order
    """
    results: Dict[str, SectionResult] = {}
    for section in sections:
        results[section.name] = build_section(table, section)

    logger.info("Report sections built", sections=len(results))
    return results
