"""
Aggregation Module

Group-by reductions over the order-line table and the wide matrices used
for heatmaps. Only observed groups are emitted; nothing is zero-filled.
"""

from enum import Enum
from typing import Optional, Sequence, Tuple, Union

import polars as pl
import structlog

logger = structlog.get_logger(__name__)


class Reducer(str, Enum):
    """Supported reductions"""
    SUM = "sum"
    MEAN = "mean"
    COUNT = "count"


Measure = Tuple[str, Union[Reducer, str]]


def measure_name(column: str, reducer: Union[Reducer, str]) -> str:
    """Output column name of a measure, e.g. ``profit_sum``"""
    return f"{column}_{Reducer(reducer).value}"


def _measure_expr(column: str, reducer: Reducer) -> pl.Expr:
    name = measure_name(column, reducer)
    if reducer == Reducer.SUM:
        return pl.col(column).sum().alias(name)
    if reducer == Reducer.MEAN:
        return pl.col(column).mean().alias(name)
    return pl.col(column).count().alias(name)


def aggregate(
    table: pl.DataFrame,
    group_by: Sequence[str],
    measures: Sequence[Measure],
    sort_by: Optional[str] = None,
    descending: bool = True,
) -> pl.DataFrame:
    """
    Group ``table`` and reduce the requested measures.

    Args:
        table: Order-line table
        group_by: Ordered grouping columns
        measures: ``(column, reducer)`` pairs; reducer is sum, mean or count
        sort_by: Measure column to order by (e.g. ``profit_sum``); without
            it rows come out in natural key order
        descending: Direction for ``sort_by``

    Returns:
        One row per observed key combination, key columns then measures

    Raises:
        ValueError: unknown column, reducer or sort column
    """
    keys = list(group_by)
    if not keys:
        raise ValueError("At least one grouping column is required")
    if not measures:
        raise ValueError("At least one measure is required")

    columns = keys + [column for column, _ in measures]
    missing = [col for col in columns if col not in table.columns]
    if missing:
        raise ValueError(f"Unknown columns: {missing}")

    exprs = []
    for column, reducer in measures:
        try:
            exprs.append(_measure_expr(column, Reducer(reducer)))
        except ValueError:
            raise ValueError(
                f"Unknown reducer '{reducer}'; expected one of {[r.value for r in Reducer]}"
            ) from None

    result = table.group_by(keys).agg(exprs)

    if sort_by is None:
        result = result.sort(keys)
    else:
        if sort_by not in result.columns:
            raise ValueError(f"Cannot sort by '{sort_by}'; available: {result.columns}")
        # Ties fall back to key order
        result = result.sort([sort_by] + keys, descending=[descending] + [False] * len(keys))

    logger.debug("Aggregated", group_by=keys, measures=len(exprs), groups=result.height)
    return result


def pivot(
    aggregated: pl.DataFrame,
    index: str,
    columns: str,
    values: str,
) -> pl.DataFrame:
    """
    Spread a two-key aggregate into a matrix.

    Rows follow the natural order of ``index`` and matrix columns the
    natural order of ``columns``. Combinations that were never observed
    are null. Groups with a null key stay in the long table but have no
    cell in the matrix.
    """
    keyed = aggregated.filter(pl.col(index).is_not_null() & pl.col(columns).is_not_null())
    if keyed.height < aggregated.height:
        logger.debug(
            "Null keys left out of matrix",
            index=index,
            columns=columns,
            groups=aggregated.height - keyed.height,
        )

    wide = keyed.pivot(on=columns, index=index, values=values, aggregate_function=None)

    ordered = [str(value) for value in keyed[columns].unique().sort().to_list()]
    return wide.select([index] + ordered).sort(index)
