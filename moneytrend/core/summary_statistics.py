"""
Point-in-time growth statistics between two snapshots of a series.
"""

import pandas as pd
import logging
from typing import Dict, List, Optional, Union

from ..exceptions import AlignmentError, DomainError

logger = logging.getLogger(__name__)

ROUND_DIGITS = 4


def growth_ratios(start: float, end: float) -> Dict[str, float]:
    """
    Growth between two snapshots of a stock.

    growth_relative_to_start = (end - start) / start
    share_created_in_period  = (end - start) / end

    Both are rounded to 4 decimal digits.
    """
    start = float(start)
    end = float(end)
    if start == 0 or end == 0:
        raise DomainError(f"Growth ratios undefined for a zero snapshot (start={start}, end={end})")

    change = end - start
    return {
        "start_value": start,
        "end_value": end,
        "growth_relative_to_start": round(change / start, ROUND_DIGITS),
        "share_created_in_period": round(change / end, ROUND_DIGITS),
    }


def value_at(series: pd.Series, when: Union[str, pd.Timestamp]) -> float:
    """
    Value on the given date, or the last observation before it.

    A date more than one period past the last observation still returns the
    last value and logs a warning.
    """
    name = series.name or "series"
    try:
        when = pd.Timestamp(when)
    except (TypeError, ValueError) as e:
        raise AlignmentError(f"{name}: invalid snapshot date {when!r} ({e})") from e
    if pd.isna(when):
        raise AlignmentError(f"{name}: snapshot date is missing")

    observed = series.dropna()
    available = observed.loc[:when]
    if available.empty:
        raise AlignmentError(f"{name} has no observation on or before {when.date()}")

    if len(observed) > 1:
        period = observed.index.to_series().diff().median()
        last_date = observed.index[-1]
        if when - last_date > period:
            logger.warning(f"{name}: snapshot date {when.date()} is past the last observation "
                           f"{last_date.date()}; using the value from {last_date.date()}")
    return float(available.iloc[-1])


def snapshot_growth(table: pd.DataFrame, start_date: Union[str, pd.Timestamp],
                    end_date: Union[str, pd.Timestamp],
                    columns: Optional[List[str]] = None) -> Dict[str, Dict[str, float]]:
    """
    growth_ratios for each column between two dates of the aligned table.

    Args:
        table: Aligned table indexed by date
        start_date: Start-of-period snapshot date
        end_date: End-of-period snapshot date
        columns: Series columns (all columns if None)
    """
    columns = columns or list(table.columns)
    summary = {}
    for name in columns:
        start_value = value_at(table[name], start_date)
        end_value = value_at(table[name], end_date)
        summary[name] = growth_ratios(start_value, end_value)
        logger.info(f"{name}: {start_value:,.1f} -> {end_value:,.1f}, "
                    f"growth {summary[name]['growth_relative_to_start']:.4f}, "
                    f"share created {summary[name]['share_created_in_period']:.4f}")
    return summary
