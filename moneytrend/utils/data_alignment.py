"""
Data alignment utilities for the money supply pipeline

This module merges independently fetched observation series into one table
keyed by date, and builds the synthetic time index the trend regressions use.

Author: MoneyTrend Research Team
Date: 2025
"""

import pandas as pd
import numpy as np
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union, Iterable, Any

from ..exceptions import AlignmentError, InsufficientDataError
from .data_structures import Observation

logger = logging.getLogger(__name__)

TIME_INDEX_COLUMN = "t"

# Columns FRED (and similar sources) attach to observations that are not values
METADATA_COLUMNS = ("realtime_start", "realtime_end", "series_id", "id", "units")

ObservationInput = Union[pd.Series, pd.DataFrame, Iterable[Observation], Iterable[tuple]]


def observations_to_series(observations: ObservationInput, name: Optional[str] = None) -> pd.Series:
    """
    Convert one series of observations into a date-indexed pandas Series

    Args:
        observations: pandas Series indexed by date, DataFrame with 'date' and
            'value' columns (metadata columns are dropped), or an iterable of
            Observation / (date, value) pairs
        name: Name given to the resulting series

    Returns:
        Float series with a DatetimeIndex sorted ascending
    """
    if isinstance(observations, pd.DataFrame):
        frame = observations.drop(columns=[c for c in METADATA_COLUMNS if c in observations.columns])
        if "date" in frame.columns:
            frame = frame.set_index("date")
        if "value" in frame.columns:
            series = frame["value"]
        elif frame.shape[1] == 1:
            series = frame.iloc[:, 0]
        else:
            raise AlignmentError(
                f"Cannot pick a value column for {name or 'series'} from {list(frame.columns)}"
            )
    elif isinstance(observations, pd.Series):
        series = observations
    else:
        records = []
        for obs in observations:
            if isinstance(obs, Observation):
                records.append((obs.date, obs.value))
            else:
                obs_date, obs_value = obs
                records.append((obs_date, obs_value))
        if not records:
            series = pd.Series(dtype=float)
        else:
            dates, values = zip(*records)
            series = pd.Series(list(values), index=list(dates))

    if series.empty:
        return pd.Series(dtype=float, name=name)

    series = pd.to_numeric(series, errors="coerce").astype(float)
    series.index = pd.DatetimeIndex(pd.to_datetime(series.index))

    # Keep the last observation when a date is reported twice
    if series.index.has_duplicates:
        n_dupes = int(series.index.duplicated(keep="last").sum())
        logger.warning(f"Dropping {n_dupes} duplicate dates from {name or 'series'}")
        series = series[~series.index.duplicated(keep="last")]

    series = series.sort_index()
    series.name = name
    return series


def align_series(data_dict: Dict[str, ObservationInput]) -> pd.DataFrame:
    """
    Merge observation series into one table indexed by their common dates

    The merge key is the date value itself, never the position, so a series
    with a gap cannot shift the others out of step. Only dates present in
    every input survive.

    Args:
        data_dict: Mapping of series name (column name) to observations

    Returns:
        DataFrame indexed by date (ascending), one column per series

    Raises:
        AlignmentError: if no series is given, any series is empty, or the
            series have no date in common
    """
    if not data_dict:
        raise AlignmentError("No series provided for alignment")

    converted = {}
    for name, observations in data_dict.items():
        if observations is None:
            raise AlignmentError(f"Series {name} is missing")
        series = observations_to_series(observations, name=name)
        if series.empty:
            raise AlignmentError(f"Series {name} has no observations")
        converted[name] = series

    logger.info(f"Aligning {len(converted)} series on date")

    common_dates = None
    for series in converted.values():
        if common_dates is None:
            common_dates = series.index
        else:
            common_dates = common_dates.intersection(series.index)

    if common_dates is None or len(common_dates) == 0:
        raise AlignmentError("Series share no common dates")

    common_dates = common_dates.sort_values()
    table = pd.DataFrame({name: series.loc[common_dates] for name, series in converted.items()},
                         index=common_dates)
    table.index.name = "date"

    for name, series in converted.items():
        dropped = len(series) - len(common_dates)
        if dropped > 0:
            logger.warning(f"{name}: {dropped} observations outside the common date range dropped")

    n_missing = int(table.isna().sum().sum())
    if n_missing:
        logger.warning(f"Aligned table carries {n_missing} missing values; "
                       f"they are excluded row-wise at regression time")

    logger.info(f"Aligned table: {len(table)} rows from {table.index[0].date()} to {table.index[-1].date()}")
    return table


def build_time_index(n_rows: int) -> np.ndarray:
    """
    Build the backward-counting time index -N, -N+1, ..., -1

    With this offset the intercept of a regression on the index is the
    prediction for t = 0, the next unobserved period.

    Raises:
        InsufficientDataError: if n_rows is zero (or negative)
    """
    if n_rows <= 0:
        raise InsufficientDataError(f"Cannot build a time index for {n_rows} rows")
    return np.arange(-n_rows, 0, dtype=int)


def add_time_index(table: pd.DataFrame, column: str = TIME_INDEX_COLUMN) -> pd.DataFrame:
    """Sort the table ascending by date and append the time index column"""
    indexed = table.sort_index().copy()
    indexed[column] = build_time_index(len(indexed))
    return indexed


def load_table_csv(path: Union[str, Path], date_column: str = "date",
                   columns: Optional[List[str]] = None) -> Dict[str, pd.Series]:
    """
    Load previously fetched observations from a CSV file

    Args:
        path: CSV with a date column and one column per series
        date_column: Name of the date column
        columns: Series columns to keep (all non-date columns if None)

    Returns:
        Mapping of series name to date-indexed series, ready for align_series
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    frame = pd.read_csv(path, parse_dates=[date_column])
    frame = frame.set_index(date_column)
    frame = frame.drop(columns=[c for c in METADATA_COLUMNS if c in frame.columns])

    if columns is None:
        # Skip the derived columns a saved pipeline table carries
        columns = [c for c in frame.columns
                   if c != TIME_INDEX_COLUMN and not c.startswith(("log_", "dlog_"))]

    missing = [c for c in columns if c not in frame.columns]
    if missing:
        raise AlignmentError(f"Columns not found in {path}: {missing}")

    logger.info(f"Loaded {len(frame)} rows for {columns} from {path}")
    return {name: frame[name].dropna() for name in columns}
