"""
Outlier scoring of return-regression residuals.

Residuals are standardized to z-scores with the sample (ddof=1) standard
deviation, and z-scores above a threshold are counted over the whole sample
and, separately, inside a contiguous window (e.g. calendar year 2020).

OLS residuals of a regression with an intercept have mean exactly 0. With
assume_zero_mean=True that analytic zero is used for centering instead of the
empirical mean; the empirical mean is still expected to be ~0 (see
residual_mean_is_zero).
"""

import numbers
import numpy as np
import pandas as pd
import logging
from typing import Any, Iterable, List, Optional, Tuple, Union

from scipy import stats

from ..exceptions import DomainError, InsufficientDataError
from ..utils.data_structures import OutlierReport

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLDS = (3.0, 5.0)

Window = Union[slice, Tuple[Any, Any]]


def _as_series(values: Union[pd.Series, np.ndarray, List[float]]) -> pd.Series:
    if isinstance(values, pd.Series):
        return values.astype(float)
    return pd.Series(np.asarray(values, dtype=float))


def compute_zscores(residuals: Union[pd.Series, np.ndarray], assume_zero_mean: bool = False) -> pd.Series:
    """
    Standardize residuals: z = (r - mean(r)) / std(r, ddof=1).

    Missing residuals (the first row of a return regression) are dropped, so
    the result is one z-score per fitted row.

    Args:
        residuals: Residual vector, date-indexed or positional
        assume_zero_mean: Center on the analytic OLS mean of 0

    Raises:
        InsufficientDataError: fewer than 2 residuals
        DomainError: residuals have zero variance
    """
    clean = _as_series(residuals).dropna()
    if len(clean) < 2:
        raise InsufficientDataError(f"{len(clean)} residual(s), at least 2 required for a sample std dev")

    std = float(clean.std(ddof=1))
    if not np.isfinite(std) or std == 0.0:
        raise DomainError("Residuals have zero variance; z-scores undefined")

    if assume_zero_mean:
        z = clean / std
    else:
        z = pd.Series(stats.zscore(clean.values, ddof=1), index=clean.index)

    z.name = "zscore" if clean.name is None else f"z_{clean.name}"
    return z


def residual_mean_is_zero(residuals: Union[pd.Series, np.ndarray], tol: float = 1e-9) -> bool:
    """True if the empirical mean of the (non-missing) residuals is 0 within tol"""
    clean = _as_series(residuals).dropna()
    return bool(abs(clean.mean()) < tol)


def _window_slice(zscores: pd.Series, window: Window) -> pd.Series:
    """Select a contiguous window by position ((start, stop), half-open) or by date (inclusive)"""
    if isinstance(window, slice):
        start, stop = window.start, window.stop
    else:
        start, stop = window

    positional = all(bound is None or (isinstance(bound, numbers.Integral) and not isinstance(bound, bool))
                      for bound in (start, stop))
    if positional:
        return zscores.iloc[start:stop]

    if not isinstance(zscores.index, pd.DatetimeIndex):
        raise ValueError("Date windows require z-scores indexed by date")
    start = pd.Timestamp(start) if start is not None else None
    stop = pd.Timestamp(stop) if stop is not None else None
    return zscores.loc[start:stop]


def count_exceedances(zscores: pd.Series, threshold: float, window: Optional[Window] = None,
                      absolute: bool = False) -> OutlierReport:
    """
    Count z-scores strictly above a threshold.

    The full-sample count and the window count are independent: the window
    count only looks at rows inside the window.

    Args:
        zscores: z-score vector
        threshold: k in z > k
        window: Positional (start, stop) / slice, or (start_date, end_date)
        absolute: Count |z| > k instead of z > k
    """
    zscores = _as_series(zscores)
    scored = zscores.abs() if absolute else zscores

    total = int((scored > threshold).sum())
    window_count = None
    window_bounds = None
    if window is not None:
        in_window = _window_slice(scored, window)
        window_count = int((in_window > threshold).sum())
        window_bounds = (window.start, window.stop) if isinstance(window, slice) else tuple(window)

    return OutlierReport(threshold=float(threshold), total_count=total,
                         window_count=window_count, window=window_bounds)


def score_outliers(zscores: pd.Series, thresholds: Iterable[float] = DEFAULT_THRESHOLDS,
                   window: Optional[Window] = None, absolute: bool = False) -> List[OutlierReport]:
    """One OutlierReport per threshold"""
    reports = [count_exceedances(zscores, k, window=window, absolute=absolute) for k in thresholds]
    for report in reports:
        if report.window_count is None:
            logger.info(f"z > {report.threshold:g}: {report.total_count}")
        else:
            logger.info(f"z > {report.threshold:g}: {report.total_count} overall, "
                        f"{report.window_count} in window {report.window}")
    return reports


def flagged_periods(zscores: pd.Series, threshold: float, absolute: bool = False) -> pd.Series:
    """The z-scores above the threshold, keeping their dates"""
    zscores = _as_series(zscores)
    scored = zscores.abs() if absolute else zscores
    return zscores[scored > threshold]
