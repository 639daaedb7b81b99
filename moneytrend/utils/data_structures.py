"""
Data structures for the money supply trend pipeline

This module contains shared data structures passed between the aligner, the
trend transform engine, the outlier scorer and the analyzer.

Author: MoneyTrend Research Team
Date: 2025
Version: 1.0
"""

import math
import numpy as np
import pandas as pd
from typing import Dict, List, Optional, Any, Tuple, Union
from dataclasses import dataclass, field
from datetime import date, datetime


# Transform names, in the order the engine runs them
LEVEL = "level"
LOG = "log"
RETURNS = "returns"
TRANSFORMS = (LEVEL, LOG, RETURNS)


@dataclass(frozen=True)
class Observation:
    """One (date, value) pair of a named series, as returned by the data source"""

    date: Union[date, datetime, pd.Timestamp]
    value: float


def _clean_float(value: Any) -> Optional[float]:
    """Convert numpy scalars to float, NaN/inf to None (JSON-safe)"""
    if value is None:
        return None
    value = float(value)
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def _clean_value(value: Any) -> Any:
    """Integers stay integers, other numbers go through _clean_float"""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        return _clean_float(value)
    return value


def series_to_records(series: Optional[pd.Series]) -> List[Dict[str, Any]]:
    """Convert a date-indexed series to a list of {date, value} dicts"""
    if series is None:
        return []
    return [
        {"date": pd.Timestamp(idx).strftime("%Y-%m-%d"), "value": _clean_float(val)}
        for idx, val in series.items()
    ]


@dataclass(frozen=True, eq=False)
class RegressionResult:
    """
    Fitted trend regression for one (series, transform) pair.

    The regressor is the time index t (-N..-1), so the intercept is the
    model's prediction for t = 0, the next unobserved period. Residuals are
    aligned to the full table index with NaN on rows excluded from the fit.
    """

    series: str
    transform: str
    intercept: float
    slope: float
    intercept_se: float
    slope_se: float
    intercept_tstat: float
    slope_tstat: float
    r_squared: float
    residual_std_error: float
    df_resid: int
    n_obs: int
    residuals: pd.Series = field(repr=False)

    @property
    def params(self) -> Tuple[float, float]:
        return self.intercept, self.slope

    @property
    def annualized_growth(self) -> Optional[float]:
        """12 x intercept for return regressions (monthly log-returns add up over a year)"""
        if self.transform != RETURNS:
            return None
        return 12.0 * self.intercept

    @property
    def next_period_forecast(self) -> float:
        """Model prediction at t = 0, in the units of the original series where possible"""
        if self.transform == LOG:
            return float(np.exp(self.intercept))
        return self.intercept

    def to_dict(self, include_residuals: bool = True) -> Dict[str, Any]:
        result = {
            "series": self.series,
            "transform": self.transform,
            "intercept": _clean_float(self.intercept),
            "slope": _clean_float(self.slope),
            "intercept_se": _clean_float(self.intercept_se),
            "slope_se": _clean_float(self.slope_se),
            "intercept_tstat": _clean_float(self.intercept_tstat),
            "slope_tstat": _clean_float(self.slope_tstat),
            "r_squared": _clean_float(self.r_squared),
            "residual_std_error": _clean_float(self.residual_std_error),
            "df_resid": self.df_resid,
            "n_obs": self.n_obs,
            "annualized_growth": _clean_float(self.annualized_growth),
            "next_period_forecast": _clean_float(self.next_period_forecast),
        }
        if include_residuals:
            result["residuals"] = series_to_records(self.residuals)
        return result


@dataclass(frozen=True)
class OutlierReport:
    """Counts of z-scores above a threshold, overall and inside a window"""

    threshold: float
    total_count: int
    window_count: Optional[int] = None
    window: Optional[Tuple[Any, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        window = None
        if self.window is not None:
            window = [str(bound) for bound in self.window]
        return {
            "threshold": self.threshold,
            "total_count": self.total_count,
            "window_count": self.window_count,
            "window": window,
        }


@dataclass
class SeriesAnalysis:
    """Everything the pipeline computed for one series"""

    name: str
    regressions: Dict[str, RegressionResult] = field(default_factory=dict)
    zscores: Optional[pd.Series] = None
    outlier_reports: List[OutlierReport] = field(default_factory=list)
    diagnostics: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def level(self) -> Optional[RegressionResult]:
        return self.regressions.get(LEVEL)

    @property
    def log(self) -> Optional[RegressionResult]:
        return self.regressions.get(LOG)

    @property
    def returns(self) -> Optional[RegressionResult]:
        return self.regressions.get(RETURNS)

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "error": self.error,
            "regressions": {name: reg.to_dict() for name, reg in self.regressions.items()},
            "zscores": series_to_records(self.zscores),
            "outliers": [report.to_dict() for report in self.outlier_reports],
            "diagnostics": {
                name: {key: _clean_value(val) for key, val in diag.items()}
                for name, diag in self.diagnostics.items()
            },
        }


@dataclass
class PipelineResults:
    """Output of one pipeline run over the aligned table"""

    table: pd.DataFrame
    series: Dict[str, SeriesAnalysis] = field(default_factory=dict)
    summary: Dict[str, Dict[str, float]] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
    run_timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        index = self.table.index
        return {
            "run_timestamp": self.run_timestamp,
            "n_rows": int(len(self.table)),
            "first_date": pd.Timestamp(index[0]).strftime("%Y-%m-%d") if len(index) else None,
            "last_date": pd.Timestamp(index[-1]).strftime("%Y-%m-%d") if len(index) else None,
            "series": {name: analysis.to_dict() for name, analysis in self.series.items()},
            "summary": self.summary,
            "errors": self.errors,
            "metadata": self.metadata,
        }
