"""
Trend regression models for money supply series.

Each model is an ordinary least squares regression of a (possibly
transformed) series on the backward-counting time index t = -N..-1.
"""

import numpy as np
import pandas as pd
import logging
import warnings
from typing import Optional, Union

import statsmodels.api as sm

from ..exceptions import DomainError, InsufficientDataError
from ..utils.data_structures import RegressionResult, LEVEL, LOG, RETURNS, TRANSFORMS

logger = logging.getLogger(__name__)

MIN_OBSERVATIONS = 2


def log_transform(values: pd.Series) -> pd.Series:
    """
    Natural logarithm of a series.

    Missing values stay missing. Any non-positive value raises DomainError
    since its logarithm is undefined.
    """
    observed = values.dropna()
    non_positive = observed[observed <= 0]
    if len(non_positive) > 0:
        first_bad = non_positive.index[0]
        raise DomainError(
            f"{values.name or 'series'}: {len(non_positive)} non-positive value(s), "
            f"first at {first_bad} ({non_positive.iloc[0]}); logarithm undefined"
        )
    return np.log(values.astype(float))


def log_difference(values: pd.Series) -> pd.Series:
    """
    First difference of the logged series, log(v[i]) - log(v[i-1]).

    Same length as the input; the first row has no prior value and is NaN.
    """
    return log_transform(values).diff()


def reconstruct_log_levels(log_diffs: pd.Series, first_log_value: float) -> pd.Series:
    """Invert log_difference: cumulative sum of the differences plus the first logged value"""
    filled = log_diffs.copy()
    filled.iloc[0] = 0.0
    return filled.cumsum() + first_log_value


class TrendRegression:
    """
    OLS of a series on the time index.

    transform selects what is regressed:
        level   -- the raw values
        log     -- ln(values)
        returns -- ln(values[i]) - ln(values[i-1]); the first row is dropped

    Rows with a missing dependent value or time index are excluded from the
    fit, never imputed. The residual standard error divides the sum of
    squared residuals by N_effective - 2.
    """

    def __init__(self, transform: str = LEVEL):
        if transform not in TRANSFORMS:
            raise ValueError(f"Unknown transform {transform!r}, expected one of {TRANSFORMS}")
        self.transform = transform
        self.result: Optional[RegressionResult] = None
        self.fitted = False

    def prepare(self, values: pd.Series) -> pd.Series:
        """Apply this model's transform to the raw series"""
        if self.transform == LOG:
            return log_transform(values)
        if self.transform == RETURNS:
            return log_difference(values)
        return values.astype(float)

    def fit(self, values: pd.Series, time_index: Union[pd.Series, np.ndarray],
            series_name: Optional[str] = None) -> RegressionResult:
        """
        Fit the regression.

        Args:
            values: Raw series values, indexed by date
            time_index: Time index aligned with values
            series_name: Label stored on the result

        Returns:
            RegressionResult with residuals aligned to values.index

        Raises:
            DomainError: log/returns transform of a non-positive value
            InsufficientDataError: fewer than 2 usable observations
        """
        series_name = series_name or values.name or "series"
        if not isinstance(time_index, pd.Series):
            time_index = pd.Series(np.asarray(time_index), index=values.index)

        y = self.prepare(values)
        frame = pd.concat([y.rename("y"), time_index.rename("t")], axis=1)
        usable = frame.notna().all(axis=1)
        n_effective = int(usable.sum())

        if n_effective < MIN_OBSERVATIONS:
            raise InsufficientDataError(
                f"{series_name} ({self.transform}): {n_effective} usable observation(s), "
                f"at least {MIN_OBSERVATIONS} required"
            )

        dropped = len(frame) - n_effective
        if dropped:
            logger.debug(f"{series_name} ({self.transform}): {dropped} row(s) excluded for missing values")

        X = sm.add_constant(frame.loc[usable, "t"].astype(float), has_constant="add")
        y_fit = frame.loc[usable, "y"]

        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            model = sm.OLS(y_fit, X).fit(method="qr")

        df_resid = int(round(model.df_resid))
        if df_resid > 0:
            intercept_se, slope_se = (float(v) for v in model.bse)
            intercept_t, slope_t = (float(v) for v in model.tvalues)
            residual_std_error = float(np.sqrt(model.ssr / df_resid))
        else:
            logger.warning(f"{series_name} ({self.transform}): exact fit with 0 degrees of freedom, "
                           f"standard errors undefined")
            intercept_se = slope_se = intercept_t = slope_t = residual_std_error = float("nan")

        residuals = pd.Series(np.nan, index=values.index, name=f"resid_{self.transform}_{series_name}")
        residuals.loc[y_fit.index] = np.asarray(model.resid, dtype=float)

        self.result = RegressionResult(
            series=series_name,
            transform=self.transform,
            intercept=float(model.params.iloc[0]),
            slope=float(model.params.iloc[1]),
            intercept_se=intercept_se,
            slope_se=slope_se,
            intercept_tstat=intercept_t,
            slope_tstat=slope_t,
            r_squared=float(model.rsquared),
            residual_std_error=residual_std_error,
            df_resid=df_resid,
            n_obs=n_effective,
            residuals=residuals,
        )
        self.fitted = True

        logger.info(f"{series_name} ({self.transform}): intercept={self.result.intercept:.6g} "
                    f"(se={intercept_se:.3g}), slope={self.result.slope:.6g} "
                    f"(se={slope_se:.3g}), R2={self.result.r_squared:.4f}, n={n_effective}")
        return self.result

    def predict(self, time_index: Union[np.ndarray, pd.Series]) -> np.ndarray:
        """Predict the transformed series at the given time index values"""
        if not self.fitted:
            raise ValueError("Model not fitted")
        t = np.asarray(time_index, dtype=float)
        return self.result.intercept + self.result.slope * t
