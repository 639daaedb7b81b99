"""
Serial correlation diagnostics for trend regression residuals.

Used to check that moving from level to log to log-return regressions
progressively removes the serial correlation left in the residuals.
"""

import numpy as np
import pandas as pd
import logging
from typing import Dict, Any

from statsmodels.stats.stattools import durbin_watson
from statsmodels.stats.diagnostic import acorr_ljungbox

logger = logging.getLogger(__name__)


def serial_correlation_diagnostics(residuals: pd.Series, lags: int = 12) -> Dict[str, Any]:
    """
    Durbin-Watson, Ljung-Box and lag-1 autocorrelation of regression residuals.

    Missing residuals (rows excluded from the fit) are dropped first. The
    Ljung-Box lag is capped at n_obs - 1.

    Returns:
        Dict with durbin_watson, lag1_autocorrelation, ljung_box_stat,
        ljung_box_pvalue, ljung_box_lags and an interpretation label
    """
    clean = residuals.dropna()
    n_obs = len(clean)
    diagnostics: Dict[str, Any] = {"n_obs": n_obs}

    if n_obs < 3:
        diagnostics["error"] = "Too few residuals for serial correlation tests"
        return diagnostics

    dw_stat = float(durbin_watson(clean.values))
    diagnostics["durbin_watson"] = dw_stat
    diagnostics["interpretation"] = (
        "positive_autocorr" if dw_stat < 1.5 else "negative_autocorr" if dw_stat > 2.5 else "no_autocorr"
    )
    diagnostics["lag1_autocorrelation"] = float(clean.autocorr(lag=1))

    lb_lags = max(1, min(lags, n_obs - 1))
    try:
        lb = acorr_ljungbox(clean.values, lags=[lb_lags])
        diagnostics["ljung_box_stat"] = float(lb["lb_stat"].iloc[-1])
        diagnostics["ljung_box_pvalue"] = float(lb["lb_pvalue"].iloc[-1])
        diagnostics["ljung_box_lags"] = lb_lags
    except (ValueError, np.linalg.LinAlgError) as e:
        logger.warning(f"Ljung-Box test failed: {e}")
        diagnostics["ljung_box_error"] = str(e)

    return diagnostics
