"""
Trend Transform Engine

Runs the level -> log -> log-return regression chain for each series of the
aligned table. Series are modeled independently: a failure in one series is
logged and recorded, and the remaining series are still processed.
"""

import numpy as np
import pandas as pd
import logging
from typing import Dict, List, Optional, Tuple

from ..exceptions import MoneyTrendError
from ..utils.data_alignment import TIME_INDEX_COLUMN
from ..utils.data_structures import SeriesAnalysis, LOG, RETURNS, TRANSFORMS
from .models import TrendRegression, log_transform, log_difference
from .diagnostics import serial_correlation_diagnostics


class TrendTransformEngine:
    """
    Fit level, log and return trend regressions for every series column.

    The engine appends log_<name> and dlog_<name> columns to its copy of the
    table so downstream consumers see the transformed values that were fit.
    """

    def __init__(self, run_diagnostics: bool = True, ljung_box_lags: int = 12):
        """
        Initialize the engine.

        Args:
            run_diagnostics: Compute serial correlation diagnostics per regression
            ljung_box_lags: Lag used by the Ljung-Box test
        """
        self.run_diagnostics = run_diagnostics
        self.ljung_box_lags = ljung_box_lags
        self.logger = logging.getLogger(__name__)

        self.table: Optional[pd.DataFrame] = None
        self.errors: Dict[str, str] = {}

    def run(self, table: pd.DataFrame, series_names: Optional[List[str]] = None) -> Dict[str, SeriesAnalysis]:
        """
        Run the regression chain for each series.

        Args:
            table: Aligned table with a time index column
            series_names: Columns to model (all columns except the time index if None)

        Returns:
            Mapping of series name to SeriesAnalysis; failed series carry an error
        """
        if TIME_INDEX_COLUMN not in table.columns:
            raise MoneyTrendError(f"Table has no time index column {TIME_INDEX_COLUMN!r}")

        if series_names is None:
            series_names = [c for c in table.columns
                            if c != TIME_INDEX_COLUMN and not c.startswith(("log_", "dlog_"))]

        self.table = table.copy()
        self.errors = {}
        results: Dict[str, SeriesAnalysis] = {}

        for name in series_names:
            self.logger.info(f"Modeling {name}")
            results[name] = self.run_series(name)

        n_failed = len(self.errors)
        self.logger.info(f"Trend engine finished: {len(series_names) - n_failed} succeeded, {n_failed} failed")
        return results

    def run_series(self, name: str) -> SeriesAnalysis:
        """Run level -> log -> returns for one column of the engine's table"""
        analysis = SeriesAnalysis(name=name)
        values = self.table[name]
        time_index = self.table[TIME_INDEX_COLUMN]

        for transform in TRANSFORMS:
            try:
                model = TrendRegression(transform)
                result = model.fit(values, time_index, series_name=name)
            except (MoneyTrendError, np.linalg.LinAlgError) as e:
                message = f"{transform} regression failed: {e}"
                self.logger.error(f"{name}: {message}")
                analysis.error = message
                self.errors[name] = message
                break

            analysis.regressions[transform] = result
            if self.run_diagnostics:
                analysis.diagnostics[transform] = serial_correlation_diagnostics(
                    result.residuals, lags=self.ljung_box_lags
                )

            if transform == LOG:
                self.table[f"log_{name}"] = log_transform(values)
            elif transform == RETURNS:
                self.table[f"dlog_{name}"] = log_difference(values)

        return analysis

    def residual_autocorrelation_path(self, analysis: SeriesAnalysis) -> List[Tuple[str, float]]:
        """Lag-1 residual autocorrelation for each fitted transform, in chain order"""
        path = []
        for transform in TRANSFORMS:
            diag = analysis.diagnostics.get(transform, {})
            if "lag1_autocorrelation" in diag:
                path.append((transform, diag["lag1_autocorrelation"]))
        return path
