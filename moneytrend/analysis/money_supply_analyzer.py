"""
Money Supply Analyzer - Main Integration Class

This module provides the MoneySupplyAnalyzer class that runs the full
pipeline: align the series, build the time index, fit the level/log/return
trend regressions, score return residuals as z-scores, and compute the
snapshot growth ratios.
"""

import json
import pandas as pd
import numpy as np
from pathlib import Path
from typing import Dict, Optional, Union
import logging

from ..config import PipelineConfig
from ..exceptions import MoneyTrendError, InsufficientDataError
from ..core.models import MIN_OBSERVATIONS
from ..core.trend_engine import TrendTransformEngine
from ..core.outlier_scoring import compute_zscores, score_outliers
from ..core.summary_statistics import snapshot_growth
from ..utils.data_alignment import align_series, add_time_index, TIME_INDEX_COLUMN, ObservationInput
from ..utils.data_structures import PipelineResults, SeriesAnalysis


class MoneySupplyAnalyzer:
    """
    Main integration class for the money supply trend pipeline.

    The trend regressions and the summary statistics are independent
    consumers of the aligned table: a failure in one does not stop the other,
    and a failure in one series does not stop the remaining series.
    """

    def __init__(self, config: Optional[PipelineConfig] = None, collector=None):
        """
        Initialize the analyzer.

        Args:
            config: Pipeline configuration (defaults if None)
            collector: Object with fetch_all_series(series_ids, start, end), e.g. FREDCollector.
                       Only needed by load_data / run_from_source.
        """
        self.config = config or PipelineConfig()
        self.collector = collector
        self.logger = logging.getLogger(__name__)

        self.engine = TrendTransformEngine(
            run_diagnostics=self.config.run_diagnostics,
            ljung_box_lags=self.config.ljung_box_lags,
        )

        self.data: Optional[Dict[str, pd.Series]] = None
        self.results: Optional[PipelineResults] = None

    def load_data(self, start_date: Optional[str] = None,
                  end_date: Optional[str] = None) -> Dict[str, pd.Series]:
        """
        Fetch the configured series from the data source.

        A failed fetch fails the whole run; there is no retry here.
        """
        if self.collector is None:
            raise ValueError("Data collector not provided. Cannot load data.")

        start_date = start_date or self.config.start_date
        end_date = end_date or self.config.end_date

        self.logger.info(f"Loading {list(self.config.series)} from {start_date} to {end_date}")
        self.data = self.collector.fetch_all_series(self.config.series, start_date, end_date)
        self.logger.info("Data loading completed")
        return self.data

    def build_table(self, data: Dict[str, ObservationInput]) -> pd.DataFrame:
        """Align the series on date and append the time index"""
        table = align_series(data)
        if len(table) < MIN_OBSERVATIONS:
            raise InsufficientDataError(
                f"Aligned table has {len(table)} row(s); at least {MIN_OBSERVATIONS} are needed to fit any regression"
            )
        return add_time_index(table)

    def run_analysis(self, data: Dict[str, ObservationInput]) -> PipelineResults:
        """
        Execute the full pipeline on already fetched observations.

        Args:
            data: Mapping of series name to observations

        Returns:
            PipelineResults with per-series regressions, z-scores, outlier
            counts, diagnostics and the summary growth ratios

        Raises:
            AlignmentError / InsufficientDataError: if no usable table can be built
        """
        self.logger.info("Starting money supply trend pipeline")

        # Step 1: Align and index
        self.logger.info("Step 1: Aligning series and building time index")
        table = self.build_table(data)
        series_names = [c for c in table.columns if c != TIME_INDEX_COLUMN]

        results = PipelineResults(table=table)
        results.metadata = {
            "config": self.config.to_dict(),
            "series": series_names,
        }

        # Step 2: Summary statistics, independent of the regressions
        self.logger.info("Step 2: Computing snapshot growth ratios")
        try:
            results.summary = snapshot_growth(table, self.config.summary_start,
                                              self.config.summary_end, columns=series_names)
        except MoneyTrendError as e:
            self.logger.error(f"Summary statistics failed: {e}")
            results.errors["summary"] = str(e)

        # Step 3: Trend regressions (level -> log -> returns)
        self.logger.info("Step 3: Fitting trend regressions")
        results.series = self.engine.run(table, series_names)
        results.table = self.engine.table
        results.errors.update(self.engine.errors)

        # Step 4: Outlier scoring of return residuals
        self.logger.info("Step 4: Scoring return residuals")
        for analysis in results.series.values():
            self._score_series(analysis, results)

        self.results = results
        self.logger.info("Money supply trend pipeline completed")
        return results

    def run_from_source(self, start_date: Optional[str] = None,
                        end_date: Optional[str] = None) -> PipelineResults:
        """Fetch data with the collector, then run the pipeline"""
        data = self.load_data(start_date, end_date)
        return self.run_analysis(data)

    def _score_series(self, analysis: SeriesAnalysis, results: PipelineResults) -> None:
        returns = analysis.returns
        if returns is None:
            return

        try:
            analysis.zscores = compute_zscores(returns.residuals,
                                               assume_zero_mean=self.config.assume_zero_mean)
        except MoneyTrendError as e:
            message = f"outlier scoring failed: {e}"
            self.logger.error(f"{analysis.name}: {message}")
            analysis.error = message
            results.errors[analysis.name] = message
            return

        window = tuple(self.config.anomaly_window) if self.config.anomaly_window else None
        analysis.outlier_reports = score_outliers(
            analysis.zscores,
            thresholds=self.config.zscore_thresholds,
            window=window,
            absolute=self.config.count_absolute,
        )

    def get_coefficient_table(self, results: Optional[PipelineResults] = None) -> pd.DataFrame:
        """One row per (series, transform) with coefficients, standard errors and R2"""
        results = results or self.results
        if results is None:
            raise ValueError("No results available. Run the analysis first.")

        rows = []
        for name, analysis in results.series.items():
            for transform, reg in analysis.regressions.items():
                row = reg.to_dict(include_residuals=False)
                diag = analysis.diagnostics.get(transform, {})
                row["durbin_watson"] = diag.get("durbin_watson", np.nan)
                row["lag1_autocorrelation"] = diag.get("lag1_autocorrelation", np.nan)
                rows.append(row)
        return pd.DataFrame(rows)

    def save_results(self, output_path: Union[str, Path],
                     results: Optional[PipelineResults] = None) -> Path:
        """Write the results as JSON"""
        results = results or self.results
        if results is None:
            raise ValueError("No results available. Run the analysis first.")

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w') as f:
            json.dump(results.to_dict(), f, indent=2)

        self.logger.info(f"Results saved to {output_path}")
        return output_path

    def save_table(self, output_path: Union[str, Path],
                   results: Optional[PipelineResults] = None) -> Path:
        """Write the aligned table (with derived columns) as CSV"""
        results = results or self.results
        if results is None:
            raise ValueError("No results available. Run the analysis first.")

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        results.table.to_csv(output_path, index_label="date")
        self.logger.info(f"Aligned table saved to {output_path}")
        return output_path
