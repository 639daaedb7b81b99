"""
MoneyTrend: Money Supply Trend and Outlier Analysis

Aligns monthly U.S. money stock series (M2, M1, Currency), fits linear,
log-linear and log-return trend regressions on a backward-counting time
index, and scores return residuals as z-scores to flag anomalous periods.
"""

__version__ = "1.0.0"
__author__ = "MoneyTrend Research Team"

# Core imports
from .core.models import TrendRegression, log_transform, log_difference, reconstruct_log_levels
from .core.trend_engine import TrendTransformEngine
from .core.outlier_scoring import compute_zscores, count_exceedances, score_outliers
from .core.summary_statistics import growth_ratios, snapshot_growth
from .analysis.money_supply_analyzer import MoneySupplyAnalyzer

# Utility imports
from .utils.data_alignment import align_series, build_time_index, add_time_index
from .utils.data_structures import (
    Observation,
    RegressionResult,
    OutlierReport,
    SeriesAnalysis,
    PipelineResults,
)
from .config import PipelineConfig
from .exceptions import (
    MoneyTrendError,
    AlignmentError,
    InsufficientDataError,
    DomainError,
    DataCollectionError,
)

__all__ = [
    # Core models
    "TrendRegression",
    "TrendTransformEngine",
    "log_transform",
    "log_difference",
    "reconstruct_log_levels",

    # Main analyzer
    "MoneySupplyAnalyzer",

    # Scoring and summaries
    "compute_zscores",
    "count_exceedances",
    "score_outliers",
    "growth_ratios",
    "snapshot_growth",

    # Utilities
    "align_series",
    "build_time_index",
    "add_time_index",
    "Observation",
    "RegressionResult",
    "OutlierReport",
    "SeriesAnalysis",
    "PipelineResults",
    "PipelineConfig",

    # Errors
    "MoneyTrendError",
    "AlignmentError",
    "InsufficientDataError",
    "DomainError",
    "DataCollectionError",
]
