"""
Core trend models, outlier scoring and summary statistics.
"""

from .models import TrendRegression
from .trend_engine import TrendTransformEngine
from .outlier_scoring import compute_zscores, count_exceedances, score_outliers
from .summary_statistics import growth_ratios, snapshot_growth

__all__ = [
    "TrendRegression",
    "TrendTransformEngine",
    "compute_zscores",
    "count_exceedances",
    "score_outliers",
    "growth_ratios",
    "snapshot_growth",
]
