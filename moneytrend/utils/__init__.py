"""
Utility modules for data alignment and shared data structures.
"""

from .data_alignment import align_series, build_time_index, add_time_index, load_table_csv
from .data_structures import Observation, RegressionResult, OutlierReport, SeriesAnalysis, PipelineResults

__all__ = [
    "align_series",
    "build_time_index",
    "add_time_index",
    "load_table_csv",
    "Observation",
    "RegressionResult",
    "OutlierReport",
    "SeriesAnalysis",
    "PipelineResults",
]
