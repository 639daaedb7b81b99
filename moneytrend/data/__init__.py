"""
Data collection for money supply series.
"""

from .collectors.fred_collector import FREDCollector

__all__ = ["FREDCollector"]
