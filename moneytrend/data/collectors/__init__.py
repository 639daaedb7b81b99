from .fred_collector import FREDCollector

__all__ = ["FREDCollector"]
