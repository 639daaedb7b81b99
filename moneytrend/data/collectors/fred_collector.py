"""FRED Data Collector - money stock measures"""

import os
import logging
from typing import Dict, List, Optional
import pandas as pd
from fredapi import Fred

from ...exceptions import DataCollectionError
from ...utils.data_structures import Observation

logger = logging.getLogger(__name__)


class FREDCollector:
    """Collect money supply series from the FRED API"""

    def __init__(self, api_key: Optional[str] = None, client=None):
        if client is not None:
            self.fred = client
            self.api_key = api_key
            return

        self.api_key = api_key or os.getenv('FRED_API_KEY')
        if not self.api_key:
            raise ValueError(
                "FRED API key required. Set FRED_API_KEY environment variable.\n"
                "Get free key: https://fred.stlouisfed.org/docs/api/api_key.html"
            )
        self.fred = Fred(api_key=self.api_key)
        logger.info("FRED API initialized")

    def fetch_series(self, series_id: str, start_date: str, end_date: str) -> pd.Series:
        """Fetch single series from FRED; any failure fails the run"""
        try:
            series = self.fred.get_series(series_id, observation_start=start_date,
                                          observation_end=end_date)
        except Exception as e:
            logger.error(f"Failed to fetch {series_id}: {e}")
            raise DataCollectionError(f"Failed to fetch {series_id}: {e}") from e

        if series is None or len(series) == 0:
            raise DataCollectionError(f"No observations returned for {series_id} "
                                      f"between {start_date} and {end_date}")
        logger.info(f"Fetched {series_id}: {len(series)} observations")
        return series

    def fetch_observations(self, series_id: str, start_date: str, end_date: str) -> List[Observation]:
        """Fetch single series as a chronological list of observations"""
        series = self.fetch_series(series_id, start_date, end_date).sort_index()
        return [Observation(date=pd.Timestamp(idx), value=float(val)) for idx, val in series.items()]

    def fetch_all_series(self, series_ids: Dict[str, str],
                         start_date: str, end_date: str) -> Dict[str, pd.Series]:
        """Fetch multiple series from FRED, keyed by column name"""
        data = {}
        for name, series_id in series_ids.items():
            logger.info(f"Fetching {series_id} as {name}")
            data[name] = self.fetch_series(series_id, start_date, end_date)
        return data
