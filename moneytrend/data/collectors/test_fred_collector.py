"""
Tests for the FRED collector using an in-memory client
"""

import pandas as pd
import pytest

from moneytrend.data.collectors.fred_collector import FREDCollector
from moneytrend.exceptions import DataCollectionError
from moneytrend.utils.data_structures import Observation


class FakeFred:
    """Mimics fredapi.Fred.get_series"""

    def __init__(self, series):
        self.series = series
        self.requests = []

    def get_series(self, series_id, observation_start=None, observation_end=None):
        self.requests.append((series_id, observation_start, observation_end))
        if series_id not in self.series:
            raise ValueError("Bad Request.  The series does not exist.")
        return self.series[series_id]


def _client():
    dates = pd.date_range("2020-01-01", periods=3, freq="MS")
    return FakeFred({
        "M2SL": pd.Series([15400.0, 15450.0, 16000.0], index=dates),
        "M1SL": pd.Series([4000.0, 4010.0, 4250.0], index=dates),
        "EMPTY": pd.Series(dtype=float),
    })


def test_fetch_all_series_keys_by_column_name():
    client = _client()
    collector = FREDCollector(client=client)

    data = collector.fetch_all_series({"M2": "M2SL", "M1": "M1SL"}, "2020-01-01", "2020-03-31")

    assert list(data) == ["M2", "M1"]
    assert data["M2"].iloc[-1] == 16000.0
    assert client.requests[0] == ("M2SL", "2020-01-01", "2020-03-31")


def test_fetch_observations():
    collector = FREDCollector(client=_client())

    observations = collector.fetch_observations("M1SL", "2020-01-01", "2020-03-31")

    assert len(observations) == 3
    assert observations[0] == Observation(date=pd.Timestamp("2020-01-01"), value=4000.0)


def test_fetch_failures_fail_the_run():
    collector = FREDCollector(client=_client())

    with pytest.raises(DataCollectionError):
        collector.fetch_series("NOPE", "2020-01-01", "2020-03-31")
    with pytest.raises(DataCollectionError):
        collector.fetch_series("EMPTY", "2020-01-01", "2020-03-31")


def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("FRED_API_KEY", raising=False)
    with pytest.raises(ValueError):
        FREDCollector()
