"""
Tests for snapshot growth ratios
"""

import numpy as np
import pandas as pd
import pytest

from moneytrend.core.summary_statistics import growth_ratios, snapshot_growth, value_at
from moneytrend.exceptions import AlignmentError, DomainError


def test_growth_ratios_fixture_values():
    ratios = growth_ratios(17878, 18656)

    assert ratios["growth_relative_to_start"] == 0.0435
    assert ratios["share_created_in_period"] == 0.0417
    assert ratios["start_value"] == 17878.0
    assert ratios["end_value"] == 18656.0


def test_growth_ratios_are_rounded_to_four_digits():
    ratios = growth_ratios(3.0, 4.0)
    assert ratios["growth_relative_to_start"] == 0.3333
    assert ratios["share_created_in_period"] == 0.25

    shrinking = growth_ratios(200.0, 150.0)
    assert shrinking["growth_relative_to_start"] == -0.25
    assert shrinking["share_created_in_period"] == -0.3333


def test_growth_ratios_reject_zero_snapshots():
    with pytest.raises(DomainError):
        growth_ratios(0.0, 10.0)
    with pytest.raises(DomainError):
        growth_ratios(10.0, 0.0)


def test_snapshot_growth_uses_table_rows():
    dates = pd.date_range("2020-01-01", periods=12, freq="MS")
    table = pd.DataFrame({
        "M2": np.linspace(15400.0, 19200.0, 12),
        "C": np.linspace(1700.0, 2040.0, 12),
    }, index=dates)

    summary = snapshot_growth(table, "2020-01-01", "2020-12-01")

    assert set(summary) == {"M2", "C"}
    assert summary["M2"]["start_value"] == 15400.0
    assert summary["M2"]["end_value"] == 19200.0
    assert summary["M2"]["growth_relative_to_start"] == round(3800.0 / 15400.0, 4)
    assert summary["C"]["share_created_in_period"] == round(340.0 / 2040.0, 4)


def test_value_at_falls_back_to_previous_observation():
    dates = pd.date_range("2020-01-01", periods=3, freq="MS")
    series = pd.Series([1.0, 2.0, 3.0], index=dates, name="M1")

    assert value_at(series, "2020-02-15") == 2.0
    assert value_at(series, "2021-01-01") == 3.0
    with pytest.raises(AlignmentError):
        value_at(series, "2019-12-01")


def test_value_at_rejects_unparseable_date():
    dates = pd.date_range("2020-01-01", periods=3, freq="MS")
    series = pd.Series([1.0, 2.0, 3.0], index=dates, name="M2")

    with pytest.raises(AlignmentError):
        value_at(series, "garbage")


def test_value_at_warns_on_stale_snapshot(caplog):
    dates = pd.date_range("2015-01-01", periods=12, freq="MS")
    series = pd.Series(np.arange(1.0, 13.0), index=dates, name="M2")

    with caplog.at_level("WARNING", logger="moneytrend.core.summary_statistics"):
        assert value_at(series, "2015-12-15") == 12.0
    assert caplog.records == []

    with caplog.at_level("WARNING", logger="moneytrend.core.summary_statistics"):
        assert value_at(series, "2020-12-01") == 12.0
    assert any("past the last observation" in r.getMessage() for r in caplog.records)
