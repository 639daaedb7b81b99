"""
End-to-end tests for the money supply pipeline
"""

import json

import numpy as np
import pandas as pd
import pytest

from moneytrend.analysis.money_supply_analyzer import MoneySupplyAnalyzer
from moneytrend.config import PipelineConfig
from moneytrend.exceptions import AlignmentError, DataCollectionError, InsufficientDataError
from moneytrend.utils.data_alignment import load_table_csv


class FakeCollector:
    """Stands in for FREDCollector: returns fixed series keyed by column name"""

    def __init__(self, data, fail=False):
        self.data = data
        self.fail = fail
        self.calls = []

    def fetch_all_series(self, series_ids, start_date, end_date):
        self.calls.append((dict(series_ids), start_date, end_date))
        if self.fail:
            raise DataCollectionError("FRED unavailable")
        return {name: self.data[name] for name in series_ids}


def test_full_pipeline(money_supply_data):
    analyzer = MoneySupplyAnalyzer()
    results = analyzer.run_analysis(money_supply_data)

    n_rows = len(results.table)
    assert n_rows == 120
    assert results.errors == {}
    assert list(results.series) == ["M2", "M1", "C"]
    assert results.table["t"].iloc[0] == -n_rows
    assert results.table["t"].iloc[-1] == -1

    for name, analysis in results.series.items():
        assert analysis.succeeded
        assert len(analysis.zscores) == n_rows - 1
        assert abs(analysis.returns.residuals.dropna().mean()) < 1e-9
        assert [r.threshold for r in analysis.outlier_reports] == [3.0, 5.0]
        assert all(r.window_count is not None for r in analysis.outlier_reports)

    # The April 2020 jump in M2 is flagged inside the 2020 window
    m2_reports = results.series["M2"].outlier_reports
    assert m2_reports[1].total_count >= 1
    assert m2_reports[1].window_count >= 1

    assert set(results.summary) == {"M2", "M1", "C"}
    m2 = money_supply_data["M2"]
    start, end = m2.loc["2020-01-01"], m2.loc["2020-12-01"]
    assert results.summary["M2"]["growth_relative_to_start"] == round((end - start) / start, 4)


def test_results_are_json_serializable(money_supply_data, tmp_path):
    analyzer = MoneySupplyAnalyzer()
    results = analyzer.run_analysis(money_supply_data)

    payload = json.loads(json.dumps(results.to_dict()))
    assert payload["n_rows"] == 120
    assert payload["first_date"] == "2011-01-01"
    assert payload["last_date"] == "2020-12-01"
    m2_returns = payload["series"]["M2"]["regressions"]["returns"]
    assert m2_returns["residuals"][0]["value"] is None
    assert np.isclose(m2_returns["annualized_growth"], 12 * m2_returns["intercept"])
    assert len(payload["series"]["M2"]["zscores"]) == 119

    saved = analyzer.save_results(tmp_path / "out" / "results.json")
    with open(saved) as f:
        assert json.load(f)["series"]["C"]["name"] == "C"


def test_coefficient_table(money_supply_data):
    analyzer = MoneySupplyAnalyzer()
    analyzer.run_analysis(money_supply_data)

    coefficients = analyzer.get_coefficient_table()

    assert len(coefficients) == 9
    assert set(coefficients["transform"]) == {"level", "log", "returns"}
    assert {"intercept", "slope", "intercept_se", "slope_se", "r_squared",
            "durbin_watson"} <= set(coefficients.columns)


def test_saved_table_round_trips(money_supply_data, tmp_path):
    analyzer = MoneySupplyAnalyzer()
    first = analyzer.run_analysis(money_supply_data)
    path = analyzer.save_table(tmp_path / "aligned.csv")

    reloaded = load_table_csv(path)
    assert set(reloaded) == {"M2", "M1", "C"}

    second = MoneySupplyAnalyzer().run_analysis(reloaded)
    assert np.isclose(second.series["M2"].returns.intercept, first.series["M2"].returns.intercept)


def test_summary_failure_does_not_block_regressions(money_supply_data):
    config = PipelineConfig(summary_start="1990-01-01", summary_end="2020-12-01")
    results = MoneySupplyAnalyzer(config=config).run_analysis(money_supply_data)

    assert "summary" in results.errors
    assert results.summary == {}
    assert all(analysis.succeeded for analysis in results.series.values())


def test_failing_series_is_reported_and_others_continue(money_supply_data):
    data = dict(money_supply_data)
    broken = data["M1"].copy()
    broken.iloc[50] = -1.0
    data["M1"] = broken

    results = MoneySupplyAnalyzer().run_analysis(data)

    assert list(results.errors) == ["M1"]
    assert results.series["M1"].zscores is None
    assert results.series["M2"].zscores is not None
    assert results.series["C"].zscores is not None
    assert "M1" in results.summary


def test_single_row_raises_insufficient_data():
    date = pd.DatetimeIndex(["2021-01-01"])
    data = {
        "M2": pd.Series([17878.0], index=date),
        "M1": pd.Series([6700.0], index=date),
        "C": pd.Series([2040.0], index=date),
    }
    with pytest.raises(InsufficientDataError):
        MoneySupplyAnalyzer().run_analysis(data)


def test_empty_series_raises_alignment_error(money_supply_data):
    data = dict(money_supply_data)
    data["C"] = []
    with pytest.raises(AlignmentError):
        MoneySupplyAnalyzer().run_analysis(data)


def test_run_from_source_uses_collector(money_supply_data):
    collector = FakeCollector(money_supply_data)
    config = PipelineConfig(start_date="2011-01-01", end_date="2020-12-31")
    analyzer = MoneySupplyAnalyzer(config=config, collector=collector)

    results = analyzer.run_from_source()

    assert collector.calls == [({"M2": "M2SL", "M1": "M1SL", "C": "CURRSL"}, "2011-01-01", "2020-12-31")]
    assert list(results.series) == ["M2", "M1", "C"]


def test_collector_failure_fails_the_run(money_supply_data):
    analyzer = MoneySupplyAnalyzer(collector=FakeCollector(money_supply_data, fail=True))
    with pytest.raises(DataCollectionError):
        analyzer.run_from_source()

    with pytest.raises(ValueError):
        MoneySupplyAnalyzer().load_data()


def test_unparseable_summary_date_does_not_block_regressions(money_supply_data):
    config = PipelineConfig(summary_start="garbage")
    results = MoneySupplyAnalyzer(config=config).run_analysis(money_supply_data)

    assert "summary" in results.errors
    assert results.summary == {}
    assert all(analysis.succeeded for analysis in results.series.values())


def test_diagnostic_counts_serialize_as_integers(money_supply_data):
    results = MoneySupplyAnalyzer().run_analysis(money_supply_data)

    payload = json.loads(json.dumps(results.to_dict()))
    returns_diag = payload["series"]["M2"]["diagnostics"]["returns"]
    assert returns_diag["n_obs"] == 119
    assert isinstance(returns_diag["n_obs"], int)
    assert isinstance(returns_diag["ljung_box_lags"], int)
    assert isinstance(returns_diag["durbin_watson"], float)
