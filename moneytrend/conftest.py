"""
Shared fixtures: synthetic monthly money stock series with known structure.

Log levels follow a random walk with drift (iid monthly log-returns), so the
return regression residuals are close to white noise while the level
regression residuals are strongly autocorrelated. An optional jump in the
log-return of one month plays the role of the 2020 money surge.
"""

import numpy as np
import pandas as pd
import pytest


def make_series(start_value: float, n_periods: int = 120, start: str = "2011-01-01",
                drift: float = 0.005, noise: float = 0.002, seed: int = 42,
                jump_date: str = None, jump: float = 0.0, name: str = None) -> pd.Series:
    """Monthly series whose log-returns are drift + N(0, noise), plus an optional jump"""
    rng = np.random.default_rng(seed)
    dates = pd.date_range(start, periods=n_periods, freq="MS")
    returns = drift + rng.normal(0.0, noise, n_periods)
    returns[0] = 0.0
    if jump_date is not None:
        returns[dates.get_loc(pd.Timestamp(jump_date))] += jump
    log_levels = np.log(start_value) + np.cumsum(returns)
    return pd.Series(np.exp(log_levels), index=dates, name=name)


def make_money_supply(n_periods: int = 120, start: str = "2011-01-01",
                      jump_date: str = "2020-04-01") -> dict:
    """M2, M1 and Currency with a jump in April 2020"""
    return {
        "M2": make_series(8800.0, n_periods, start, drift=0.005, seed=1,
                          jump_date=jump_date, jump=0.06, name="M2"),
        "M1": make_series(1900.0, n_periods, start, drift=0.007, seed=2,
                          jump_date=jump_date, jump=0.08, name="M1"),
        "C": make_series(920.0, n_periods, start, drift=0.004, noise=0.001, seed=3,
                         jump_date=jump_date, jump=0.02, name="C"),
    }


@pytest.fixture
def money_supply_data():
    return make_money_supply()


@pytest.fixture
def money_supply_csv(tmp_path, money_supply_data):
    frame = pd.DataFrame(money_supply_data)
    path = tmp_path / "money_supply.csv"
    frame.to_csv(path, index_label="date")
    return path
