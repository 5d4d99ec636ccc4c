"""
Unit tests for the seasonal climatology benchmark efficiency.
"""

import numpy as np
import pandas as pd
import pytest

from hydro_evaluation.evaluation.benchmark import seasonal_benchmark_efficiency, seasonal_climatology
from hydro_evaluation.exceptions import DegenerateStationError


@pytest.fixture
def two_years():
    return pd.Series(pd.date_range("2011-01-01", "2012-12-31", freq="D"))


@pytest.fixture
def seasonal_obs(two_years):
    rng = np.random.default_rng(0)
    doy = two_years.dt.dayofyear.to_numpy()
    return 10 + 5 * np.sin(2 * np.pi * doy / 365.25) + rng.normal(0, 1, len(two_years))


class TestSeasonalClimatology:
    """Test construction of the day-of-year benchmark."""

    def test_same_calendar_day_shares_value(self, two_years, seasonal_obs):
        bench = seasonal_climatology(two_years, seasonal_obs)
        first = two_years.index[two_years == pd.Timestamp("2011-06-15")][0]
        second = two_years.index[two_years == pd.Timestamp("2012-06-15")][0]
        assert bench[first] == pytest.approx((seasonal_obs[first] + seasonal_obs[second]) / 2)
        assert bench[second] == bench[first]

    def test_leap_day_folds_into_28_february(self, two_years, seasonal_obs):
        bench = seasonal_climatology(two_years, seasonal_obs)
        idx = {d: two_years.index[two_years == pd.Timestamp(d)][0] for d in ["2011-02-28", "2012-02-28", "2012-02-29"]}
        expected = np.mean([seasonal_obs[i] for i in idx.values()])
        assert bench[idx["2012-02-29"]] == pytest.approx(expected)
        assert bench[idx["2011-02-28"]] == pytest.approx(expected)

    def test_missing_observations_are_skipped(self, two_years, seasonal_obs):
        obs = seasonal_obs.copy()
        obs[0] = np.nan
        bench = seasonal_climatology(two_years, obs)
        assert bench[0] == pytest.approx(obs[365])


class TestSeasonalBenchmarkEfficiency:
    """Test the benchmark-relative efficiency."""

    def test_perfect_simulation_scores_one(self, two_years, seasonal_obs):
        assert seasonal_benchmark_efficiency(two_years, seasonal_obs, seasonal_obs) == pytest.approx(1.0)

    def test_benchmark_itself_scores_zero(self, two_years, seasonal_obs):
        bench = seasonal_climatology(two_years, seasonal_obs)
        assert seasonal_benchmark_efficiency(two_years, bench, seasonal_obs) == pytest.approx(0.0)

    def test_worse_than_benchmark_is_negative(self, two_years, seasonal_obs):
        sim = np.full(len(seasonal_obs), seasonal_obs.max() * 2)
        assert seasonal_benchmark_efficiency(two_years, sim, seasonal_obs) < 0

    def test_single_year_is_degenerate(self, two_years, seasonal_obs):
        """With one sample per calendar day the benchmark equals the observations."""
        one_year = two_years.iloc[:365]
        with pytest.raises(DegenerateStationError):
            seasonal_benchmark_efficiency(one_year, seasonal_obs[:365] + 1, seasonal_obs[:365])

    def test_all_missing_is_degenerate(self, two_years):
        nan = np.full(len(two_years), np.nan)
        with pytest.raises(DegenerateStationError):
            seasonal_benchmark_efficiency(two_years, nan, nan)

    def test_length_mismatch_raises(self, two_years, seasonal_obs):
        with pytest.raises(ValueError, match="Length mismatch"):
            seasonal_benchmark_efficiency(two_years.iloc[:10], seasonal_obs, seasonal_obs)
