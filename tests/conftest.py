"""
Pytest fixtures for the discharge performance evaluation tests.

This module provides fixtures for:
- Synthetic observed/simulated daily discharge tables for several stations
- Evaluation configurations writing into temporary directories
- A stub benchmark efficiency so engine tests do not depend on the default benchmark
"""

import tempfile
from datetime import datetime
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from hydro_evaluation.config import EvaluationConfig


def _make_table(time: pd.DatetimeIndex | pd.Series, stations: dict[str, np.ndarray]) -> pd.DataFrame:
    """Build a series table: timestamps in the first column, one column per station."""
    data = {"Time": pd.Series(time)}
    data.update({name: np.asarray(values, dtype=float) for name, values in stations.items()})
    return pd.DataFrame(data)


def _stub_benchmark(timestamps, simulated, observed) -> float:
    """Benchmark efficiency stub returning a constant."""
    return 0.5


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def station_ids():
    """List of station IDs for testing."""
    return ["2.11.0", "12.70.0", "62.5.0"]


@pytest.fixture
def date_range():
    """Standard date range for synthetic data (4 years, 1461 days)."""
    return pd.date_range(start=datetime(2010, 1, 1), end=datetime(2013, 12, 31), freq="D")


@pytest.fixture
def observed_table(station_ids, date_range):
    """Synthetic observed discharge with a seasonal cycle and noise per station."""
    rng = np.random.default_rng(42)
    day_of_year = date_range.dayofyear.to_numpy()
    stations = {}
    for i, station in enumerate(station_ids):
        seasonal = 20 + 10 * (i + 1) * np.maximum(0, np.sin(2 * np.pi * (day_of_year - 80) / 365.25))
        stations[station] = seasonal + rng.gamma(2.0, 2.0, len(date_range))
    return _make_table(date_range, stations)


@pytest.fixture
def simulated_table(observed_table, station_ids):
    """Synthetic simulation: scaled observations with noise, same schema as observed."""
    rng = np.random.default_rng(7)
    simulated = observed_table.copy()
    for i, station in enumerate(station_ids):
        noise = rng.normal(0, 2.0, len(simulated))
        simulated[station] = observed_table[station] * (0.9 + 0.1 * i) + noise
    return simulated


@pytest.fixture
def evaluation_config(temp_dir):
    """Evaluation configuration writing into a temporary output root."""
    return EvaluationConfig(
        model_name="hbv",
        model_version="v1",
        model_description="Lumped HBV with default parameters",
        model_input="seNorge 2018 precipitation and temperature",
        model_results="/data/runs/hbv/v1",
        period="calib",
        output_root=temp_dir,
    )


@pytest.fixture
def make_table():
    """Factory building series tables from a time index and per-station arrays."""
    return _make_table


@pytest.fixture
def stub_benchmark():
    """Benchmark efficiency stub returning a constant."""
    return _stub_benchmark
