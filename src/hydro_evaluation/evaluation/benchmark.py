"""Benchmark-relative efficiency.

The engine treats the benchmark as an injected capability: any callable taking
``(timestamps, simulated, observed)`` and returning a float can be used. The
default scores the model against the observed day-of-year climatology.
"""

import logging
from typing import Protocol

import numpy as np
import pandas as pd

from ..exceptions import DegenerateStationError

logger = logging.getLogger(__name__)


class BenchmarkEfficiency(Protocol):
    def __call__(self, timestamps: pd.Series, simulated: np.ndarray, observed: np.ndarray) -> float: ...


def seasonal_climatology(timestamps: pd.Series, observed: np.ndarray) -> np.ndarray:
    """
    Build the benchmark forecast from the mean observed discharge of each calendar day.

    29 February is folded into 28 February so that leap days share the climatology
    of their neighbour instead of relying on a handful of samples.

    Args:
        timestamps: Timestamps of the observations.
        observed: Observed values array, may contain NaN.

    Returns:
        Array of the same length as ``observed`` holding the climatological value of
        each timestep (NaN for calendar days without any observation).
    """
    dates = pd.to_datetime(pd.Series(timestamps).reset_index(drop=True))
    day_key = dates.dt.month * 100 + dates.dt.day
    day_key = day_key.where(day_key != 229, 228)
    frame = pd.DataFrame({"day": day_key.to_numpy(), "obs": np.asarray(observed, dtype=float)})
    return frame.groupby("day")["obs"].transform("mean").to_numpy()


def seasonal_benchmark_efficiency(timestamps: pd.Series, simulated: np.ndarray, observed: np.ndarray) -> float:
    """
    Calculate the efficiency of a simulation relative to the seasonal climatology benchmark.

    NSE_bench = 1 - sum((sim - obs)^2) / sum((bench - obs)^2), where ``bench`` is the
    observed day-of-year climatology. Values above 0 mean that the model beats the
    benchmark. Only timesteps where simulation, observation and benchmark are all
    defined are used.

    Args:
        timestamps: Timestamps aligned with the two series.
        simulated: Simulated values array.
        observed: Observed values array.

    Returns:
        Benchmark-relative efficiency.

    Raises:
        DegenerateStationError: If no valid timesteps remain or the benchmark
            reproduces the observations exactly.
    """
    sim = np.asarray(simulated, dtype=float)
    obs = np.asarray(observed, dtype=float)
    if not (len(timestamps) == len(sim) == len(obs)):
        raise ValueError(
            f"Length mismatch: {len(timestamps)} timestamps, {len(sim)} simulated, {len(obs)} observed values"
        )

    bench = seasonal_climatology(timestamps, obs)
    valid = np.isfinite(sim) & np.isfinite(obs) & np.isfinite(bench)
    if not np.any(valid):
        raise DegenerateStationError("No valid timesteps for the benchmark efficiency")

    denominator = np.sum((bench[valid] - obs[valid]) ** 2)
    if denominator == 0:
        raise DegenerateStationError("Benchmark reproduces the observations exactly")
    return float(1 - np.sum((sim[valid] - obs[valid]) ** 2) / denominator)
