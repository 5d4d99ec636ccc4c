import logging
from collections.abc import Callable
from typing import Any

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from .alignment import EvaluationWindow
from .benchmark import BenchmarkEfficiency, seasonal_benchmark_efficiency
from .metrics import (
    KGEComponents,
    calculate_kge,
    calculate_linear_regression,
    calculate_mean_bias,
    calculate_nse,
    calculate_pbias,
    calculate_r2,
)

logger = logging.getLogger(__name__)

STATION_COLUMN = "Station"

# Column order of the result table and of the written report
RESULT_COLUMNS = [
    STATION_COLUMN,
    "KGE2009",
    "KGE2012",
    "r",
    "Beta",
    "Gamma",
    "Alpha",
    "NSE",
    "NSE_bench",
    "Intercept",
    "Slope",
    "r2",
    "Bias",
    "Pbias",
]

# Report field -> (KGE parameterization, decomposition term). Fixed lookup kept for
# compatibility with existing reports: the legacy "Alpha" column holds the bias
# ratio of the original parameterization, not a variability ratio.
KGE_FIELD_SOURCES: dict[str, tuple[str, str]] = {
    "KGE2009": ("2009", "kge"),
    "KGE2012": ("2012", "kge"),
    "r": ("2012", "r"),
    "Beta": ("2012", "beta"),
    "Gamma": ("2012", "variability"),
    "Alpha": ("2009", "beta"),
}

DEFAULT_DECIMALS = 2


def round_value(value: float, decimals: int = DEFAULT_DECIMALS) -> float:
    """Round half to even, leaving NaN untouched and turning -0.0 into 0.0."""
    if value is None or np.isnan(value):
        return np.nan
    return float(np.round(value, decimals)) + 0.0


def round_record(record: dict[str, Any], decimals: int = DEFAULT_DECIMALS) -> dict[str, Any]:
    """
    Round every numeric field of a station record.

    Args:
        record: Mapping of result column to value, as produced by evaluate_station.
        decimals: Number of decimal places to keep.

    Returns:
        New record with the station identifier untouched and numeric fields rounded.
    """
    return {
        key: value if key == STATION_COLUMN else round_value(float(value), decimals) for key, value in record.items()
    }


def _guarded(station: str, field: str, func: Callable[..., float], *args: Any) -> float:
    try:
        value = func(*args)
    except Exception as e:
        logger.warning(f"Failed to calculate {field} for station {station}: {e}")
        return np.nan
    if value is None or not np.isfinite(value):
        return np.nan
    return float(value)


def evaluate_station(
    station: str,
    time: pd.Series,
    simulated: np.ndarray,
    observed: np.ndarray,
    benchmark: BenchmarkEfficiency = seasonal_benchmark_efficiency,
) -> dict[str, Any]:
    """
    Compute the full set of performance statistics for one station.

    Every statistic ignores timesteps where either series is missing. Statistics that
    are undefined for this station (zero variance, zero denominator, failing benchmark)
    are stored as NaN so that one degenerate station never blocks the others.

    Args:
        station: Station identifier.
        time: Timestamps of the evaluation window.
        simulated: Simulated discharge of the station over the evaluation window.
        observed: Observed discharge of the station over the evaluation window.
        benchmark: Callable computing the benchmark-relative efficiency.

    Returns:
        Unrounded record keyed by RESULT_COLUMNS, in that order.
    """
    sim = np.asarray(simulated, dtype=float)
    obs = np.asarray(observed, dtype=float)

    kge: dict[str, KGEComponents] = {
        "2009": calculate_kge(sim, obs, method="2009"),
        "2012": calculate_kge(sim, obs, method="2012"),
    }
    intercept, slope = calculate_linear_regression(sim, obs)

    values: dict[str, float] = {
        field: kge[method].term(term) for field, (method, term) in KGE_FIELD_SOURCES.items()
    }
    values["NSE"] = calculate_nse(sim, obs)
    values["NSE_bench"] = _guarded(station, "NSE_bench", benchmark, time, sim, obs)
    values["Intercept"] = intercept
    values["Slope"] = slope
    values["r2"] = calculate_r2(sim, obs)
    values["Bias"] = calculate_mean_bias(sim, obs)
    values["Pbias"] = calculate_pbias(sim, obs)

    undefined = [field for field, value in values.items() if np.isnan(value)]
    if undefined:
        logger.warning(f"Station {station}: undefined statistics {undefined}")

    record: dict[str, Any] = {STATION_COLUMN: station}
    record.update({column: values[column] for column in RESULT_COLUMNS[1:]})
    return record


class StationEvaluator:
    """Evaluate every station of an evaluation window and assemble the result table.

    Stations are independent of each other, so they can be evaluated in parallel
    with joblib. The table is always assembled in the station order of the input.
    """

    def __init__(
        self,
        benchmark: BenchmarkEfficiency | None = None,
        decimals: int = DEFAULT_DECIMALS,
        n_jobs: int = 1,
    ) -> None:
        """Initialize the evaluator.

        Args:
            benchmark: Benchmark-relative efficiency callable. Defaults to the seasonal
                climatology benchmark.
            decimals: Number of decimal places kept in the result table.
            n_jobs: Number of parallel jobs (-1 for all cores, 1 for sequential).
        """
        self.benchmark = benchmark if benchmark is not None else seasonal_benchmark_efficiency
        self.decimals = decimals
        self.n_jobs = n_jobs

    def _evaluate_one(self, station: str, window: EvaluationWindow, column: int) -> dict[str, Any]:
        record = evaluate_station(
            station,
            window.time,
            window.simulated.iloc[:, column].to_numpy(dtype=float),
            window.observed.iloc[:, column].to_numpy(dtype=float),
            benchmark=self.benchmark,
        )
        return round_record(record, self.decimals)

    def evaluate(self, window: EvaluationWindow) -> pd.DataFrame:
        """Compute one rounded result row per station.

        Args:
            window: Aligned observed and simulated tables after warm-up removal.

        Returns:
            DataFrame with RESULT_COLUMNS, one row per station in input column order.
        """
        stations = window.stations
        logger.info(f"Evaluating {len(stations)} stations over {len(window)} timesteps (n_jobs={self.n_jobs})")

        if self.n_jobs == 1:
            records = [self._evaluate_one(station, window, i) for i, station in enumerate(stations)]
        else:
            # Parallel returns results in submission order
            records = Parallel(n_jobs=self.n_jobs)(
                delayed(self._evaluate_one)(station, window, i) for i, station in enumerate(stations)
            )

        results = pd.DataFrame.from_records(records, columns=RESULT_COLUMNS)
        results[STATION_COLUMN] = results[STATION_COLUMN].astype(str)
        return results
