import logging
from dataclasses import dataclass

import pandas as pd

from ..exceptions import InsufficientHistoryError, SchemaMismatchError

logger = logging.getLogger(__name__)

# Three years of daily steps discarded so that model states can burn in
WARMUP_DAYS = 3 * 365


@dataclass
class EvaluationWindow:
    """Observed and simulated discharge restricted to the rows used for scoring.

    Attributes:
        time: Retained timestamps, zero-based index.
        observed: Observed discharge, one column per station, zero-based index.
        simulated: Simulated discharge with the same shape and labels as observed.
        warmup: Number of leading rows that were discarded.
    """

    time: pd.Series
    observed: pd.DataFrame
    simulated: pd.DataFrame
    warmup: int

    @property
    def stations(self) -> list[str]:
        return [str(station) for station in self.observed.columns]

    @property
    def start(self) -> pd.Timestamp:
        return self.time.iloc[0]

    @property
    def end(self) -> pd.Timestamp:
        return self.time.iloc[-1]

    def __len__(self) -> int:
        return len(self.time)


def validate_alignment(observed: pd.DataFrame, simulated: pd.DataFrame) -> None:
    """
    Check that the observed and simulated tables describe the same timesteps and stations.

    Both tables hold the timestamps in their first column and one discharge column
    per station after it.

    Args:
        observed: Observed discharge table.
        simulated: Simulated discharge table.

    Raises:
        SchemaMismatchError: If the column labels differ in content or order, or if
            the timestamp columns are not identical.
    """
    # Labels are compared as they are: the integer 1 and the string "1" are different stations
    obs_columns = list(observed.columns)
    sim_columns = list(simulated.columns)
    if len(obs_columns) < 2:
        raise SchemaMismatchError("Tables must contain a time column followed by at least one station column")
    if obs_columns != sim_columns:
        if set(obs_columns) == set(sim_columns):
            raise SchemaMismatchError("Observed and simulated tables list the same stations in a different order")
        missing = sorted(set(obs_columns) ^ set(sim_columns), key=repr)
        raise SchemaMismatchError(f"Observed and simulated tables have different columns: {missing}")

    obs_time = observed.iloc[:, 0].reset_index(drop=True)
    sim_time = simulated.iloc[:, 0].reset_index(drop=True)
    if len(obs_time) != len(sim_time):
        raise SchemaMismatchError(
            f"Observed and simulated tables differ in length: {len(obs_time)} vs {len(sim_time)} rows"
        )
    if not obs_time.equals(sim_time):
        mismatch = (obs_time != sim_time).to_numpy().nonzero()[0]
        first = int(mismatch[0]) if len(mismatch) else 0
        raise SchemaMismatchError(
            f"Observed and simulated timestamps differ, first mismatch at row {first}: "
            f"{obs_time.iloc[first]} vs {sim_time.iloc[first]}"
        )


def select_evaluation_window(
    observed: pd.DataFrame,
    simulated: pd.DataFrame,
    warmup: int = WARMUP_DAYS,
) -> EvaluationWindow:
    """
    Validate two discharge tables and drop the warm-up period from both.

    Args:
        observed: Observed discharge table, timestamps in the first column.
        simulated: Simulated discharge table with the same schema.
        warmup: Number of leading rows to discard.

    Returns:
        EvaluationWindow holding rows [warmup, n) of both tables.

    Raises:
        SchemaMismatchError: If the tables are not aligned.
        InsufficientHistoryError: If no rows remain after the warm-up period.
    """
    validate_alignment(observed, simulated)

    n_rows = len(observed)
    if n_rows <= warmup:
        raise InsufficientHistoryError(
            f"Series has {n_rows} rows but the warm-up period alone needs {warmup}; nothing left to evaluate"
        )

    time = observed.iloc[warmup:, 0].reset_index(drop=True)
    obs = observed.iloc[warmup:, 1:].reset_index(drop=True).astype(float)
    sim = simulated.iloc[warmup:, 1:].reset_index(drop=True).astype(float)

    logger.info(f"Evaluating {n_rows - warmup} of {n_rows} timesteps ({warmup} warm-up rows discarded)")
    return EvaluationWindow(time=time, observed=obs, simulated=sim, warmup=warmup)
