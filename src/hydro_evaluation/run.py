import logging
from pathlib import Path

import pandas as pd

from .config import EvaluationConfig
from .evaluation.alignment import WARMUP_DAYS, EvaluationWindow, select_evaluation_window
from .evaluation.benchmark import BenchmarkEfficiency
from .evaluation.engine import DEFAULT_DECIMALS, StationEvaluator
from .evaluation.report import ReportMetadata, ensure_destination_available, report_path, write_report

logger = logging.getLogger(__name__)


def evaluate_tables(
    observed: pd.DataFrame,
    simulated: pd.DataFrame,
    benchmark: BenchmarkEfficiency | None = None,
    warmup: int = WARMUP_DAYS,
    decimals: int = DEFAULT_DECIMALS,
    n_jobs: int = 1,
) -> tuple[EvaluationWindow, pd.DataFrame]:
    """
    Validate two discharge tables and compute the rounded per-station result table.

    Args:
        observed: Observed discharge, timestamps in the first column, one column per station.
        simulated: Simulated discharge with the same timestamps and station columns.
        benchmark: Benchmark-relative efficiency callable, seasonal climatology by default.
        warmup: Number of leading timesteps discarded before scoring.
        decimals: Number of decimal places kept in the result table.
        n_jobs: Number of parallel jobs for the per-station computation.

    Returns:
        Tuple of (evaluation window, result table).

    Raises:
        SchemaMismatchError: If the tables are not aligned.
        InsufficientHistoryError: If nothing is left after the warm-up period.
    """
    window = select_evaluation_window(observed, simulated, warmup=warmup)
    evaluator = StationEvaluator(benchmark=benchmark, decimals=decimals, n_jobs=n_jobs)
    return window, evaluator.evaluate(window)


def run_evaluation(
    observed: pd.DataFrame,
    simulated: pd.DataFrame,
    config: EvaluationConfig,
    benchmark: BenchmarkEfficiency | None = None,
) -> Path:
    """
    Evaluate a model run for all stations and write its performance report.

    Every fatal precondition is checked before the report is created: the tables must
    be aligned, long enough to outlast the warm-up period, and the destination must be
    free. The final write uses an exclusive create, so a concurrent run that claimed
    the destination in the meantime still makes this run fail instead of overwriting.

    Args:
        observed: Observed discharge table.
        simulated: Simulated discharge table.
        config: Model identification, report provenance and run settings.
        benchmark: Benchmark-relative efficiency callable, seasonal climatology by default.

    Returns:
        Path of the written report.

    Raises:
        SchemaMismatchError: If the tables are not aligned.
        InsufficientHistoryError: If nothing is left after the warm-up period.
        DestinationExistsError: If a report already exists for this model, version and period.
    """
    destination = report_path(config.output_root, config.model_name, config.model_version, config.period)
    logger.info(f"Evaluating {config.model_name} {config.model_version} ({config.period.value}) -> {destination}")

    window = select_evaluation_window(observed, simulated, warmup=config.warmup_days)
    ensure_destination_available(destination)

    evaluator = StationEvaluator(benchmark=benchmark, decimals=config.decimals, n_jobs=config.n_jobs)
    results = evaluator.evaluate(window)

    metadata = ReportMetadata(
        model_name=config.model_name,
        model_version=config.model_version,
        description=config.model_description,
        model_input=config.model_input,
        model_results=config.model_results,
        start=window.start,
        end=window.end,
        period=config.period,
    )
    return write_report(destination, metadata, results, decimals=config.decimals)
