"""Performance evaluation of simulated discharge against observations."""

from .alignment import WARMUP_DAYS, EvaluationWindow, select_evaluation_window, validate_alignment
from .benchmark import BenchmarkEfficiency, seasonal_benchmark_efficiency, seasonal_climatology
from .engine import KGE_FIELD_SOURCES, RESULT_COLUMNS, StationEvaluator, evaluate_station, round_record
from .metrics import (
    KGEComponents,
    calculate_kge,
    calculate_linear_regression,
    calculate_mean_bias,
    calculate_nse,
    calculate_pbias,
    calculate_pearson_r,
    calculate_r2,
)
from .report import Period, ReportMetadata, read_report, render_report, report_path, write_report

__all__ = [
    # Alignment
    "WARMUP_DAYS",
    "EvaluationWindow",
    "select_evaluation_window",
    "validate_alignment",
    # Benchmark
    "BenchmarkEfficiency",
    "seasonal_benchmark_efficiency",
    "seasonal_climatology",
    # Engine
    "KGE_FIELD_SOURCES",
    "RESULT_COLUMNS",
    "StationEvaluator",
    "evaluate_station",
    "round_record",
    # Metrics
    "KGEComponents",
    "calculate_kge",
    "calculate_linear_regression",
    "calculate_mean_bias",
    "calculate_nse",
    "calculate_pbias",
    "calculate_pearson_r",
    "calculate_r2",
    # Report
    "Period",
    "ReportMetadata",
    "read_report",
    "render_report",
    "report_path",
    "write_report",
]
