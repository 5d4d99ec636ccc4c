import argparse
import logging
import sys

from .config import load_evaluation_config
from .exceptions import HydroEvaluationError
from .io import load_series_table
from .run import run_evaluation

logger = logging.getLogger(__name__)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evaluate simulated discharge against observations for all stations")

    parser.add_argument("--observed", type=str, required=True, help="Observed discharge table (CSV or Parquet)")
    parser.add_argument("--simulated", type=str, required=True, help="Simulated discharge table (CSV or Parquet)")
    parser.add_argument("--config", type=str, required=True, help="YAML file with the evaluation configuration")
    parser.add_argument("--time_column", type=str, default="Time")
    parser.add_argument("--separator", type=str, default=",", help="Field separator of CSV inputs")
    parser.add_argument("--model_name", type=str, help="Override EvaluationConfig.model_name")
    parser.add_argument("--model_version", type=str, help="Override EvaluationConfig.model_version")
    parser.add_argument("--period", type=str, help="Override EvaluationConfig.period (calib or valid)")
    parser.add_argument("--output_root", type=str, help="Override EvaluationConfig.output_root")
    parser.add_argument("--n_jobs", type=int, help="Override EvaluationConfig.n_jobs")
    parser.add_argument("--verbose", action="store_true", help="Log per-station details")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_arguments(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    try:
        config = load_evaluation_config(
            args.config,
            model_name=args.model_name,
            model_version=args.model_version,
            period=args.period,
            output_root=args.output_root,
            n_jobs=args.n_jobs,
        )
        observed = load_series_table(args.observed, time_column=args.time_column, separator=args.separator)
        simulated = load_series_table(args.simulated, time_column=args.time_column, separator=args.separator)
        path = run_evaluation(observed, simulated, config)
    except HydroEvaluationError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    logger.info(f"Evaluation finished: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
