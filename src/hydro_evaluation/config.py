import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml
from returns.result import Failure, Result, Success

from .evaluation.alignment import WARMUP_DAYS
from .evaluation.engine import DEFAULT_DECIMALS
from .evaluation.report import LINE_BREAKS, NAME_VERSION_SEPARATOR, Period
from .exceptions import ConfigurationError, FileOperationError

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_ROOT = Path("24h")


def validate_non_empty_string(param_name: str, value: Any) -> Result[str, str]:
    """
    Validate that a parameter is a non-empty string.

    Args:
        param_name: Name of the parameter being validated
        value: Value to validate

    Returns:
        Success with the value if valid, or Failure with error message
    """
    if not isinstance(value, str):
        return Failure(f"Parameter '{param_name}' must be a string, got {type(value).__name__}")
    if not value.strip():
        return Failure(f"Parameter '{param_name}' must not be an empty string.")
    return Success(value)


def validate_file_name_part(param_name: str, value: Any) -> Result[str, str]:
    """Validate a string that becomes part of a report file name."""

    def _no_separators(text: str) -> Result[str, str]:
        if "/" in text or "\\" in text or text in (".", ".."):
            return Failure(f"Parameter '{param_name}' must not contain path separators, got '{text}'")
        if any(c in text for c in LINE_BREAKS):
            return Failure(f"Parameter '{param_name}' must be a single line of text")
        return Success(text)

    return validate_non_empty_string(param_name, value).bind(_no_separators)


def validate_model_name(value: Any) -> Result[str, str]:
    """Validate the model name, which is followed by the version in the report file name."""

    def _no_name_version_separator(text: str) -> Result[str, str]:
        if NAME_VERSION_SEPARATOR in text:
            return Failure(f"Parameter 'model_name' must not contain '{NAME_VERSION_SEPARATOR}', got '{text}'")
        return Success(text)

    return validate_file_name_part("model_name", value).bind(_no_name_version_separator)


def validate_string(param_name: str, value: Any) -> Result[str, str]:
    if not isinstance(value, str):
        return Failure(f"Parameter '{param_name}' must be a string, got {type(value).__name__}")
    if any(c in value for c in LINE_BREAKS):
        return Failure(f"Parameter '{param_name}' must be a single line of text")
    return Success(value)


def validate_non_negative_integer(param_name: str, value: Any) -> Result[int, str]:
    """
    Validate that a parameter is a non-negative integer.

    Args:
        param_name: Name of the parameter being validated
        value: Value to validate

    Returns:
        Success with the value if valid, or Failure with error message
    """
    if not isinstance(value, int) or isinstance(value, bool):
        return Failure(f"Parameter '{param_name}' must be an integer, got {type(value).__name__}")
    if value < 0:
        return Failure(f"Parameter '{param_name}' must be greater than or equal to 0, got {value}")
    return Success(value)


def validate_n_jobs(value: Any) -> Result[int, str]:
    if not isinstance(value, int) or isinstance(value, bool):
        return Failure(f"Parameter 'n_jobs' must be an integer, got {type(value).__name__}")
    if value == 0:
        return Failure("Parameter 'n_jobs' must not be 0 (use -1 for all cores)")
    return Success(value)


def validate_period(value: Any) -> Result[Period, str]:
    try:
        return Success(Period.parse(value))
    except ValueError as e:
        return Failure(str(e))


@dataclass
class EvaluationConfig:
    """Scalar settings of one evaluation run.

    Attributes:
        model_name: Name of the model, part of the report file name.
        model_version: Version of the model, part of the report file name.
        model_description: Free-text description written to the report header.
        model_input: Free-text note on the model input.
        model_results: Free-text note on where the model results are stored.
        period: Evaluation period category, calibration or validation.
        output_root: Directory holding the per-period result directories.
        warmup_days: Number of leading timesteps discarded before scoring.
        decimals: Number of decimal places kept in the result table.
        n_jobs: Number of parallel jobs for the per-station computation.
    """

    model_name: str
    model_version: str
    model_description: str = ""
    model_input: str = ""
    model_results: str = ""
    period: Period | str = Period.CALIBRATION
    output_root: Path | str = DEFAULT_OUTPUT_ROOT
    warmup_days: int = WARMUP_DAYS
    decimals: int = DEFAULT_DECIMALS
    n_jobs: int = 1

    def __post_init__(self) -> None:
        validation_result = validate_evaluation_config(self)
        if isinstance(validation_result, Failure):
            raise ConfigurationError(f"Invalid evaluation configuration: {validation_result.failure()}")
        self.period = Period.parse(self.period)
        self.output_root = Path(self.output_root)


def validate_evaluation_config(config: EvaluationConfig) -> Result[None, str]:
    """Run all validations using railway pattern, returning Success or Failure."""
    return (
        Success(None)
        .bind(lambda _: validate_model_name(config.model_name))
        .bind(lambda _: validate_file_name_part("model_version", config.model_version))
        .bind(lambda _: validate_string("model_description", config.model_description))
        .bind(lambda _: validate_string("model_input", config.model_input))
        .bind(lambda _: validate_string("model_results", config.model_results))
        .bind(lambda _: validate_period(config.period))
        .bind(lambda _: validate_non_negative_integer("warmup_days", config.warmup_days))
        .bind(lambda _: validate_non_negative_integer("decimals", config.decimals))
        .bind(lambda _: validate_n_jobs(config.n_jobs))
        .map(lambda _: None)
    )


def load_evaluation_config(path: str | Path, **overrides: Any) -> EvaluationConfig:
    """
    Load an evaluation configuration from a YAML file.

    Args:
        path: Path to the YAML file.
        **overrides: Values replacing the ones read from the file. ``None`` values are ignored.

    Returns:
        The validated EvaluationConfig.

    Raises:
        FileOperationError: If the file doesn't exist or can't be read.
        ConfigurationError: If the content is not a mapping, has unknown keys, or fails validation.
    """
    path = Path(path)
    if not path.is_file():
        raise FileOperationError(f"Configuration file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in {path}: {e}") from e
    except OSError as e:
        raise FileOperationError(f"Failed to read configuration {path}: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping, got {type(raw).__name__}")

    raw.update({key: value for key, value in overrides.items() if value is not None})

    # YAML reads versions such as 1.0 as numbers
    for key in ("model_name", "model_version"):
        if isinstance(raw.get(key), int | float) and not isinstance(raw.get(key), bool):
            raw[key] = str(raw[key])

    known = {f.name for f in fields(EvaluationConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys in {path}: {unknown}")

    try:
        config = EvaluationConfig(**raw)
    except TypeError as e:
        raise ConfigurationError(f"Incomplete configuration in {path}: {e}") from e

    logger.info(f"Loaded evaluation configuration for {config.model_name} {config.model_version} from {path}")
    return config
