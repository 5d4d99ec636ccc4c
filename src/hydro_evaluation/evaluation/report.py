import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from io import StringIO
from pathlib import Path

import pandas as pd

from ..exceptions import DataProcessingError, DestinationExistsError, FileOperationError
from .engine import DEFAULT_DECIMALS, RESULT_COLUMNS, STATION_COLUMN

logger = logging.getLogger(__name__)

REPORT_SEPARATOR = "\t"
REPORT_NA = "NA"
REPORT_EXTENSION = ".txt"
RESULTS_DIR_PREFIX = "results_"
# Joins model name and version in the file name; not allowed inside the model name
NAME_VERSION_SEPARATOR = "_"
LINE_BREAKS = ("\n", "\r")
# Empty lines kept after the metadata block for future header fields
PLACEHOLDER_LINES = 3
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

HEADER_LABELS = {
    "model_name": "Model",
    "model_version": "Version",
    "period": "Period",
    "created": "Time of file generation",
    "description": "Description",
    "model_input": "Model input",
    "model_results": "Path to model results",
}


class Period(str, Enum):
    """Part of the record covered by an evaluation."""

    CALIBRATION = "calib"
    VALIDATION = "valid"

    @classmethod
    def parse(cls, value: "str | Period") -> "Period":
        """Accept "calib"/"valid" as well as "calibration"/"validation" (case-insensitive)."""
        if isinstance(value, Period):
            return value
        normalized = str(value).strip().lower()
        aliases = {"calibration": cls.CALIBRATION, "validation": cls.VALIDATION}
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError as e:
            choices = ", ".join([p.value for p in cls] + list(aliases))
            raise ValueError(f"Unknown period '{value}'. Must be one of: {choices}") from e


@dataclass
class ReportMetadata:
    """Header block of a performance report."""

    model_name: str
    model_version: str
    description: str
    model_input: str
    model_results: str
    start: pd.Timestamp
    end: pd.Timestamp
    period: Period | None = None
    created: datetime = field(default_factory=datetime.now)


def format_timestamp(value) -> str:
    """Render a timestamp as a date when it falls on midnight, else with its time of day."""
    ts = pd.Timestamp(value)
    if ts == ts.normalize():
        return ts.strftime("%Y-%m-%d")
    return ts.strftime(TIMESTAMP_FORMAT)


def report_path(root: str | Path, model_name: str, model_version: str, period: str | Period) -> Path:
    """
    Build the destination of a report.

    Args:
        root: Directory holding the per-period result directories.
        model_name: Name of the model.
        model_version: Version of the model.
        period: Evaluation period category.

    Returns:
        ``root / results_<period> / <model_name>_<model_version>.txt``

    Raises:
        ValueError: If the model name or version would escape the result directory, or
            if the model name contains the name/version separator, which would let two
            different name/version pairs share one file.
    """
    for label, value in (("model_name", model_name), ("model_version", model_version)):
        if not value or "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError(f"'{label}' must be a non-empty name without path separators, got '{value}'")
    if NAME_VERSION_SEPARATOR in model_name:
        raise ValueError(f"'model_name' must not contain '{NAME_VERSION_SEPARATOR}', got '{model_name}'")
    period = Period.parse(period)
    file_name = f"{model_name}{NAME_VERSION_SEPARATOR}{model_version}{REPORT_EXTENSION}"
    return Path(root) / f"{RESULTS_DIR_PREFIX}{period.value}" / file_name


def render_header(metadata: ReportMetadata) -> list[str]:
    values = {
        "model_name": metadata.model_name,
        "model_version": metadata.model_version,
        "period": f"{format_timestamp(metadata.start)} to {format_timestamp(metadata.end)}",
        "created": metadata.created.strftime(TIMESTAMP_FORMAT),
        "description": metadata.description,
        "model_input": metadata.model_input,
        "model_results": metadata.model_results,
    }
    multi_line = [HEADER_LABELS[key] for key, value in values.items() if any(c in value for c in LINE_BREAKS)]
    if multi_line:
        raise DataProcessingError(f"Header fields must fit on one line: {multi_line}")
    lines = [f"{label}: {values[key]}" for key, label in HEADER_LABELS.items()]
    return lines + [""] * PLACEHOLDER_LINES


def render_table(results: pd.DataFrame, decimals: int = DEFAULT_DECIMALS) -> str:
    """Serialize the result table: header row, tab separated, no quoting, no index."""
    missing = [c for c in RESULT_COLUMNS if c not in results.columns]
    if missing:
        raise DataProcessingError(f"Result table is missing columns: {missing}")
    return results[RESULT_COLUMNS].to_csv(
        sep=REPORT_SEPARATOR,
        index=False,
        na_rep=REPORT_NA,
        float_format=f"%.{decimals}f",
        lineterminator="\n",
    )


def render_report(metadata: ReportMetadata, results: pd.DataFrame, decimals: int = DEFAULT_DECIMALS) -> str:
    """
    Render the complete report text.

    Args:
        metadata: Header fields.
        results: Rounded result table with RESULT_COLUMNS.
        decimals: Number of decimal places written for numeric fields.

    Returns:
        Metadata header, placeholder lines and the tab-separated result table.
    """
    header = "\n".join(render_header(metadata)) + "\n"
    return header + render_table(results, decimals)


def ensure_destination_available(path: Path) -> None:
    """Raise DestinationExistsError when a report already occupies ``path``."""
    if path.exists():
        raise DestinationExistsError(f"File {path} already exists. Delete it manually to replace it.")


def write_report(
    path: str | Path,
    metadata: ReportMetadata,
    results: pd.DataFrame,
    decimals: int = DEFAULT_DECIMALS,
) -> Path:
    """
    Write a report, refusing to replace an existing one.

    The content is rendered before the destination is touched, and the file is
    created with an exclusive open, so two concurrent runs cannot both claim the
    same destination and an existing report is never modified.

    Args:
        path: Destination of the report.
        metadata: Header fields.
        results: Rounded result table.
        decimals: Number of decimal places written for numeric fields.

    Returns:
        Path of the written report.

    Raises:
        DestinationExistsError: If a file already exists at ``path``.
        FileOperationError: If the report cannot be written.
    """
    path = Path(path)
    content = render_report(metadata, results, decimals)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileOperationError(f"Could not create report directory {path.parent}: {e}") from e

    try:
        f = open(path, "x", encoding="utf-8", newline="\n")
    except FileExistsError as e:
        raise DestinationExistsError(f"File {path} already exists. Delete it manually to replace it.") from e
    except OSError as e:
        raise FileOperationError(f"Could not create report {path}: {e}") from e

    try:
        with f:
            f.write(content)
    except OSError as e:
        path.unlink(missing_ok=True)
        raise FileOperationError(f"Failed to write report {path}: {e}") from e

    logger.info(f"Report for {metadata.model_name} {metadata.model_version} written to {path}")
    return path


def _parse_header_line(line: str, label: str) -> str:
    prefix = f"{label}:"
    if not line.startswith(prefix):
        raise DataProcessingError(f"Expected header line starting with '{prefix}', got '{line}'")
    return line[len(prefix) :].strip()


def read_report(path: str | Path) -> tuple[ReportMetadata, pd.DataFrame]:
    """
    Parse a report written by write_report.

    Args:
        path: Location of the report.

    Returns:
        Tuple of (metadata, results). The period category is taken from the name of
        the result directory when it follows the ``results_<period>`` convention.

    Raises:
        FileOperationError: If the report does not exist.
        DataProcessingError: If the header block is malformed.
    """
    path = Path(path)
    if not path.is_file():
        raise FileOperationError(f"Report not found: {path}")

    lines = path.read_text(encoding="utf-8").split("\n")
    n_header = len(HEADER_LABELS)
    if len(lines) < n_header + PLACEHOLDER_LINES + 1:
        raise DataProcessingError(f"Report {path} is truncated")

    values = {
        key: _parse_header_line(line, label) for (key, label), line in zip(HEADER_LABELS.items(), lines[:n_header])
    }
    start, sep, end = values["period"].partition(" to ")
    if not sep:
        raise DataProcessingError(f"Malformed period line in {path}: '{values['period']}'")

    period = None
    directory = path.parent.name
    if directory.startswith(RESULTS_DIR_PREFIX):
        try:
            period = Period.parse(directory[len(RESULTS_DIR_PREFIX) :])
        except ValueError:
            logger.debug(f"Directory {directory} does not name a known period")

    metadata = ReportMetadata(
        model_name=values["model_name"],
        model_version=values["model_version"],
        description=values["description"],
        model_input=values["model_input"],
        model_results=values["model_results"],
        start=pd.Timestamp(start),
        end=pd.Timestamp(end),
        period=period,
        created=datetime.strptime(values["created"], TIMESTAMP_FORMAT),
    )

    table = "\n".join(lines[n_header + PLACEHOLDER_LINES :])
    results = pd.read_csv(
        StringIO(table),
        sep=REPORT_SEPARATOR,
        na_values=[REPORT_NA],
        keep_default_na=False,
        dtype={STATION_COLUMN: str},
    )
    return metadata, results
