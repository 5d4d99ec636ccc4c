import logging
from pathlib import Path

import pandas as pd
import polars as pl

from .exceptions import DataProcessingError, FileOperationError

logger = logging.getLogger(__name__)

PARQUET_SUFFIXES = {".parquet", ".pq"}
NULL_VALUES = ["NA", "NaN", "nan", ""]


def load_series_table(path: str | Path, time_column: str = "Time", separator: str = ",") -> pd.DataFrame:
    """
    Load an observed or simulated discharge table.

    The file holds one timestamp column and one discharge column per station. The
    returned frame has the timestamps first, followed by the station columns in file
    order, as expected by the evaluation.

    Args:
        path: CSV/text or Parquet file.
        time_column: Name of the timestamp column.
        separator: Field separator of CSV/text files.

    Returns:
        pandas DataFrame with a datetime first column and float station columns
        (missing values as NaN).

    Raises:
        FileOperationError: If the file does not exist or cannot be read.
        DataProcessingError: If the timestamp column is missing or the values cannot
            be converted.
    """
    path = Path(path)
    if not path.is_file():
        raise FileOperationError(f"Series file not found: {path}")

    try:
        if path.suffix.lower() in PARQUET_SUFFIXES:
            df = pl.read_parquet(path)
        else:
            df = pl.read_csv(path, separator=separator, null_values=NULL_VALUES, try_parse_dates=True)
    except OSError as e:
        raise FileOperationError(f"Failed to read {path}: {e}") from e
    except pl.exceptions.PolarsError as e:
        raise DataProcessingError(f"Failed to parse {path}: {e}") from e

    if time_column not in df.columns:
        raise DataProcessingError(f"Timestamp column '{time_column}' not found in {path}; columns: {df.columns}")

    stations = [c for c in df.columns if c != time_column]
    if not stations:
        raise DataProcessingError(f"No station columns found in {path}")

    try:
        time_expr = pl.col(time_column)
        if df.schema[time_column] == pl.String:
            time_expr = time_expr.str.to_datetime()
        df = df.select([time_expr.alias(time_column), *[pl.col(s).cast(pl.Float64) for s in stations]])
    except pl.exceptions.PolarsError as e:
        raise DataProcessingError(f"Failed to convert columns of {path}: {e}") from e

    frame = df.to_pandas()
    frame[time_column] = pd.to_datetime(frame[time_column])
    logger.info(f"Loaded {len(frame)} timesteps for {len(stations)} stations from {path}")
    return frame
