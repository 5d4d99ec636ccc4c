"""
Centralized exception hierarchy for the hydro-evaluation package.

Run-level failures (schema mismatch, insufficient history, occupied report
destination) are fatal and abort an evaluation before any report is written.
Station-level degeneracies are contained by the engine and surface only as
undefined values in the result table.
"""


class HydroEvaluationError(Exception):
    """
    Base exception class for all hydro-evaluation related errors.

    This serves as the root of the exception hierarchy, allowing users
    to catch all package-specific errors with a single exception type.
    """

    pass


class ConfigurationError(HydroEvaluationError):
    """
    Raised when there are configuration-related errors.

    This includes invalid configuration values, missing required settings,
    or configuration that fails validation checks.
    """

    pass


class FileOperationError(HydroEvaluationError):
    """
    Raised when file operations fail.

    This includes missing input files, permission issues and other
    filesystem-related problems.
    """

    pass


class DataProcessingError(HydroEvaluationError):
    """
    Raised when input tables cannot be read or converted.
    """

    pass


class SchemaMismatchError(HydroEvaluationError):
    """
    Raised when the observed and simulated tables disagree on their
    timestamps or on their station columns (including column order).
    """

    pass


class InsufficientHistoryError(HydroEvaluationError):
    """
    Raised when a table has no rows left after removing the warm-up period.
    """

    pass


class DestinationExistsError(HydroEvaluationError):
    """
    Raised when a report already exists at the destination path.

    Reports are immutable once written; delete the file manually or choose
    another model version to replace it.
    """

    pass


class DegenerateStationError(HydroEvaluationError):
    """
    Raised by metric helpers when a statistic is mathematically undefined
    for a station (zero variance, zero denominator, too few valid pairs).

    The evaluation engine catches it and records an undefined value.
    """

    pass
