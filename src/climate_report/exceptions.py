"""
Custom exceptions for the climate report package.

This module defines a hierarchy of exceptions to provide more
precise error handling across ingestion, reshaping and report runs.
Structural problems (unreadable sources, malformed year labels) are
raised; data sparsity (missing values, unmatched joins) never is.
"""


class ReportBaseError(Exception):
    """
    Base exception for all climate-report errors.

    All custom exceptions in the package inherit from this class.
    """

    pass


class ConfigurationError(ReportBaseError):
    """
    Raised when there are configuration-related issues.

    This exception is used when:
    - The configured year range is empty or inverted
    - Report years fall outside the configured year range
    - Output directories cannot be created
    """

    pass


class IngestError(ReportBaseError):
    """
    Raised while reading source CSV files.

    Covers errors specific to data ingestion, including:
    - Missing or unreadable source files
    - Source schema validation failures
    """

    pass


class SourceFileError(IngestError):
    """Raised when a source CSV file does not exist or cannot be read."""

    pass


class SchemaValidationError(IngestError):
    """
    Raised when a source table lacks required columns.

    Also used when two wide-format columns resolve to the same year.
    """

    pass


class ReshapeError(ReportBaseError):
    """Raised for structural failures while reshaping indicator data."""

    pass


class MalformedYearLabel(ReshapeError):
    """
    Raised when a wide-format column name cannot be parsed as a year.

    A year label is any non-digit prefix followed by exactly four
    digits, e.g. ``1990``, ``x1990`` or ``YR1990``.
    """

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Cannot parse year from column label: {label!r}")


class EmptyGroupError(ReshapeError):
    """Raised by strict aggregations when there are no records to group."""

    pass


class ReportError(ReportBaseError):
    """
    Raised when a report run fails for a reason not covered above.

    The original exception is chained as ``__cause__``.
    """

    pass
