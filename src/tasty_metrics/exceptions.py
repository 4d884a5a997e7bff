"""Domain-specific exceptions for tasty_metrics.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from TastyMetricsError for easy catching.
"""


class TastyMetricsError(Exception):
    """Base exception for all tasty_metrics errors.

    Users can catch this exception to handle any error raised by the
    harmonization, aggregation or masking layers.
    """

    pass


class ConfigError(TastyMetricsError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - The role configuration file is missing or cannot be parsed
    - A role entry has an invalid shape
    - Required configuration is missing
    """

    pass


class DataQualityError(TastyMetricsError):
    """Raised when a source dataset does not meet its input contract.

    This exception is raised when:
    - Required columns are missing from a source dataset
    - A source dataset cannot be read from the store
    """

    pass


class DomainError(TastyMetricsError, ValueError):
    """Raised when a scalar function receives a value outside its domain.

    Unit conversions accept any real number. Text that does not parse as a
    number, booleans and infinities are rejected instead of producing a
    silently wrong result.
    """

    pass


class DatasetNotFoundError(TastyMetricsError):
    """Raised when a derived dataset name is not registered in the catalog."""

    pass
