"""Domain-specific exceptions for ts_core.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from TSCoreError for easy catching.
"""


class TSCoreError(Exception):
    """Base exception for all ts_core errors.

    Users can catch this exception to handle any fit, forecast or
    configuration failure raised by the package.
    """

    pass


class ConfigError(TSCoreError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid ForecastConfig values are provided
    - Unknown model or fill method names are requested
    """

    pass


class ParameterError(ConfigError):
    """Raised when model parameters are outside their valid domain.

    This exception is raised when:
    - Smoothing parameters are outside [0, 1]
    - The damping parameter is outside (0, 1)
    - ARIMA orders are negative or a constant is combined with d + D > 1
    """

    pass


class DataQualityError(TSCoreError):
    """Raised when input data cannot be used as given.

    This exception is raised when:
    - Required columns are missing from input data
    - A series still contains missing values when a model is fit
    - Multiplicative components are requested for non-positive data
    """

    pass


class SeriesIndexError(DataQualityError):
    """Raised when a series index is not strictly increasing or has duplicates."""

    pass


class InsufficientDataError(DataQualityError):
    """Raised when a series is too short for the requested model."""

    pass


class StationarityWarning(UserWarning):
    """Issued when a series still looks non-stationary after maximum differencing."""

    pass
