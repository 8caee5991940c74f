"""Core definitions shared across covidmex."""

from covidmex.core.errors import (
    CovidMexError,
    CovidMexWarning,
    DateFallbackWarning,
    DeprecatedSourceWarning,
    FetchError,
    InvalidRequestError,
    NormalizationError,
    NormalizationWarning,
    ReportNotAvailable,
    ReportParseError,
    ReportUnavailableError,
    SchemaMismatchError,
)

__all__ = [
    "CovidMexError",
    "CovidMexWarning",
    "DateFallbackWarning",
    "DeprecatedSourceWarning",
    "FetchError",
    "InvalidRequestError",
    "NormalizationError",
    "NormalizationWarning",
    "ReportNotAvailable",
    "ReportParseError",
    "ReportUnavailableError",
    "SchemaMismatchError",
]
