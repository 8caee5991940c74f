"""
covidmex - COVID-19 case reports for Mexico and the world.

Downloads the daily case reports published by Mexico's Ministry of Health,
Serendipia, the guzmart/covid19_mex repository, the ECDC and JHU CSSE into
pandas DataFrames, optionally cleaned into a common schema.
"""
__version__ = "0.3.0"

from covidmex.core.errors import (  # noqa: E402
    CovidMexError,
    DateFallbackWarning,
    DeprecatedSourceWarning,
    FetchError,
    InvalidRequestError,
    NormalizationWarning,
    ReportParseError,
    ReportUnavailableError,
)
from covidmex.models.request import CaseType, Scope, Source  # noqa: E402
from covidmex.workflows.get_data import (  # noqa: E402
    available_sources,
    fetch_report,
    get_confirmed_mexico,
    get_data,
    get_suspect_mexico,
    get_worldwide,
)

__all__ = [
    "__version__",
    "CaseType",
    "CovidMexError",
    "DateFallbackWarning",
    "DeprecatedSourceWarning",
    "FetchError",
    "InvalidRequestError",
    "NormalizationWarning",
    "ReportParseError",
    "ReportUnavailableError",
    "Scope",
    "Source",
    "available_sources",
    "fetch_report",
    "get_confirmed_mexico",
    "get_data",
    "get_suspect_mexico",
    "get_worldwide",
]
