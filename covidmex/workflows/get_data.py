"""
Report Retrieval Workflow.

Entry points of the package:
- fetch_report: retrieve any report of the registry
- get_data: Mexico reports, with the original package's signature
- get_confirmed_mexico / get_suspect_mexico / get_worldwide: latest report
  of the default source for each kind of report
- available_sources: the registry as a table

Requests are validated before any network call; a deprecated source is
announced with a DeprecatedSourceWarning before it is used.
"""
import datetime
import warnings
from typing import Optional, Union

import pandas as pd

from covidmex.core.errors import DeprecatedSourceWarning, InvalidRequestError
from covidmex.models.request import (
    DEFAULT_SOURCES,
    REGISTRY,
    CaseType,
    ReportRequest,
    Scope,
    Source,
)
from covidmex.sources.adapters import adapter_for
from covidmex.utils.logging import get_logger

logger = get_logger("workflows")

DateLike = Union[str, datetime.date, None]


def _default_source(scope, case_type) -> Source:
    try:
        key = (Scope(scope), CaseType(case_type))
    except ValueError as e:
        raise InvalidRequestError(str(e)) from e
    if key not in DEFAULT_SOURCES:
        raise InvalidRequestError(
            f"There's no data source for {key[1].value} cases in scope '{key[0].value}'"
        )
    return DEFAULT_SOURCES[key]


def fetch_report(
    scope: Union[str, Scope] = Scope.MEXICO,
    case_type: Union[str, CaseType] = CaseType.CONFIRMED,
    date: DateLike = "latest",
    source: Union[str, Source, None] = None,
    normalize: bool = True,
) -> pd.DataFrame:
    """
    Retrieve a COVID-19 case report.

    If the report of the requested date is not published (yet), the reports
    of up to four earlier days are tried, each step emitting a
    DateFallbackWarning. Check df.attrs['report_date'] for the date
    actually retrieved.

    Args:
        scope: 'mexico' or 'worldwide'
        case_type: 'confirmed' or 'suspect'
        date: 'latest', a date object, or a day/month/year string
        source: 'ssa', 'serendipia', 'guzmart', 'ecdc' or 'jhu'
                (default: the default source of scope and case_type)
        normalize: Clean column names, dates and categories

    Returns:
        The report table

    Raises:
        InvalidRequestError: If the parameters are not a valid combination
        ReportUnavailableError: If no report was found
        FetchError: On network errors
        ReportParseError: If the downloaded file is unreadable
    """
    if source is None:
        source = _default_source(scope, case_type)

    request = ReportRequest.build(
        scope=scope,
        case_type=case_type,
        source=source,
        date=date,
        normalize=normalize,
    )

    if request.info.deprecated:
        message = (
            f"Deprecation Warning: The '{request.source.value}' source stopped daily updates. "
            "In future versions, this source will be fully removed."
        )
        logger.warning(message)
        warnings.warn(message, DeprecatedSourceWarning, stacklevel=2)

    return adapter_for(request.source).retrieve(request)


def get_data(
    case_type: Union[str, CaseType] = CaseType.CONFIRMED,
    date: DateLike = "latest",
    source: Union[str, Source] = Source.SERENDIPIA,
    normalize: bool = True,
) -> pd.DataFrame:
    """Retrieve a report of cases in Mexico."""
    return fetch_report(Scope.MEXICO, case_type, date, source, normalize)


def get_confirmed_mexico() -> pd.DataFrame:
    """Latest confirmed cases in Mexico (Ministry of Health open dataset)."""
    return fetch_report(Scope.MEXICO, CaseType.CONFIRMED, "latest", Source.SSA)


def get_suspect_mexico() -> pd.DataFrame:
    """Latest suspect cases in Mexico (Serendipia)."""
    return fetch_report(Scope.MEXICO, CaseType.SUSPECT, "latest", Source.SERENDIPIA)


def get_worldwide() -> pd.DataFrame:
    """Latest worldwide situation report (ECDC)."""
    return fetch_report(Scope.WORLDWIDE, CaseType.CONFIRMED, "latest", Source.ECDC)


def available_sources() -> pd.DataFrame:
    """Describe every available (scope, source) combination."""
    rows = []
    for info in REGISTRY.values():
        rows.append({
            "scope": info.scope.value,
            "source": info.source.value,
            "case_types": ", ".join(c.value for c in info.case_types),
            "from": "latest only" if info.latest_only else info.min_date,
            "to": info.max_date,
            "deprecated": info.deprecated,
            "default_for": ", ".join(
                c.value for (s, c), src in DEFAULT_SOURCES.items()
                if s == info.scope and src == info.source
            ),
            "description": info.description,
        })
    return pd.DataFrame(rows)
