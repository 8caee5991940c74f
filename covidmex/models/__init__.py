"""Data models and source registry."""

from covidmex.models.request import (
    DEFAULT_SOURCES,
    REGISTRY,
    CandidateLink,
    CaseType,
    FetchResult,
    ReportRequest,
    Scope,
    Source,
    SourceInfo,
    parse_report_date,
)

__all__ = [
    "DEFAULT_SOURCES",
    "REGISTRY",
    "CandidateLink",
    "CaseType",
    "FetchResult",
    "ReportRequest",
    "Scope",
    "Source",
    "SourceInfo",
    "parse_report_date",
]
