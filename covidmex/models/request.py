"""
Request and Registry Definitions.

This module defines:
- Enums for the scope, case type and data source of a report
- The immutable registry of valid (scope, source, case type) combinations
- Data models for a validated report request and the transient objects
  produced while retrieving it (CandidateLink, FetchResult)
"""
import datetime
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError, field_validator, model_validator

from covidmex.core.errors import InvalidRequestError


def _lookup(cls, value, aliases: Dict[str, str]):
    """Case-insensitive enum lookup with legacy aliases."""
    if not isinstance(value, str):
        return None
    key = value.strip().lower()
    key = aliases.get(key, key)
    for member in cls:
        if member.value == key:
            return member
    return None


class Scope(str, Enum):
    """Geographic scope of a report."""
    MEXICO = "mexico"
    WORLDWIDE = "worldwide"

    @classmethod
    def _missing_(cls, value):
        return _lookup(cls, value, {"world": "worldwide"})


class CaseType(str, Enum):
    """Kind of cases listed in a report."""
    CONFIRMED = "confirmed"
    SUSPECT = "suspect"

    @classmethod
    def _missing_(cls, value):
        """Handle legacy 'suspects' value as alias for 'suspect'."""
        return _lookup(cls, value, {"suspects": "suspect"})


class Source(str, Enum):
    """Publishers a report can be retrieved from."""
    SSA = "ssa"                # Ministry of Health open dataset
    SERENDIPIA = "serendipia"  # Data journalism mirror of the daily report
    GUZMART = "guzmart"        # Community-audited GitHub repo (deprecated)
    ECDC = "ecdc"              # European CDC geographic distribution
    JHU = "jhu"                # JHU CSSE daily reports

    @classmethod
    def _missing_(cls, value):
        return _lookup(cls, value, {})


class SourceInfo(BaseModel):
    """Static metadata of one (scope, source) registry entry."""
    model_config = ConfigDict(frozen=True)

    scope: Scope
    source: Source
    case_types: Tuple[CaseType, ...]
    min_date: Optional[datetime.date] = None
    max_date: Optional[datetime.date] = None
    latest_only: bool = False
    deprecated: bool = False
    description: str = ""


_ENTRIES = (
    SourceInfo(
        scope=Scope.MEXICO,
        source=Source.SSA,
        case_types=(CaseType.CONFIRMED,),
        latest_only=True,
        description="Ministry of Health open dataset (ZIP archive with one CSV)",
    ),
    SourceInfo(
        scope=Scope.MEXICO,
        source=Source.SERENDIPIA,
        case_types=(CaseType.CONFIRMED, CaseType.SUSPECT),
        min_date=datetime.date(2020, 3, 15),
        description="Serendipia CSV/XLSX versions of the daily technical report",
    ),
    SourceInfo(
        scope=Scope.MEXICO,
        source=Source.GUZMART,
        case_types=(CaseType.CONFIRMED,),
        min_date=datetime.date(2020, 3, 16),
        max_date=datetime.date(2020, 4, 6),
        deprecated=True,
        description="guzmart/covid19_mex audited spreadsheets (stopped updating on 06/04/2020)",
    ),
    SourceInfo(
        scope=Scope.WORLDWIDE,
        source=Source.ECDC,
        case_types=(CaseType.CONFIRMED,),
        min_date=datetime.date(2020, 1, 1),
        description="ECDC geographic distribution of cases worldwide",
    ),
    SourceInfo(
        scope=Scope.WORLDWIDE,
        source=Source.JHU,
        case_types=(CaseType.CONFIRMED,),
        min_date=datetime.date(2020, 1, 24),
        description="JHU CSSE COVID-19 daily reports",
    ),
)

REGISTRY: Mapping[Tuple[Scope, Source], SourceInfo] = MappingProxyType(
    {(entry.scope, entry.source): entry for entry in _ENTRIES}
)

DEFAULT_SOURCES: Mapping[Tuple[Scope, CaseType], Source] = MappingProxyType({
    (Scope.MEXICO, CaseType.CONFIRMED): Source.SSA,
    (Scope.MEXICO, CaseType.SUSPECT): Source.SERENDIPIA,
    (Scope.WORLDWIDE, CaseType.CONFIRMED): Source.ECDC,
})


def parse_report_date(value) -> Optional[datetime.date]:
    """
    Parse the date (version) of a report.

    Args:
        value: None, 'latest' / 'today', a date or datetime object, or a
               string in day/month/year or ISO (year-month-day) format

    Returns:
        The calendar date, or None for the latest available report

    Raises:
        ValueError: If the value cannot be read as a date
    """
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in ("latest", "today"):
            return None
        for fmt in ("%d/%m/%Y", "%Y-%m-%d"):
            try:
                return datetime.datetime.strptime(text, fmt).date()
            except ValueError:
                continue
    raise ValueError(
        f"'date' must be 'latest', a date object or a day/month/year string, got {value!r}"
    )


class CandidateLink(BaseModel):
    """A document URL matching a requested date and case type."""
    url: str = Field(..., description="Absolute URL of the report file")
    embedded_date: datetime.date = Field(..., description="Date the report belongs to")
    case_type: CaseType


class FetchResult(BaseModel):
    """Outcome of one download attempt."""
    url: str
    status_code: int
    path: Optional[str] = Field(None, description="Scratch file holding the body (None on HTTP errors)")

    @property
    def ok(self) -> bool:
        return self.status_code < 400 and self.path is not None

    @property
    def content(self) -> bytes:
        if self.path is None:
            return b""
        with open(self.path, "rb") as f:
            return f.read()


class ReportRequest(BaseModel):
    """
    A validated request for one report.

    Building a request checks the (scope, source, case type) combination and
    the date against the registry, so an invalid request never reaches the
    network.

    Attributes:
        scope: Mexico or worldwide
        case_type: Confirmed or suspect cases
        source: Publisher of the report
        date: Report date, None for the latest available
        normalize: Whether the table should be cleaned
    """
    model_config = ConfigDict(frozen=True)

    scope: Scope
    case_type: CaseType
    source: Source
    date: Optional[datetime.date] = None
    normalize: StrictBool = True

    @field_validator("scope", mode="before")
    @classmethod
    def _parse_scope(cls, value):
        return Scope(value)

    @field_validator("case_type", mode="before")
    @classmethod
    def _parse_case_type(cls, value):
        return CaseType(value)

    @field_validator("source", mode="before")
    @classmethod
    def _parse_source(cls, value):
        return Source(value)

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value):
        return parse_report_date(value)

    @model_validator(mode="after")
    def _check_registry(self) -> "ReportRequest":
        info = REGISTRY.get((self.scope, self.source))
        if info is None:
            available = ", ".join(s.source.value for s in _ENTRIES if s.scope == self.scope)
            raise ValueError(
                f"Unknown data source '{self.source.value}' for scope '{self.scope.value}'! "
                f"Available data sources: {available}"
            )
        if self.case_type not in info.case_types:
            available = ", ".join(c.value for c in info.case_types)
            raise ValueError(
                f"Unknown data type '{self.case_type.value}' for source '{self.source.value}'! "
                f"Available data types: {available}"
            )
        if self.date is not None:
            if info.latest_only:
                raise ValueError(
                    f"There's no version control for the '{self.source.value}' report. "
                    "Please use date='latest' to download the most recent version available."
                )
            if info.min_date and self.date < info.min_date:
                raise ValueError(
                    f"The '{self.source.value}' source has no reports before {info.min_date.isoformat()}"
                )
            if info.max_date and self.date > info.max_date:
                raise ValueError(
                    f"The '{self.source.value}' source has no reports after {info.max_date.isoformat()}"
                )
        return self

    @property
    def info(self) -> SourceInfo:
        return REGISTRY[(self.scope, self.source)]

    @classmethod
    def build(cls, **params) -> "ReportRequest":
        """Validate parameters into a request, raising InvalidRequestError."""
        try:
            return cls(**params)
        except ValidationError as e:
            messages = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'request'}: {err['msg']}"
                for err in e.errors()
            )
            raise InvalidRequestError(messages) from e
