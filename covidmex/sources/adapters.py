"""
Source adapters.

Every source is retrieved the same way: resolve the URL of the report for
a date, download it, parse it and optionally normalize it. When a date is
not available (no matching link, or an HTTP error status) the adapter
steps back one day and tries again, up to settings.max_attempts dates in
total. Each step back emits a DateFallbackWarning; transport and parse
errors are fatal and never retried.
"""
import datetime
import os
import shutil
import tempfile
import warnings
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple, Type

import pandas as pd
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
)

from covidmex.config.settings import settings
from covidmex.core.errors import DateFallbackWarning, ReportNotAvailable, ReportUnavailableError
from covidmex.models.request import CandidateLink, CaseType, FetchResult, ReportRequest, Source
from covidmex.sources import http
from covidmex.sources.normalizers import apply_normalizer
from covidmex.sources.parsers import extract_csv, read_table
from covidmex.sources.resolvers import ListingResolver, TemplateResolver
from covidmex.utils.logging import get_logger

logger = get_logger("sources.adapters")


def _today() -> datetime.date:
    return datetime.date.today()


def _warn_fallback(retry_state):
    """Warn that a date was unavailable before the previous day is tried."""
    error = retry_state.outcome.exception()
    message = f"{error} Trying the previous day's report instead..."
    logger.warning(message)
    warnings.warn(message, DateFallbackWarning, stacklevel=2)


def _discard(path: Optional[str]) -> None:
    if path and os.path.exists(path):
        os.remove(path)


class SourceAdapter(ABC):
    """
    Base class of all source adapters.

    Subclasses implement resolve(); fetch, parse and normalize have working
    defaults that subclasses override where their source differs.

    Args:
        max_attempts: Dates tried before giving up (default: settings.max_attempts)
    """

    source: Source
    file_prefix: str = "covid19Mex_"
    encoding: Optional[str] = None

    def __init__(self, max_attempts: Optional[int] = None):
        self.max_attempts = max_attempts or settings.max_attempts

    @abstractmethod
    def resolve(self, date: datetime.date, case_type: CaseType) -> Optional[CandidateLink]:
        """Find the report URL for a date, or None if there is none."""

    def fetch(self, link: CandidateLink) -> FetchResult:
        return http.download(link.url, prefix=self.file_prefix)

    def parse(self, result: FetchResult) -> pd.DataFrame:
        return read_table(result.path, encoding=self.encoding)

    def normalize(self, df: pd.DataFrame, case_type: CaseType) -> pd.DataFrame:
        return apply_normalizer(self.source, df, case_type)

    def report_date(self, link: CandidateLink) -> Optional[datetime.date]:
        return link.embedded_date

    def attempt(self, date: datetime.date, case_type: CaseType) -> Tuple[CandidateLink, FetchResult]:
        """
        Resolve and download the report of one date.

        Raises:
            ReportNotAvailable: If there is no link for the date or the server
                                answers with an error status
        """
        link = self.resolve(date, case_type)
        if link is None:
            raise ReportNotAvailable(date)
        result = self.fetch(link)
        if not result.ok:
            raise ReportNotAvailable(date, result.status_code)
        return link, result

    def find(self, start: datetime.date, case_type: CaseType) -> Tuple[CandidateLink, FetchResult]:
        """
        Download the report of start, or of the closest earlier available date.

        Raises:
            ReportUnavailableError: If none of the max_attempts dates is available
        """
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self.max_attempts),
                retry=(
                    retry_if_exception_type(ReportNotAvailable)
                    & retry_if_not_exception_type(ReportUnavailableError)
                ),
                before_sleep=_warn_fallback,
            ):
                with attempt:
                    date = start - datetime.timedelta(days=attempt.retry_state.attempt_number - 1)
                    found = self.attempt(date, case_type)
        except RetryError as e:
            last = e.last_attempt.exception()
            message = f"{str(last).rstrip('.')} (stopped because too many attempts)"
            logger.error(message)
            raise ReportUnavailableError(last.date, last.status_code, message=message) from last

        if found[0].embedded_date != start:
            logger.info(f"Using the report of {found[0].embedded_date.isoformat()} instead of {start.isoformat()}")
        return found

    def retrieve(self, request: ReportRequest) -> pd.DataFrame:
        """
        Retrieve the report described by request.

        Returns:
            The report table. df.attrs holds the date actually retrieved
            ('report_date'), the source name ('source') and the file URL ('url').
        """
        start = request.date or _today()
        logger.info(
            f"Retrieving {request.case_type.value} cases from {self.source.value} "
            f"({'latest' if request.date is None else start.isoformat()})"
        )
        link, result = self.find(start, request.case_type)

        try:
            df = self.parse(result)
        finally:
            _discard(result.path)

        if request.normalize:
            df = self.normalize(df, request.case_type)

        df.attrs.update(report_date=self.report_date(link), source=self.source.value, url=link.url)
        return df


class SerendipiaAdapter(SourceAdapter):
    """Daily report files listed on Serendipia's open data page."""

    source = Source.SERENDIPIA

    def __init__(self, max_attempts: Optional[int] = None, resolver: Optional[ListingResolver] = None):
        super().__init__(max_attempts)
        self.resolver = resolver or ListingResolver(settings.serendipia_url, settings.serendipia_selector)

    def resolve(self, date: datetime.date, case_type: CaseType) -> Optional[CandidateLink]:
        return self.resolver.resolve(date, case_type)


class TemplateAdapter(SourceAdapter):
    """Sources whose report URL is built from the date."""

    date_format: str
    suffix: str

    def __init__(self, max_attempts: Optional[int] = None, prefix: Optional[str] = None):
        super().__init__(max_attempts)
        self.resolver = TemplateResolver(prefix or self.default_prefix(), self.date_format, self.suffix)

    @staticmethod
    def default_prefix() -> str:
        raise NotImplementedError

    def resolve(self, date: datetime.date, case_type: CaseType) -> Optional[CandidateLink]:
        return self.resolver.resolve(date, case_type)


class GuzmartAdapter(TemplateAdapter):
    """Audited spreadsheets of the guzmart/covid19_mex repository."""

    source = Source.GUZMART
    date_format = "%Y%m%d"
    suffix = ".xlsx"

    @staticmethod
    def default_prefix() -> str:
        return settings.guzmart_prefix


class ECDCAdapter(TemplateAdapter):
    """ECDC geographic distribution of COVID-19 cases worldwide."""

    source = Source.ECDC
    file_prefix = "covid19WW_"
    date_format = "%Y-%m-%d"
    suffix = ".xlsx"

    @staticmethod
    def default_prefix() -> str:
        return settings.ecdc_prefix


class JHUAdapter(TemplateAdapter):
    """JHU CSSE daily reports."""

    source = Source.JHU
    file_prefix = "covid19WW_"
    date_format = "%m-%d-%Y"
    suffix = ".csv"

    @staticmethod
    def default_prefix() -> str:
        return settings.jhu_prefix


class SSAAdapter(SourceAdapter):
    """
    Ministry of Health open dataset.

    The dataset has no versioning: the single archive URL always holds the
    latest report (which may be yesterday's), so there is one attempt and
    no date fallback. The archive holds one CSV file.
    """

    source = Source.SSA

    def __init__(self, url: Optional[str] = None):
        super().__init__(max_attempts=1)
        self.url = url or settings.ssa_url
        self.encoding = settings.ssa_encoding

    def resolve(self, date: datetime.date, case_type: CaseType) -> Optional[CandidateLink]:
        return CandidateLink(url=self.url, embedded_date=date, case_type=case_type)

    def report_date(self, link: CandidateLink) -> Optional[datetime.date]:
        return None

    def find(self, start: datetime.date, case_type: CaseType) -> Tuple[CandidateLink, FetchResult]:
        logger.info("The open dataset has no version control; downloading the latest version available")
        try:
            return self.attempt(start, case_type)
        except ReportNotAvailable as e:
            message = (
                "The specified dataset is not available (Federal Government Open Data Server "
                f"responded with status code {e.status_code})"
            )
            logger.error(message)
            raise ReportUnavailableError(None, e.status_code, message=message) from e

    def parse(self, result: FetchResult) -> pd.DataFrame:
        target_dir = tempfile.mkdtemp(prefix="covid19Mex_", dir=settings.scratch_path)
        try:
            return read_table(extract_csv(result.path, target_dir), encoding=self.encoding)
        finally:
            shutil.rmtree(target_dir, ignore_errors=True)


ADAPTERS: Dict[Source, Type[SourceAdapter]] = {
    Source.SSA: SSAAdapter,
    Source.SERENDIPIA: SerendipiaAdapter,
    Source.GUZMART: GuzmartAdapter,
    Source.ECDC: ECDCAdapter,
    Source.JHU: JHUAdapter,
}


def adapter_for(source: Source) -> SourceAdapter:
    """Instantiate the adapter of a source."""
    return ADAPTERS[source]()
