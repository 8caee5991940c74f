"""
Link resolution for dated report files.

Two kinds of resolvers find the URL of the report for a given date:

- TemplateResolver builds the URL from a prefix, a formatted date and a
  suffix. Whether the file exists is only known once it is downloaded.
- ListingResolver scrapes a page listing the report files and picks the
  link whose row mentions the case type and whose target or text carries
  the date.
"""
import datetime
import re
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from covidmex.core.errors import FetchError
from covidmex.models.request import CandidateLink, CaseType
from covidmex.sources import http
from covidmex.utils.logging import get_logger

logger = get_logger("sources.resolvers")


class TemplateResolver:
    """Resolve a report URL as prefix + date.strftime(date_format) + suffix."""

    def __init__(self, prefix: str, date_format: str, suffix: str):
        self.prefix = prefix
        self.date_format = date_format
        self.suffix = suffix

    def resolve(self, date: datetime.date, case_type: CaseType) -> Optional[CandidateLink]:
        url = f"{self.prefix}{date.strftime(self.date_format)}{self.suffix}"
        logger.debug(f"Resolved {date.isoformat()} to {url}")
        return CandidateLink(url=url, embedded_date=date, case_type=case_type)


# Keyword a listing row must mention for each case type
CASE_TYPE_KEYWORDS: Dict[CaseType, str] = {
    CaseType.CONFIRMED: "positivos",
    CaseType.SUSPECT: "sospechosos",
}


def date_pattern(date: datetime.date) -> re.Pattern:
    """
    Pattern matching a date embedded in a file name or link text.

    Matches both '2020.03.15' (with any separator, e.g. '2020-03-15' or
    '2020/03/15') and '15032020'.
    """
    return re.compile(date.strftime("(%Y.%m.%d)|(%d%m%Y)"))


class ListingResolver:
    """
    Resolve report URLs by scraping a page that lists them.

    The page is downloaded once per resolver and reused for every date
    tried. Links are read from the rows ('tr') of the first element
    matching the selector; the header row is skipped.
    """

    def __init__(
        self,
        page_url: str,
        selector: str = "table",
        keywords: Optional[Dict[CaseType, str]] = None,
        fetch_page: Callable[[str], str] = http.get_page,
    ):
        self.page_url = page_url
        self.selector = selector
        self.keywords = keywords or CASE_TYPE_KEYWORDS
        self._fetch_page = fetch_page
        self._links: Optional[List[Tuple[str, str, str]]] = None

    @property
    def links(self) -> List[Tuple[str, str, str]]:
        """(absolute href, link text, row text) for every link of the listing."""
        if self._links is None:
            self._links = self._scrape(self._fetch_page(self.page_url))
        return self._links

    def _scrape(self, html: str) -> List[Tuple[str, str, str]]:
        soup = BeautifulSoup(html, "html.parser")
        containers = soup.select(self.selector)
        if not containers:
            logger.error(f"No element matches '{self.selector}' on {self.page_url}")
            raise FetchError(
                f"The listing page layout changed: no element matches '{self.selector}' on {self.page_url}"
            )

        links = []
        rows = containers[0].find_all("tr")
        for row in rows[1:]:
            row_text = row.get_text(" ", strip=True)
            for anchor in row.find_all("a", href=True):
                links.append((
                    urljoin(self.page_url, anchor["href"]),
                    anchor.get_text(" ", strip=True),
                    row_text,
                ))

        logger.info(f"Found {len(links)} file links on the listing page")
        return links

    def resolve(self, date: datetime.date, case_type: CaseType) -> Optional[CandidateLink]:
        keyword = self.keywords[case_type]
        pattern = date_pattern(date)

        for href, text, row_text in self.links:
            if keyword not in row_text.lower():
                continue
            if pattern.search(href) or pattern.search(text):
                logger.debug(f"Matched {href} for {case_type.value} cases on {date.isoformat()}")
                return CandidateLink(url=href, embedded_date=date, case_type=case_type)

        logger.debug(f"No {case_type.value} link for {date.isoformat()} on the listing page")
        return None
