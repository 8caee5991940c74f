"""Tests for link resolution and the Serendipia listing source."""
import datetime
import warnings
from unittest.mock import MagicMock
from urllib.parse import urljoin

import pytest

from covidmex.config.settings import settings
from covidmex.core.errors import DateFallbackWarning, FetchError, ReportUnavailableError
from covidmex.models.request import CaseType
from covidmex.sources.resolvers import ListingResolver, TemplateResolver, date_pattern
from covidmex.workflows.get_data import fetch_report, get_suspect_mexico

from conftest import SERENDIPIA_CSV, requested_urls

POSITIVE_0204 = "/wp-content/uploads/2020/04/Tabla_casos_positivos_COVID_19_resultado_InDRE_2020.04.02-Table-1.csv"
SUSPECT_0204 = (
    "https://serendipia.digital/wp-content/uploads/2020/04/"
    "Tabla_casos_sospechosos_COVID_19_resultado_InDRE_2020.04.02-Table-1.csv"
)
POSITIVE_0104 = "/wp-content/uploads/2020/04/casos_positivos_01042020.csv"

LISTING = f"""
<html><body>
<p><a href="/2020/03/otra-nota/">Otra nota 2020.04.02</a></p>
<table>
  <tr><th>Reporte</th><th>CSV</th></tr>
  <tr><td>Casos positivos a COVID-19 (02/04/2020)</td><td><a href="{POSITIVE_0204}">CSV</a></td></tr>
  <tr><td>Casos sospechosos (02/04/2020)</td><td><a href="{SUSPECT_0204}">CSV</a></td></tr>
  <tr><td>Casos positivos a COVID-19 (01/04/2020)</td><td><a href="{POSITIVE_0104}">CSV</a></td></tr>
  <tr><td>Casos positivos a COVID-19</td><td><a href="/wp-content/uploads/2020/03/reporte.csv">31032020</a></td></tr>
</table>
</body></html>
"""


def listing_resolver(html=LISTING):
    return ListingResolver("https://serendipia.digital/datos/", fetch_page=MagicMock(return_value=html))


class TestDatePattern:

    @pytest.mark.parametrize("text", ["casos_2020.04.02.csv", "casos_2020-04-02.csv", "casos_02042020.csv"])
    def test_matches(self, text):
        assert date_pattern(datetime.date(2020, 4, 2)).search(text)

    def test_other_dates_do_not_match(self):
        assert not date_pattern(datetime.date(2020, 4, 2)).search("casos_2020.04.01_02032020.csv")


class TestTemplateResolver:

    def test_builds_url_from_date(self):
        resolver = TemplateResolver("https://example.org/report_", "%Y%m%d", ".xlsx")
        link = resolver.resolve(datetime.date(2020, 3, 20), CaseType.CONFIRMED)
        assert link.url == "https://example.org/report_20200320.xlsx"
        assert link.embedded_date == datetime.date(2020, 3, 20)


class TestListingResolver:

    def test_confirmed_link(self):
        link = listing_resolver().resolve(datetime.date(2020, 4, 2), CaseType.CONFIRMED)
        assert link.url == "https://serendipia.digital" + POSITIVE_0204
        assert link.case_type is CaseType.CONFIRMED

    def test_suspect_link(self):
        link = listing_resolver().resolve(datetime.date(2020, 4, 2), CaseType.SUSPECT)
        assert link.url == SUSPECT_0204

    def test_compact_date_in_href(self):
        link = listing_resolver().resolve(datetime.date(2020, 4, 1), CaseType.CONFIRMED)
        assert link.url.endswith("casos_positivos_01042020.csv")

    def test_date_in_link_text(self):
        link = listing_resolver().resolve(datetime.date(2020, 3, 31), CaseType.CONFIRMED)
        assert link.url.endswith("/2020/03/reporte.csv")

    def test_missing_date_is_not_an_error(self):
        assert listing_resolver().resolve(datetime.date(2020, 4, 1), CaseType.SUSPECT) is None

    def test_links_outside_the_table_are_ignored(self):
        resolver = listing_resolver()
        assert all("otra-nota" not in href for href, _, _ in resolver.links)

    def test_page_is_fetched_once(self):
        resolver = listing_resolver()
        for day in (3, 2, 1):
            resolver.resolve(datetime.date(2020, 4, day), CaseType.CONFIRMED)
        resolver._fetch_page.assert_called_once()

    def test_layout_change_is_fatal(self):
        resolver = listing_resolver("<html><body><p>Sin datos</p></body></html>")
        with pytest.raises(FetchError, match="layout"):
            resolver.resolve(datetime.date(2020, 4, 2), CaseType.CONFIRMED)


class TestSerendipiaSource:

    @pytest.fixture
    def listing(self, transport):
        transport.routes[settings.serendipia_url] = (200, LISTING.encode("utf-8"))
        return transport

    def test_confirmed_cases(self, listing):
        listing.routes[urljoin(settings.serendipia_url, POSITIVE_0204)] = (200, SERENDIPIA_CSV)

        df = fetch_report("mexico", "confirmed", "02/04/2020", "serendipia")

        assert list(df.columns)[:6] == ["id_registro", "ent", "sexo", "edad", "fecha_inicio", "identificado"]
        assert df["ent"].tolist() == ["Ciudad de México", "Sinaloa"]
        assert df["fecha_inicio"].iloc[0] == datetime.datetime(2020, 2, 27)
        assert df.attrs["report_date"] == datetime.date(2020, 4, 2)

    def test_missing_link_falls_back(self, listing):
        listing.routes[urljoin(settings.serendipia_url, POSITIVE_0104)] = (200, SERENDIPIA_CSV)

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            df = fetch_report("mexico", "confirmed", "03/04/2020", "serendipia")

        # 03/04 has no link, 02/04 has a link but the file is gone, 01/04 works
        assert len([w for w in caught if issubclass(w.category, DateFallbackWarning)]) == 2
        assert df.attrs["report_date"] == datetime.date(2020, 4, 1)
        assert requested_urls(listing).count(settings.serendipia_url) == 1

    def test_no_links_after_five_dates(self, listing):
        with pytest.warns(DateFallbackWarning):
            with pytest.raises(ReportUnavailableError, match="No file matches"):
                fetch_report("mexico", "suspect", "20/04/2020", "serendipia")

        # Only the listing page was requested
        assert requested_urls(listing) == [settings.serendipia_url]

    def test_suspect_convenience_entry_point(self, listing, monkeypatch):
        listing.routes[SUSPECT_0204] = (200, SERENDIPIA_CSV)
        monkeypatch.setattr("covidmex.sources.adapters._today", lambda: datetime.date(2020, 4, 2))

        df = get_suspect_mexico()

        assert df.attrs["source"] == "serendipia"
        assert df.attrs["url"] == SUSPECT_0204

    def test_listing_page_error_is_fatal(self, transport):
        transport.routes[settings.serendipia_url] = (500, b"")

        with pytest.raises(FetchError):
            fetch_report("mexico", "confirmed", "02/04/2020", "serendipia")

        assert transport.call_count == 1
