"""Tests for the date fallback of template sources."""
import datetime
import warnings
from unittest.mock import patch

import pytest
import requests

from covidmex.config.settings import settings
from covidmex.core.errors import (
    DateFallbackWarning,
    FetchError,
    ReportParseError,
    ReportUnavailableError,
)
from covidmex.models.request import CaseType
from covidmex.sources.adapters import JHUAdapter
from covidmex.workflows.get_data import fetch_report

from conftest import JHU_CSV, requested_urls


def jhu_url(date: datetime.date) -> str:
    return f"{settings.jhu_prefix}{date.strftime('%m-%d-%Y')}.csv"


def fallback_warnings(caught):
    return [w for w in caught if issubclass(w.category, DateFallbackWarning)]


class TestDateFallback:

    def test_available_date_needs_no_fallback(self, transport):
        transport.routes[jhu_url(datetime.date(2020, 4, 1))] = (200, JHU_CSV)

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            df = fetch_report("worldwide", "confirmed", "01/04/2020", "jhu")

        assert fallback_warnings(caught) == []
        assert transport.call_count == 1
        assert df.attrs["report_date"] == datetime.date(2020, 4, 1)

    def test_falls_back_one_day_with_one_warning(self, transport):
        transport.routes[jhu_url(datetime.date(2020, 4, 1))] = (200, JHU_CSV)

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            df = fetch_report("worldwide", "confirmed", "02/04/2020", "jhu")

        found = fallback_warnings(caught)
        assert len(found) == 1
        assert "2020-04-02" in str(found[0].message)
        assert "404" in str(found[0].message)
        assert requested_urls(transport) == [
            jhu_url(datetime.date(2020, 4, 2)),
            jhu_url(datetime.date(2020, 4, 1)),
        ]
        assert df.attrs["report_date"] == datetime.date(2020, 4, 1)
        assert df.attrs["url"] == jhu_url(datetime.date(2020, 4, 1))
        assert "Mexico" in df["pais_region"].tolist()

    def test_gives_up_after_five_attempts(self, transport):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            with pytest.raises(ReportUnavailableError) as excinfo:
                fetch_report("worldwide", "confirmed", "10/04/2020", "jhu")

        expected_dates = [datetime.date(2020, 4, day) for day in (10, 9, 8, 7, 6)]
        assert requested_urls(transport) == [jhu_url(d) for d in expected_dates]
        assert len(fallback_warnings(caught)) == 4
        assert excinfo.value.date == datetime.date(2020, 4, 6)
        assert excinfo.value.status_code == 404
        assert "2020-04-06" in str(excinfo.value)
        assert "stopped because too many attempts" in str(excinfo.value)

    def test_latest_starts_from_today(self, transport):
        transport.routes[jhu_url(datetime.date(2020, 4, 8))] = (200, JHU_CSV)

        with patch("covidmex.sources.adapters._today", return_value=datetime.date(2020, 4, 10)):
            with pytest.warns(DateFallbackWarning):
                df = fetch_report("worldwide", "confirmed", "latest", "jhu")

        assert transport.call_count == 3
        assert requested_urls(transport)[0] == jhu_url(datetime.date(2020, 4, 10))
        assert df.attrs["report_date"] == datetime.date(2020, 4, 8)

    def test_attempt_ceiling_comes_from_settings(self, transport, monkeypatch):
        monkeypatch.setattr(settings, "max_attempts", 2)

        with pytest.warns(DateFallbackWarning):
            with pytest.raises(ReportUnavailableError):
                fetch_report("worldwide", "confirmed", "10/04/2020", "jhu")

        assert transport.call_count == 2

    def test_server_errors_also_fall_back(self, transport):
        transport.routes[jhu_url(datetime.date(2020, 4, 2))] = (503, b"")
        transport.routes[jhu_url(datetime.date(2020, 4, 1))] = (200, JHU_CSV)

        with pytest.warns(DateFallbackWarning, match="503"):
            df = fetch_report("worldwide", "confirmed", "02/04/2020", "jhu")

        assert df.attrs["report_date"] == datetime.date(2020, 4, 1)


class TestFatalErrors:

    def test_transport_errors_are_not_retried(self, transport):
        transport.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(FetchError, match="connection refused"):
            fetch_report("worldwide", "confirmed", "02/04/2020", "jhu")

        assert transport.call_count == 1

    def test_unreadable_file_is_not_retried(self, transport):
        transport.routes[jhu_url(datetime.date(2020, 4, 2))] = (200, b"\n")

        with pytest.raises(ReportParseError):
            fetch_report("worldwide", "confirmed", "02/04/2020", "jhu")

        assert transport.call_count == 1


class TestScratchFiles:

    def test_downloads_are_removed_after_parsing(self, transport, scratch_dir):
        transport.routes[jhu_url(datetime.date(2020, 4, 1))] = (200, JHU_CSV)

        fetch_report("worldwide", "confirmed", "01/04/2020", "jhu")

        assert list(scratch_dir.iterdir()) == []

    def test_raw_table_keeps_published_columns(self, transport):
        transport.routes[jhu_url(datetime.date(2020, 4, 1))] = (200, JHU_CSV)

        df = fetch_report("worldwide", "confirmed", "01/04/2020", "jhu", normalize=False)

        assert list(df.columns)[:4] == ["FIPS", "Admin2", "Province_State", "Country_Region"]


def test_adapter_max_attempts_override(transport):
    adapter = JHUAdapter(max_attempts=1)

    with pytest.raises(ReportUnavailableError):
        adapter.find(datetime.date(2020, 4, 2), CaseType.CONFIRMED)

    assert transport.call_count == 1
