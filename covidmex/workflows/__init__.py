"""Workflows package."""

from covidmex.workflows.get_data import (
    available_sources,
    fetch_report,
    get_confirmed_mexico,
    get_data,
    get_suspect_mexico,
    get_worldwide,
)

__all__ = [
    "available_sources",
    "fetch_report",
    "get_confirmed_mexico",
    "get_data",
    "get_suspect_mexico",
    "get_worldwide",
]
