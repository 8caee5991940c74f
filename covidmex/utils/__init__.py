"""Utility modules for the covidmex package."""

from covidmex.utils.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
