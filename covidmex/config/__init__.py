"""Configuration for the covidmex package."""

from covidmex.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
