"""
Package Configuration Module.

This module provides centralized configuration management using Pydantic Settings.
Holds the upstream source locations, the date fallback ceiling, download and
logging options. Configuration can be provided via environment variables or .env file.
"""
import os
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    covidmex settings.

    Environment Variables:
        COVIDMEX_SERENDIPIA_URL: Serendipia page listing the daily report files
        COVIDMEX_SERENDIPIA_SELECTOR: CSS selector of the element holding the file links
        COVIDMEX_GUZMART_PREFIX: URL prefix of the guzmart/covid19_mex spreadsheets
        COVIDMEX_SSA_URL: URL of the Ministry of Health open data archive
        COVIDMEX_SSA_ENCODING: Text encoding of the open data CSV
        COVIDMEX_ECDC_PREFIX: URL prefix of the ECDC geographic distribution spreadsheets
        COVIDMEX_JHU_PREFIX: URL prefix of the JHU CSSE daily reports

        COVIDMEX_MAX_ATTEMPTS: Dates tried (first one included) before giving up
        COVIDMEX_REQUEST_TIMEOUT: Seconds before an HTTP request times out (unset = no timeout)
        COVIDMEX_SCRATCH_DIR: Directory for downloaded files (unset = system temp dir)
        COVIDMEX_SHOW_PROGRESS: Show a progress bar while downloading

        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        COVIDMEX_LOG_TO_FILE: Also write logs to a file
        COVIDMEX_LOG_DIR: Directory for log files
    """

    # === Data Sources ===
    serendipia_url: str = Field(
        default="https://serendipia.digital/2020/03/datos-abiertos-sobre-casos-de-coronavirus-covid-19-en-mexico/",
        validation_alias='COVIDMEX_SERENDIPIA_URL',
        description="Serendipia page listing the daily report files"
    )
    serendipia_selector: str = Field(
        default="table",
        validation_alias='COVIDMEX_SERENDIPIA_SELECTOR',
        description="CSS selector of the element holding the file links"
    )
    guzmart_prefix: str = Field(
        default="https://github.com/guzmart/covid19_mex/raw/master/01_datos/covid_mex_",
        validation_alias='COVIDMEX_GUZMART_PREFIX',
        description="URL prefix of the guzmart/covid19_mex spreadsheets"
    )
    ssa_url: str = Field(
        default="http://187.191.75.115/gobmx/salud/datos_abiertos/datos_abiertos_covid19.zip",
        validation_alias='COVIDMEX_SSA_URL',
        description="URL of the Ministry of Health open data archive"
    )
    ssa_encoding: str = Field(
        default="latin1",
        validation_alias='COVIDMEX_SSA_ENCODING',
        description="Text encoding of the open data CSV"
    )
    ecdc_prefix: str = Field(
        default="https://www.ecdc.europa.eu/sites/default/files/documents/COVID-19-geographic-disbtribution-worldwide-",
        validation_alias='COVIDMEX_ECDC_PREFIX',
        description="URL prefix of the ECDC geographic distribution spreadsheets"
    )
    jhu_prefix: str = Field(
        default="https://github.com/CSSEGISandData/COVID-19/raw/master/csse_covid_19_data/csse_covid_19_daily_reports/",
        validation_alias='COVIDMEX_JHU_PREFIX',
        description="URL prefix of the JHU CSSE daily reports"
    )

    # === Retrieval ===
    max_attempts: int = Field(
        default=5,
        validation_alias='COVIDMEX_MAX_ATTEMPTS',
        ge=1,
        le=30,
        description="Dates tried (first one included) before giving up"
    )
    request_timeout: Optional[float] = Field(
        default=None,
        validation_alias='COVIDMEX_REQUEST_TIMEOUT',
        gt=0,
        description="Seconds before an HTTP request times out"
    )
    scratch_dir: Optional[str] = Field(
        default=None,
        validation_alias='COVIDMEX_SCRATCH_DIR',
        description="Directory for downloaded files"
    )
    show_progress: bool = Field(
        default=False,
        validation_alias='COVIDMEX_SHOW_PROGRESS',
        description="Show a progress bar while downloading"
    )

    # === Logging ===
    log_level: str = Field(
        default="INFO",
        validation_alias='LOG_LEVEL',
        description="Logging level"
    )
    log_to_file: bool = Field(
        default=False,
        validation_alias='COVIDMEX_LOG_TO_FILE',
        description="Also write logs to a file"
    )
    log_dir: str = Field(
        default="logs",
        validation_alias='COVIDMEX_LOG_DIR',
        description="Directory for log files"
    )

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    @property
    def scratch_path(self) -> Optional[str]:
        """Get absolute path to the scratch directory, creating it if needed."""
        if not self.scratch_dir:
            return None
        path = os.path.abspath(self.scratch_dir)
        os.makedirs(path, exist_ok=True)
        return path


# Global settings instance - loaded once at import time
settings = Settings()
