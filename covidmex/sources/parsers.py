"""
Loading of downloaded report files.

Files are read whole into a pandas DataFrame; a file that cannot be read
raises ReportParseError and partial parses are not attempted.
"""
import os
import zipfile
from typing import Optional

import pandas as pd

from covidmex.core.errors import ReportParseError
from covidmex.utils.logging import get_logger

logger = get_logger("sources.parsers")

CSV_EXTENSIONS = (".csv",)
SPREADSHEET_EXTENSIONS = (".xlsx", ".xls")


def read_table(path: str, encoding: Optional[str] = None) -> pd.DataFrame:
    """
    Read a CSV or spreadsheet file into a DataFrame.

    Column types are inferred from the content.

    Args:
        path: Path of the file; its extension selects the reader
        encoding: Text encoding for CSV files (default: pandas' utf-8)

    Returns:
        The file content as a DataFrame

    Raises:
        ReportParseError: If the extension is unknown or the content is malformed
    """
    extension = os.path.splitext(path)[1].lower()
    logger.debug(f"Reading {path}")

    try:
        if extension in CSV_EXTENSIONS:
            df = pd.read_csv(path, encoding=encoding, low_memory=False)
        elif extension in SPREADSHEET_EXTENSIONS:
            df = pd.read_excel(path, engine="openpyxl" if extension == ".xlsx" else None)
        else:
            raise ReportParseError(f"Unknown report file type '{extension}' ({path})")
    except ReportParseError:
        raise
    except (ValueError, OSError, zipfile.BadZipFile, pd.errors.ParserError) as e:
        # pandas raises ValueError subclasses (EmptyDataError, UnicodeDecodeError)
        # and openpyxl a BadZipFile for unreadable spreadsheets
        logger.error(f"Could not read {path}: {e}")
        raise ReportParseError(f"Could not read report file {path}: {e}") from e

    logger.info(f"Read {len(df)} rows with {len(df.columns)} columns")
    return df


def extract_csv(archive_path: str, target_dir: str) -> str:
    """
    Extract a ZIP archive and locate its CSV member.

    Args:
        archive_path: Path of the downloaded archive
        target_dir: Directory to extract into

    Returns:
        Path of the extracted CSV file (the first one if there are several)

    Raises:
        ReportParseError: If the archive is corrupt or holds no CSV file
    """
    logger.info(f"Unzipping {archive_path}")
    try:
        with zipfile.ZipFile(archive_path) as archive:
            members = [m for m in archive.namelist() if m.lower().endswith(".csv")]
            if not members:
                raise ReportParseError(f"The archive {archive_path} holds no CSV file")
            if len(members) > 1:
                logger.warning(f"The archive holds {len(members)} CSV files, using {members[0]}")
            extracted = archive.extract(members[0], path=target_dir)
    except (zipfile.BadZipFile, OSError) as e:
        logger.error(f"Could not unzip {archive_path}: {e}")
        raise ReportParseError(
            "An error occurred when unzipping the data file. Try again in a few seconds, maybe server is busy."
        ) from e

    logger.debug(f"Extracted {extracted}")
    return extracted
