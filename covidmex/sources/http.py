"""
HTTP access for report sources.

Every request identifies the package (name, version and Python version)
so publishers can attribute the traffic. Transport failures are raised as
FetchError and never retried here; retrying happens at date granularity in
the source adapters.
"""
import os
import sys
import tempfile
from typing import Dict, Optional
from urllib.parse import urlparse

import requests
from tqdm import tqdm

from covidmex import __version__
from covidmex.config.settings import settings
from covidmex.core.errors import FetchError
from covidmex.models.request import FetchResult
from covidmex.utils.logging import get_logger

logger = get_logger("sources.http")

BLOCK_SIZE = 8192  # 8 KB


def request_headers() -> Dict[str, str]:
    """Identifying headers sent with every request."""
    return {
        "User-Agent": "Python Package (covidmex)",
        "X-Package-Version": __version__,
        "X-Python-Version": sys.version,
    }


def url_extension(url: str) -> str:
    """Return the file extension of a URL path ('.csv', '.xlsx', ...), lowercased."""
    return os.path.splitext(urlparse(url).path)[1].lower()


def _get(url: str, stream: bool = False) -> requests.Response:
    logger.debug(f"GET {url} (headers: {request_headers()})")
    try:
        return requests.get(
            url,
            headers=request_headers(),
            stream=stream,
            timeout=settings.request_timeout,
        )
    except requests.RequestException as e:
        logger.error(f"Network error requesting {url}: {e}")
        raise FetchError(f"Network error requesting {url}: {e}") from e


def get_page(url: str) -> str:
    """
    Fetch an HTML page.

    Args:
        url: Page URL

    Returns:
        The page text

    Raises:
        FetchError: On transport failure or an HTTP error status
    """
    logger.info(f"Accessing listing page: {url}")
    response = _get(url)
    try:
        response.raise_for_status()
    except requests.HTTPError as e:
        logger.error(f"Listing page {url} responded with status code {response.status_code}")
        raise FetchError(
            f"The listing page is not available (server responded with status code {response.status_code})"
        ) from e
    return response.text


def download(url: str, prefix: str = "covid19Mex_") -> FetchResult:
    """
    Download a report file into a scratch file.

    The body is streamed to a new temporary file named after the URL's
    extension. Nothing is written when the server answers with an error
    status; the status is reported back and the caller decides what to do.

    Args:
        url: File URL
        prefix: Prefix of the scratch file name

    Returns:
        FetchResult with the status code and the scratch file path

    Raises:
        FetchError: On transport failure (including a broken stream)
    """
    logger.info(f"Downloading {url}")
    response = _get(url, stream=True)
    try:
        if response.status_code > 399:
            logger.debug(f"{url} responded with status code {response.status_code}")
            return FetchResult(url=url, status_code=response.status_code)

        with tempfile.NamedTemporaryFile(
            prefix=prefix,
            suffix=url_extension(url),
            dir=settings.scratch_path,
            delete=False,
        ) as f:
            path = f.name
            total_size = int(response.headers.get("content-length", 0) or 0)
            try:
                with tqdm(
                    desc=os.path.basename(urlparse(url).path),
                    total=total_size,
                    unit="iB",
                    unit_scale=True,
                    unit_divisor=1024,
                    disable=not settings.show_progress,
                ) as progress_bar:
                    for chunk in response.iter_content(BLOCK_SIZE):
                        progress_bar.update(f.write(chunk))
            except requests.RequestException as e:
                f.close()
                os.remove(path)
                logger.error(f"Download of {url} was interrupted: {e}")
                raise FetchError(f"Download of {url} was interrupted: {e}") from e

        logger.debug(f"Saved {url} to {path}")
        return FetchResult(url=url, status_code=response.status_code, path=path)
    finally:
        response.close()
