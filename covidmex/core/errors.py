"""
Errors and warnings raised by covidmex.

Errors abort a call with no partial result. Warnings are emitted through
the ``warnings`` module and never stop a call that can still return data.
"""
import datetime
from typing import Optional


class CovidMexError(Exception):
    """Base class for every covidmex error."""


class InvalidRequestError(CovidMexError, ValueError):
    """Bad parameter or unknown scope/source/case type combination."""


class ReportNotAvailable(CovidMexError):
    """No report was found for a given date.

    Raised per attempt by the source adapters; it is what makes the date
    fallback step one day back.
    """

    def __init__(self, date: Optional[datetime.date], status_code: Optional[int] = None, message: str = ""):
        self.date = date
        self.status_code = status_code
        if not message:
            message = f"The specified date ({date}) is not available."
            if status_code is not None:
                message += f" The server responded with status code {status_code}."
            else:
                message += " No file matches the pattern."
        super().__init__(message)


class ReportUnavailableError(ReportNotAvailable):
    """No report could be retrieved after the last allowed attempt."""


class FetchError(CovidMexError):
    """Network failure or unexpected listing page layout."""


class ReportParseError(CovidMexError):
    """Downloaded file could not be read into a table."""


class NormalizationError(CovidMexError):
    """A table could not be cleaned."""


class SchemaMismatchError(NormalizationError):
    """The table does not have the columns a schema mapping expects."""


class CovidMexWarning(UserWarning):
    """Base class for covidmex warnings."""


class DateFallbackWarning(CovidMexWarning):
    """The requested date was unavailable and an earlier date is tried."""


class NormalizationWarning(CovidMexWarning):
    """Cleaning failed and the table is returned as-is."""


class DeprecatedSourceWarning(CovidMexWarning, FutureWarning):
    """The source stopped updating and will be removed."""
