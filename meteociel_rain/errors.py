"""
Error taxonomy for the scraping pipeline.

Three failure kinds reach callers:
- NETWORK_ERROR: transport failure reaching meteociel.fr (DNS, refused, timeout)
- FETCH_ERROR:   non-2xx response, or anything unexpected during fetch/parse
- PARSE_ERROR:   forecast table not found, or no usable rows in it

Per-row and per-cell oddities never raise; only "zero entries" escalates.
"""

import logging
from enum import Enum
from typing import Iterable, Optional, Tuple

import httpx

logger = logging.getLogger(__name__)


class ScraperErrorType(Enum):
    """Categories of scraper failures."""
    FETCH_ERROR = "FETCH_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"


class ScraperError(Exception):
    """Classified failure of one forecast source."""

    def __init__(
        self,
        error_type: ScraperErrorType,
        message: str,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.type = error_type
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        return f"{self.type.value}: {self.message}"


class ForecastUnavailableError(Exception):
    """Raised when every model failed; names each unavailable model."""

    def __init__(self, models: Iterable[str]):
        self.models: Tuple[str, ...] = tuple(models)
        super().__init__(
            "Unable to fetch rain forecasts: all models are unavailable "
            f"({', '.join(self.models)})"
        )


def classify_exception(exception: BaseException) -> Tuple[ScraperErrorType, str]:
    """
    Categorize an exception raised somewhere in a source pipeline.

    Returns:
        Tuple of (ScraperErrorType, error_message)
    """
    if isinstance(exception, ScraperError):
        return (exception.type, exception.message)

    error_msg = str(exception)[:200]

    if isinstance(exception, httpx.HTTPStatusError):
        status = exception.response.status_code
        return (ScraperErrorType.FETCH_ERROR, f"HTTP {status}: {error_msg}")

    # Timeouts, DNS failures, refused connections, protocol errors
    if isinstance(exception, httpx.TransportError):
        return (ScraperErrorType.NETWORK_ERROR, f"Transport error: {error_msg}")

    if isinstance(exception, (ValueError, AttributeError, IndexError)):
        return (ScraperErrorType.PARSE_ERROR, f"Parse error: {error_msg}")

    return (ScraperErrorType.FETCH_ERROR, f"Unexpected error: {error_msg}")
