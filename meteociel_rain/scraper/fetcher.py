"""
Page fetcher: one uncached GET per forecast page, no retries.
Redirects are followed; the status checked is the final response's.
"""

import logging
import time
from typing import Optional

import httpx

from meteociel_rain.config import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from meteociel_rain.errors import ScraperError, ScraperErrorType

logger = logging.getLogger(__name__)


def build_headers(user_agent: str = DEFAULT_USER_AGENT) -> dict:
    """Request headers: identifying user agent, caches disabled."""
    return {
        "User-Agent": user_agent,
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
    }


async def fetch_page(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> str:
    """
    Fetch the raw markup of a forecast page.

    Args:
        url: Page URL
        client: Shared client; a short-lived one is opened when omitted
        user_agent: Value of the User-Agent header
        timeout: Seconds before the request is abandoned

    Returns:
        Response body as text

    Raises:
        ScraperError: FETCH_ERROR on a non-2xx status,
                      NETWORK_ERROR on transport failure
    """
    start = time.time()
    logger.info(f"[Fetcher] GET {url}")

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as own_client:
                resp = await own_client.get(url, headers=build_headers(user_agent))
        else:
            resp = await client.get(url, headers=build_headers(user_agent), timeout=timeout,
                                    follow_redirects=True)
    except httpx.TransportError as e:
        logger.warning(f"[Fetcher] Transport failure for {url}: {e!r}")
        raise ScraperError(
            ScraperErrorType.NETWORK_ERROR,
            f"Unable to reach {url}. Check your internet connection.",
            e,
        ) from e

    if not resp.is_success:
        logger.warning(f"[Fetcher] HTTP {resp.status_code} for {url}")
        raise ScraperError(
            ScraperErrorType.FETCH_ERROR,
            f"HTTP error {resp.status_code}: {resp.reason_phrase}. "
            "meteociel.fr may be temporarily unavailable.",
        )

    logger.info(f"[Fetcher] {url} fetched in {(time.time() - start) * 1000:.0f}ms "
                f"({len(resp.text)} chars)")
    return resp.text
