"""
Runtime settings, read from the environment.

The entry point calls ``load_dotenv()`` first, so a ``.env`` file next to
``main.py`` works as well as real environment variables.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.meteociel.fr"
DEFAULT_STATION_PATH = "12368/la_bouexiere.htm"
DEFAULT_LOCATION = "La Bouëxière"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (compatible; WeatherAggregator/1.0; +https://github.com/your-repo)"
)
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_TIMEZONE = "Europe/Paris"


@dataclass(frozen=True)
class Settings:
    """Where to scrape and how to identify ourselves."""
    base_url: str = DEFAULT_BASE_URL
    station_path: str = DEFAULT_STATION_PATH
    location: str = DEFAULT_LOCATION
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    timezone: str = DEFAULT_TIMEZONE

    def page_url(self, page: str) -> str:
        """Build the URL of a forecast page, e.g. page='previsions-wrf'."""
        return f"{self.base_url.rstrip('/')}/{page.strip('/')}/{self.station_path.lstrip('/')}"


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"[config] {name}={raw!r} is not a number, using {default}")
        return default
    if value <= 0:
        logger.warning(f"[config] {name}={raw!r} must be positive, using {default}")
        return default
    return value


def load_settings() -> Settings:
    """Build Settings from METEOCIEL_* environment variables."""
    settings = Settings(
        base_url=os.getenv("METEOCIEL_BASE_URL", DEFAULT_BASE_URL),
        station_path=os.getenv("METEOCIEL_STATION_PATH", DEFAULT_STATION_PATH),
        location=os.getenv("METEOCIEL_LOCATION", DEFAULT_LOCATION),
        user_agent=os.getenv("METEOCIEL_USER_AGENT", DEFAULT_USER_AGENT),
        timeout_seconds=_float_from_env("METEOCIEL_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
        timezone=os.getenv("METEOCIEL_TIMEZONE", DEFAULT_TIMEZONE),
    )
    logger.debug(f"[config] Loaded settings: {settings}")
    return settings
