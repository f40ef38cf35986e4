"""
Meteociel.fr rain forecast provider for the five numerical models.

Every model page goes through the same pipeline:

    fetch -> locate table -> walk rows -> (hourly -> 3h) -> last update

What differs between pages is captured in a ModelConfig record:
- GFS, WRF, AROME publish 3-hour steps and carry a "Pluie sur 3h" header,
  so their table is found by that text anchor.
- ARPEGE (1h page) and ICON-EU publish hourly steps; their table is found
  structurally (a time in the second cell of a row) and the readings are
  bucketed into 3-hour windows. ICON-EU rows shorter than 8 cells are noise.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Dict, List, Optional
from zoneinfo import ZoneInfo

import httpx

from meteociel_rain.config import Settings
from meteociel_rain.entities import MODEL_ORDER, RainForecast, RainForecastEntry, WeatherModel
from meteociel_rain.errors import ScraperError, ScraperErrorType
from meteociel_rain.scraper.fetcher import fetch_page
from meteociel_rain.scraper.hourly import aggregate_to_3_hours
from meteociel_rain.scraper.last_update import parse_last_update
from meteociel_rain.scraper.locator import (
    LocatorStrategy,
    locate_table,
    parse_markup,
    table_rows,
)
from meteociel_rain.scraper.rows import (
    ColumnLayout,
    DEFAULT_LAYOUT,
    readings_to_entries,
    walk_rows,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelConfig:
    """Everything that distinguishes one model page from another."""
    model: WeatherModel
    page: str                     # URL path segment, e.g. "previsions-wrf"
    strategy: LocatorStrategy
    granularity_hours: int = 3    # N of the "Pluie sur Nh" header
    layout: ColumnLayout = DEFAULT_LAYOUT
    min_cells: int = 1
    hourly: bool = False          # readings need 3-hour bucketing


MODEL_CONFIGS: Dict[WeatherModel, ModelConfig] = {
    WeatherModel.GFS: ModelConfig(
        model=WeatherModel.GFS,
        page="previsions",
        strategy=LocatorStrategy.TEXT_ANCHOR,
    ),
    WeatherModel.WRF: ModelConfig(
        model=WeatherModel.WRF,
        page="previsions-wrf",
        strategy=LocatorStrategy.TEXT_ANCHOR,
    ),
    WeatherModel.AROME: ModelConfig(
        model=WeatherModel.AROME,
        page="previsions-arome",
        strategy=LocatorStrategy.TEXT_ANCHOR,
    ),
    WeatherModel.ARPEGE: ModelConfig(
        model=WeatherModel.ARPEGE,
        page="previsions-arpege-1h",
        strategy=LocatorStrategy.STRUCTURAL,
        granularity_hours=1,
        hourly=True,
    ),
    WeatherModel.ICON_EU: ModelConfig(
        model=WeatherModel.ICON_EU,
        page="previsions-iconeu",
        strategy=LocatorStrategy.STRUCTURAL,
        granularity_hours=1,
        min_cells=8,
        hourly=True,
    ),
}


class MeteocielProvider:
    """
    Rain forecast for one model, scraped from its meteociel.fr page.

    Usage:
        provider = MeteocielProvider(MODEL_CONFIGS[WeatherModel.GFS])
        forecast = await provider.fetch_forecast()
    """

    def __init__(
        self,
        config: ModelConfig,
        settings: Optional[Settings] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.config = config
        self.settings = settings or Settings()
        self._now = now or (lambda: datetime.now(ZoneInfo(self.settings.timezone)))
        self._tag = f"[MeteocielProvider {config.model.value}]"

    @property
    def model(self) -> WeatherModel:
        return self.config.model

    @property
    def url(self) -> str:
        return self.settings.page_url(self.config.page)

    def parse(self, markup: str, fetched_at: datetime) -> RainForecast:
        """
        Turn a fetched page into a RainForecast tagged with this model.

        Raises:
            ScraperError: PARSE_ERROR when the table is missing or empty
        """
        label = self.model.value
        soup = parse_markup(markup)
        table = locate_table(soup, self.config.strategy, self.config.granularity_hours, label)
        readings = walk_rows(table_rows(table), self.config.layout, self.config.min_cells, label)

        if self.config.hourly:
            entries: List[RainForecastEntry] = aggregate_to_3_hours(readings)
        else:
            entries = readings_to_entries(readings)

        if not entries:
            raise ScraperError(
                ScraperErrorType.PARSE_ERROR,
                f"No rain data found in the {label} table after aggregation",
            )

        return RainForecast(
            location=self.settings.location,
            fetched_at=fetched_at,
            entries=tuple(replace(entry, model=self.model) for entry in entries),
            last_update=parse_last_update(markup),
        )

    async def fetch_forecast(self, client: Optional[httpx.AsyncClient] = None) -> RainForecast:
        """
        Fetch and parse this model's forecast page.

        Args:
            client: Shared httpx client (optional)

        Returns:
            RainForecast with every entry tagged with the model

        Raises:
            ScraperError: NETWORK_ERROR, FETCH_ERROR or PARSE_ERROR
        """
        logger.info(f"{self._tag} Fetching {self.url}")

        try:
            markup = await fetch_page(
                self.url,
                client=client,
                user_agent=self.settings.user_agent,
                timeout=self.settings.timeout_seconds,
            )
            forecast = self.parse(markup, self._now())
        except ScraperError as e:
            logger.warning(f"{self._tag} {e}")
            raise
        except Exception as e:
            logger.error(f"{self._tag} Unexpected error: {e}", exc_info=True)
            raise ScraperError(
                ScraperErrorType.FETCH_ERROR,
                f"Unexpected error while fetching {self.model.value} forecast: {e}",
                e,
            ) from e

        logger.info(
            f"{self._tag} {len(forecast.entries)} entries"
            f" (last update: {forecast.last_update or 'unknown'})"
        )
        return forecast


def build_providers(
    settings: Optional[Settings] = None,
    now: Optional[Callable[[], datetime]] = None,
) -> List[MeteocielProvider]:
    """One provider per model, in merge order."""
    return [MeteocielProvider(MODEL_CONFIGS[model], settings, now) for model in MODEL_ORDER]
