"""
AROME 1h adapter: hour-by-hour rain from meteociel's AROME 1h page.

This page has no usable text anchor; the grid sits five tables deep and is
reached by a fixed descent (see ``nested_table_rows``). Its rows are read
from the END of the row because the leading date cell only exists on the
first row of each day:

    row cells:  [date?] [hour @-10] ... [rain @-4] [humidity] [pressure] [sky]

Header rows are painted bgcolor="#aaaaff" and are skipped.

Two views of the same page:
- get_next_24_hours_rain(): raw hourly feed with ISO timestamps
- get_three_hour_forecast(): the hourly feed bucketed into 3h windows, shaped
  like the other models' RainForecast
"""

import logging
import re
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Tuple
from zoneinfo import ZoneInfo

import httpx
from bs4 import BeautifulSoup, Tag

from meteociel_rain.config import Settings
from meteociel_rain.entities import (
    HourlyReading,
    RainForecast,
    RainPerHour,
    RainPerHourInformations,
    WeatherModel,
)
from meteociel_rain.errors import ScraperError, ScraperErrorType
from meteociel_rain.scraper.fetcher import fetch_page
from meteociel_rain.scraper.hourly import aggregate_to_3_hours
from meteociel_rain.scraper.last_update import parse_last_update
from meteociel_rain.scraper.locator import cell_text, nested_table_rows, parse_markup, row_cells
from meteociel_rain.scraper.rows import infer_forecast_date, parse_hour

logger = logging.getLogger(__name__)

AROME_1H_PAGE = "previsions-arome-1h"
HEADER_BGCOLOR = "#aaaaff"

# Offsets counted from the end of the row
RAIN_CELL_FROM_END = 4
HOUR_CELL_FROM_END = 10

UPDATED_AT_RE = re.compile(r"(\d{1,2}):(\d{2})")
DIGITS_RE = re.compile(r"\d+")

WEEKDAY_SHORT = ("Lun", "Mar", "Mer", "Jeu", "Ven", "Sam", "Dim")


def parse_hourly_rain(text: str) -> float:
    """First token of the rain cell: '3.8 mm' -> 3.8, '--' / '' -> 0.0."""
    tokens = text.split()
    if not tokens or tokens[0] == "--":
        return 0.0
    try:
        return float(tokens[0].replace(",", "."))
    except ValueError:
        logger.debug(f"[MeteocielAdapter] Unreadable rain cell {text!r}")
        return 0.0


def parse_updated_at(text: str, now: datetime) -> datetime:
    """
    Page refresh time from the <center> banner.

    The banner only gives HH:MM; a time later than `now` was yesterday's.

    Raises:
        ScraperError: PARSE_ERROR when no time is present
    """
    match = UPDATED_AT_RE.search(text)
    if not match:
        raise ScraperError(
            ScraperErrorType.PARSE_ERROR,
            "No update time found in the AROME 1h page header",
        )
    updated_at = now.replace(
        hour=int(match.group(1)), minute=int(match.group(2)), second=0, microsecond=0
    )
    if updated_at > now:
        updated_at -= timedelta(days=1)
    return updated_at


def day_label(day: date) -> str:
    """Page-style short label, e.g. 2025-08-05 -> 'Mar05'."""
    return f"{WEEKDAY_SHORT[day.weekday()]}{day.day:02d}"


class MeteocielAdapter:
    """
    Hourly AROME rain feed for one station.

    Usage:
        adapter = MeteocielAdapter(load_settings())
        info = await adapter.get_next_24_hours_rain()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.settings = settings or Settings()
        self.client = client
        self.tz = ZoneInfo(self.settings.timezone)
        self._now = now or (lambda: datetime.now(self.tz))

    @property
    def url(self) -> str:
        return self.settings.page_url(AROME_1H_PAGE)

    async def _fetch_markup(self) -> str:
        return await fetch_page(
            self.url,
            client=self.client,
            user_agent=self.settings.user_agent,
            timeout=self.settings.timeout_seconds,
        )

    def _is_header_row(self, row: Tag) -> bool:
        return (row.get("bgcolor") or "").lower() == HEADER_BGCOLOR

    def parse_rows(self, rows: List[Tag], today: date) -> List[Tuple[datetime, float]]:
        """
        Walk the grid rows into (local timestamp, mm) pairs.

        A first cell with a rowspan opens a new day; rows seen before any
        day, or whose hour cannot be read, are skipped.
        """
        readings: List[Tuple[datetime, float]] = []
        current_date: Optional[date] = None

        for row in rows:
            if self._is_header_row(row):
                continue
            cells = row_cells(row)
            if not cells:
                continue

            if cells[0].get("rowspan"):
                digits = DIGITS_RE.search(cells[0].get_text(strip=True))
                if digits:
                    current_date = infer_forecast_date(int(digits.group()), today)
                    if current_date is None:
                        logger.warning(
                            f"[MeteocielAdapter] Day {digits.group()} does not exist "
                            f"relative to {today.isoformat()}, skipping row"
                        )
                        continue

            if current_date is None:
                logger.error("[MeteocielAdapter] No current date found for row, skipping")
                continue

            hour = parse_hour(cell_text(cells, len(cells) - HOUR_CELL_FROM_END))
            if hour is None or hour > 23:
                logger.debug("[MeteocielAdapter] Row without a readable hour, skipping")
                continue

            timestamp = datetime(
                current_date.year, current_date.month, current_date.day, hour, tzinfo=self.tz
            )
            amount = parse_hourly_rain(cell_text(cells, len(cells) - RAIN_CELL_FROM_END))
            readings.append((timestamp, amount))

        return readings

    def _parse_page(self, markup: str, now: datetime) -> Tuple[datetime, List[Tuple[datetime, float]]]:
        soup: BeautifulSoup = parse_markup(markup)

        center = soup.find("center")
        updated_at = parse_updated_at(center.get_text(" ", strip=True) if center else "", now)

        rows = nested_table_rows(soup)
        if not rows:
            raise ScraperError(
                ScraperErrorType.PARSE_ERROR,
                "Unable to find the AROME 1h rain forecast table",
            )

        readings = self.parse_rows(rows, now.date())
        if not readings:
            raise ScraperError(
                ScraperErrorType.PARSE_ERROR,
                "No rain data found in the AROME 1h table. The page layout may have changed.",
            )
        return updated_at, readings

    async def get_next_24_hours_rain(self) -> RainPerHourInformations:
        """
        Hourly rain feed as published.

        Returns:
            RainPerHourInformations with ISO timestamps in the configured zone

        Raises:
            ScraperError: NETWORK_ERROR, FETCH_ERROR or PARSE_ERROR
        """
        logger.info(f"[MeteocielAdapter] Fetching hourly rain from {self.url}")
        markup = await self._fetch_markup()
        updated_at, readings = self._parse_page(markup, self._now())

        logger.info(f"[MeteocielAdapter] {len(readings)} hourly readings, "
                    f"updated at {updated_at.isoformat()}")
        return RainPerHourInformations(
            updated_at=updated_at.isoformat(),
            data=tuple(
                RainPerHour(value=amount, hour=timestamp.isoformat())
                for timestamp, amount in readings
            ),
        )

    async def get_three_hour_forecast(self) -> RainForecast:
        """
        The hourly feed bucketed into the same 3h windows as the other models.

        Raises:
            ScraperError: NETWORK_ERROR, FETCH_ERROR or PARSE_ERROR
        """
        logger.info(f"[MeteocielAdapter] Fetching 3h AROME 1h forecast from {self.url}")
        markup = await self._fetch_markup()
        now = self._now()
        _, readings = self._parse_page(markup, now)

        hourly = [
            HourlyReading(day=day_label(timestamp.date()), hour=timestamp.hour, amount=amount)
            for timestamp, amount in readings
        ]
        entries = aggregate_to_3_hours(hourly)
        return RainForecast(
            location=self.settings.location,
            fetched_at=now,
            entries=tuple(replace(entry, model=WeatherModel.AROME) for entry in entries),
            last_update=parse_last_update(markup),
        )
