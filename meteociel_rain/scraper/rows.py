"""
Row parser for meteociel forecast tables.

A day's first row carries the day label in a cell spanning the following
rows (rowspan > 1), which shifts every other column one step right:

    day-start row:    [Mar10] [01:00] [temp] ... [rain @7] ...
    continuation row:         [04:00] [temp] ... [rain @6] ...

Each row is tagged once (DAY_START / CONTINUATION / IGNORED) and the walk
folds over the rows carrying the current day label.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional

from bs4 import Tag

from meteociel_rain.entities import HourlyReading, RainForecastEntry
from meteociel_rain.errors import ScraperError, ScraperErrorType
from meteociel_rain.scraper.locator import TIME_CELL_RE, cell_text, row_cells

logger = logging.getLogger(__name__)

RAIN_RE = re.compile(r"(\d+\.?\d*)\s*mm", re.IGNORECASE)
HOUR_RE = re.compile(r"^(\d{1,2}):(\d{2})")
SHORT_DAY_RE = re.compile(r"^(Lun|Mar|Mer|Jeu|Ven|Sam|Dim)(\d{1,2})$")
DAY_NUMBER_RE = re.compile(r"(\d{1,2})\s*$")

DAY_NAMES = {
    "Lun": "Lundi",
    "Mar": "Mardi",
    "Mer": "Mercredi",
    "Jeu": "Jeudi",
    "Ven": "Vendredi",
    "Sam": "Samedi",
    "Dim": "Dimanche",
}


@dataclass(frozen=True)
class ColumnLayout:
    """Cell offsets of the hour and rain columns for both row shapes."""
    day_start_hour: int = 1
    day_start_rain: int = 7
    continuation_hour: int = 0
    continuation_rain: int = 6


DEFAULT_LAYOUT = ColumnLayout()


class RowKind(Enum):
    DAY_START = "day_start"
    CONTINUATION = "continuation"
    IGNORED = "ignored"


class ClassifiedRow(NamedTuple):
    kind: RowKind
    day: Optional[str] = None
    hour_text: str = ""
    rain_text: str = ""


IGNORED_ROW = ClassifiedRow(RowKind.IGNORED)


def parse_rain_amount(text: str) -> float:
    """'--' or '' -> 0.0; '1.4 mm' -> 1.4; anything else -> 0.0."""
    text = text.strip()
    if text in ("--", ""):
        return 0.0
    match = RAIN_RE.search(text)
    if match:
        return float(match.group(1))
    return 0.0


def parse_hour(text: str) -> Optional[int]:
    """Hour from a leading 'H:MM' / 'HH:MM', or None."""
    match = HOUR_RE.match(text.strip())
    if not match:
        return None
    return int(match.group(1))


def format_day(short_day: str) -> str:
    """'Mar10' -> 'Mardi 10'; unrecognized labels pass through."""
    match = SHORT_DAY_RE.match(short_day)
    if match:
        return f"{DAY_NAMES[match.group(1)]} {match.group(2)}"
    return short_day


def day_of_month(label: str) -> Optional[int]:
    """Trailing day number of a raw ('Mar10') or formatted ('Mardi 10') label."""
    match = DAY_NUMBER_RE.search(label)
    if not match:
        return None
    day = int(match.group(1))
    return day if 1 <= day <= 31 else None


def _month_date(year: int, month: int, day: int) -> Optional[date]:
    """date(year, month, day) with month overflowing into the next/previous year."""
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    try:
        return date(year, month, day)
    except ValueError:
        return None


def infer_forecast_date(day: int, today: date, lookback_days: int = 0) -> Optional[date]:
    """
    Calendar date of a day-of-month seen on a page scraped on `today`.

    A day number below today's belongs to next month (scraping on the 31st,
    day 01 is the 1st of next month). With `lookback_days`, a day up to that
    many days in the past is kept in the past instead, so a page still showing
    last evening's slots (day 10 scraped just after midnight on the 11th, or
    day 30 scraped on the 2nd) keeps them in the past. Returns None when the day
    does not exist in the chosen month.
    """
    this_month = _month_date(today.year, today.month, day)

    if day >= today.day:
        if lookback_days:
            previous = _month_date(today.year, today.month - 1, day)
            if previous is not None and 0 < (today - previous).days <= lookback_days:
                return previous
        return this_month

    if lookback_days and this_month is not None and (today - this_month).days <= lookback_days:
        return this_month
    return _month_date(today.year, today.month + 1, day)


def hour_label(hour: int) -> str:
    return f"{hour:02d}h"


def time_range_label(end_hour: int) -> str:
    """3-hour window label ending at end_hour, e.g. 1 -> '22h-01h'."""
    return f"{(end_hour - 3) % 24:02d}h-{end_hour:02d}h"


def _rowspan(cell: Tag) -> int:
    try:
        return int(cell.get("rowspan", "1"))
    except (TypeError, ValueError):
        return 1


def classify_row(
    row: Tag,
    has_current_day: bool,
    layout: ColumnLayout = DEFAULT_LAYOUT,
    min_cells: int = 1,
) -> ClassifiedRow:
    """Tag a table row once, before any state is touched."""
    cells = row_cells(row)
    if not cells or len(cells) < min_cells:
        return IGNORED_ROW

    first = cell_text(cells, 0)
    if _rowspan(cells[0]) > 1:
        return ClassifiedRow(
            RowKind.DAY_START,
            day=first,
            hour_text=cell_text(cells, layout.day_start_hour),
            rain_text=cell_text(cells, layout.day_start_rain),
        )

    if has_current_day and TIME_CELL_RE.match(first):
        return ClassifiedRow(
            RowKind.CONTINUATION,
            hour_text=cell_text(cells, layout.continuation_hour),
            rain_text=cell_text(cells, layout.continuation_rain),
        )

    return IGNORED_ROW


def walk_rows(
    rows: Iterable[Tag],
    layout: ColumnLayout = DEFAULT_LAYOUT,
    min_cells: int = 1,
    label: str = "forecast",
) -> List[HourlyReading]:
    """
    Fold the rows into readings, carrying the current day label.

    Raises:
        ScraperError: PARSE_ERROR when no reading could be extracted
    """
    readings: List[HourlyReading] = []
    current_day: Optional[str] = None
    skipped = 0

    for row in rows:
        classified = classify_row(row, current_day is not None, layout, min_cells)

        if classified.kind is RowKind.IGNORED:
            continue
        if classified.kind is RowKind.DAY_START:
            current_day = classified.day

        hour = parse_hour(classified.hour_text)
        if hour is None:
            skipped += 1
            continue

        readings.append(HourlyReading(
            day=current_day,
            hour=hour,
            amount=parse_rain_amount(classified.rain_text),
        ))

    if skipped:
        logger.debug(f"[RowParser] {label}: skipped {skipped} row(s) without a usable hour")

    if not readings:
        raise ScraperError(
            ScraperErrorType.PARSE_ERROR,
            f"No rain data found in the {label} table. The page layout may have changed.",
        )

    logger.debug(f"[RowParser] {label}: {len(readings)} readings")
    return readings


def readings_to_entries(readings: Iterable[HourlyReading]) -> List[RainForecastEntry]:
    """Readings of a 3-hour page, where the hour shown ends its window."""
    return [
        RainForecastEntry(
            day=format_day(reading.day),
            hour=hour_label(reading.hour),
            amount=reading.amount,
            time_range=time_range_label(reading.hour),
        )
        for reading in readings
    ]
