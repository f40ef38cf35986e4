"""
Page-level scraping blocks shared by every meteociel forecast source.
"""

from meteociel_rain.scraper.fetcher import fetch_page, build_headers
from meteociel_rain.scraper.hourly import aggregate_to_3_hours, WINDOW_END_HOURS
from meteociel_rain.scraper.last_update import parse_last_update
from meteociel_rain.scraper.locator import (
    LocatorStrategy,
    locate_table,
    nested_table_rows,
    parse_markup,
    table_rows,
)
from meteociel_rain.scraper.rows import (
    ColumnLayout,
    DEFAULT_LAYOUT,
    RowKind,
    classify_row,
    format_day,
    infer_forecast_date,
    parse_hour,
    parse_rain_amount,
    readings_to_entries,
    walk_rows,
)

__all__ = [
    "fetch_page",
    "build_headers",
    "aggregate_to_3_hours",
    "WINDOW_END_HOURS",
    "parse_last_update",
    "LocatorStrategy",
    "locate_table",
    "nested_table_rows",
    "parse_markup",
    "table_rows",
    "ColumnLayout",
    "DEFAULT_LAYOUT",
    "RowKind",
    "classify_row",
    "format_day",
    "infer_forecast_date",
    "parse_hour",
    "parse_rain_amount",
    "readings_to_entries",
    "walk_rows",
]
