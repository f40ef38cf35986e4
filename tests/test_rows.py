"""
Tests for the row parser: cell parsing, day inheritance, date inference.

Run with: python -m pytest tests/test_rows.py -v
"""

import logging
from datetime import date

import pytest

from meteociel_rain.errors import ScraperError, ScraperErrorType
from meteociel_rain.scraper.locator import parse_markup, table_rows
from meteociel_rain.scraper.rows import (
    RowKind,
    classify_row,
    day_of_month,
    format_day,
    infer_forecast_date,
    parse_hour,
    parse_rain_amount,
    readings_to_entries,
    time_range_label,
    walk_rows,
)

from conftest import forecast_rows

logger = logging.getLogger(__name__)


def _rows(html_rows: str):
    return table_rows(parse_markup(f"<table>{html_rows}</table>"))


class TestCellParsing:
    """Rain and hour cell text."""

    @pytest.mark.parametrize("text,expected", [
        ("1.4 mm", 1.4),
        ("12 mm", 12.0),
        ("0.3MM", 0.3),
        ("  2.5 mm ", 2.5),
        ("--", 0.0),
        ("", 0.0),
        ("trace", 0.0),
    ])
    def test_parse_rain_amount(self, text, expected):
        logger.info(f"[TEST] parse_rain_amount({text!r})")
        assert parse_rain_amount(text) == expected

    def test_parse_hour(self):
        logger.info("[TEST] Testing hour parsing...")
        assert parse_hour("04:00") == 4
        assert parse_hour("7:00") == 7
        assert parse_hour("23:00") == 23
        assert parse_hour("Heure") is None
        assert parse_hour("") is None

    def test_format_day(self):
        logger.info("[TEST] Testing day label formatting...")
        assert format_day("Mar10") == "Mardi 10"
        assert format_day("Dim1") == "Dimanche 1"
        assert format_day("Lun05") == "Lundi 05"
        assert format_day("Aujourd'hui") == "Aujourd'hui"

    def test_day_of_month(self):
        assert day_of_month("Mardi 10") == 10
        assert day_of_month("Mar10") == 10
        assert day_of_month("Demain") is None
        assert day_of_month("Jour 42") is None

    def test_time_range_wraps_midnight(self):
        logger.info("[TEST] Testing 3h window labels...")
        assert time_range_label(1) == "22h-01h"
        assert time_range_label(4) == "01h-04h"
        assert time_range_label(22) == "19h-22h"
        assert time_range_label(2) == "23h-02h"


class TestDateInference:
    """Day-of-month -> calendar date relative to the scrape day."""

    def test_same_month(self):
        assert infer_forecast_date(12, date(2025, 6, 10)) == date(2025, 6, 12)

    def test_today(self):
        assert infer_forecast_date(10, date(2025, 6, 10)) == date(2025, 6, 10)

    def test_rollover_on_31st(self):
        logger.info("[TEST] Scraping on the 31st, day 01 belongs to next month")
        assert infer_forecast_date(1, date(2025, 7, 31)) == date(2025, 8, 1)

    def test_rollover_across_year(self):
        assert infer_forecast_date(2, date(2025, 12, 30)) == date(2026, 1, 2)

    def test_impossible_date(self):
        assert infer_forecast_date(30, date(2025, 2, 28)) is None

    def test_lookback_keeps_yesterday(self):
        logger.info("[TEST] Day 10 seen just after midnight on the 11th")
        assert infer_forecast_date(10, date(2025, 6, 11)) == date(2025, 7, 10)
        assert infer_forecast_date(10, date(2025, 6, 11), lookback_days=7) == date(2025, 6, 10)

    def test_lookback_reaches_previous_month(self):
        assert infer_forecast_date(30, date(2025, 7, 1), lookback_days=7) == date(2025, 6, 30)
        assert infer_forecast_date(31, date(2026, 1, 2), lookback_days=7) == date(2025, 12, 31)

    def test_lookback_still_rolls_far_days_forward(self):
        assert infer_forecast_date(1, date(2025, 7, 31), lookback_days=7) == date(2025, 8, 1)
        assert infer_forecast_date(12, date(2025, 6, 10), lookback_days=7) == date(2025, 6, 12)


class TestRowWalk:
    """Tagged-row fold over a forecast table."""

    def test_classify_rows(self):
        rows = _rows(forecast_rows([("Mar10", [("01:00", "1.4 mm"), ("04:00", "--")])]))

        first = classify_row(rows[0], has_current_day=False)
        assert first.kind is RowKind.DAY_START
        assert first.day == "Mar10"
        assert first.hour_text == "01:00"
        assert first.rain_text == "1.4 mm"

        second = classify_row(rows[1], has_current_day=True)
        assert second.kind is RowKind.CONTINUATION
        assert second.hour_text == "04:00"
        assert second.rain_text == "--"

    def test_continuation_without_day_is_ignored(self):
        rows = _rows("<tr><td>04:00</td><td>x</td></tr>")
        assert classify_row(rows[0], has_current_day=False).kind is RowKind.IGNORED

    def test_row_below_min_cells_is_ignored(self):
        rows = _rows("<tr><td>04:00</td><td>x</td></tr>")
        assert classify_row(rows[0], has_current_day=True, min_cells=8).kind is RowKind.IGNORED

    def test_continuation_rows_inherit_day(self):
        logger.info("[TEST] Testing day inheritance across continuation rows...")
        rows = _rows(forecast_rows([
            ("Mar10", [("19:00", "--"), ("22:00", "0.2 mm")]),
            ("Mer11", [("01:00", "1.0 mm"), ("04:00", "3.1 mm")]),
        ]))

        readings = walk_rows(rows)

        assert [(r.day, r.hour, r.amount) for r in readings] == [
            ("Mar10", 19, 0.0),
            ("Mar10", 22, 0.2),
            ("Mer11", 1, 1.0),
            ("Mer11", 4, 3.1),
        ]
        logger.info("[TEST] Day inheritance test PASSED")

    def test_header_and_spacer_rows_are_skipped(self):
        html_rows = (
            "<tr><td>Jour</td><td>Heure</td></tr>"
            "<tr></tr>"
            + forecast_rows([("Ven13", [("10:00", "0.7 mm")])])
        )
        readings = walk_rows(_rows(html_rows))
        assert len(readings) == 1
        assert readings[0].day == "Ven13"

    def test_row_with_unreadable_hour_is_skipped(self):
        html_rows = forecast_rows([("Ven13", [("nuit", "0.7 mm"), ("13:00", "0.2 mm")])])
        readings = walk_rows(_rows(html_rows))
        assert [(r.hour, r.amount) for r in readings] == [(13, 0.2)]

    def test_missing_rain_cell_reads_as_zero(self):
        html_rows = '<tr><td rowspan="2">Sam14</td><td>07:00</td></tr>'
        readings = walk_rows(_rows(html_rows))
        assert readings[0].amount == 0.0

    def test_no_rows_raises_parse_error(self):
        logger.info("[TEST] Testing empty table...")
        with pytest.raises(ScraperError) as exc_info:
            walk_rows(_rows("<tr><td>Jour</td></tr>"), label="GFS")
        assert exc_info.value.type is ScraperErrorType.PARSE_ERROR
        assert "GFS" in exc_info.value.message

    def test_readings_to_entries(self):
        rows = _rows(forecast_rows([("Mer11", [("01:00", "1.0 mm"), ("22:00", "--")])]))
        entries = readings_to_entries(walk_rows(rows))

        assert entries[0].day == "Mercredi 11"
        assert entries[0].hour == "01h"
        assert entries[0].time_range == "22h-01h"
        assert entries[0].amount == 1.0
        assert entries[1].hour == "22h"
        assert entries[1].time_range == "19h-22h"
        assert all(entry.model is None for entry in entries)
