"""
Hourly -> 3-hour aggregation for models published hour by hour
(ARPEGE 1h, ICON-EU, AROME 1h).

Windows end at 01h, 04h, 07h, 10h, 13h, 16h, 19h and 22h so they line up with
the 3-hour models (GFS, WRF, AROME). The 22h-01h window crosses midnight:
its 23h reading comes from the previous day in page order.

A window is the sum of whichever of its three hours are present; missing
hours are not zero-filled, and a window with no hour at all is omitted.
Sums are rounded to 2 decimals (0.3 + 0.2 + 0.1 reads 0.6, not
0.6000000000000001); amounts on the page carry at most one decimal.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from meteociel_rain.entities import HourlyReading, RainForecastEntry
from meteociel_rain.scraper.rows import format_day, hour_label, time_range_label

logger = logging.getLogger(__name__)

WINDOW_END_HOURS: Tuple[int, ...] = (1, 4, 7, 10, 13, 16, 19, 22)


def aggregate_to_3_hours(readings: Iterable[HourlyReading]) -> List[RainForecastEntry]:
    """Bucket hourly readings into fixed 3-hour windows, day by day."""
    lookup: Dict[Tuple[str, int], float] = {}
    days: List[str] = []
    for reading in readings:
        if reading.day not in days:
            days.append(reading.day)
        lookup[(reading.day, reading.hour)] = reading.amount

    entries: List[RainForecastEntry] = []
    for index, day in enumerate(days):
        prev_day: Optional[str] = days[index - 1] if index > 0 else None

        for end_hour in WINDOW_END_HOURS:
            total = 0.0
            has_data = False

            for hour in (end_hour - 2, end_hour - 1, end_hour):
                source_day = day
                if hour < 0:
                    # 23h of the previous day
                    if prev_day is None:
                        continue
                    hour += 24
                    source_day = prev_day

                amount = lookup.get((source_day, hour))
                if amount is not None:
                    total += amount
                    has_data = True

            if has_data:
                entries.append(RainForecastEntry(
                    day=format_day(day),
                    hour=hour_label(end_hour),
                    amount=round(total, 2),
                    time_range=time_range_label(end_hour),
                ))

    logger.debug(f"[HourlyAggregator] {len(lookup)} hourly readings -> {len(entries)} windows")
    return entries
