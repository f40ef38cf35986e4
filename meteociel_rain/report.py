"""
Console presentation of rain forecasts (French labels, colorama colors).

Layout of the multi-model table, one block per day:

    Mardi 11
    Période (3h)   AROME      WRF        ICON-EU    ARPEGE     GFS
    19h-22h        0.4 mm     -          1.2 mm     Aucune     0.9 mm
    Total          0.4 mm     -          1.2 mm     0.0 mm     0.9 mm

Finer-mesh models come first. Values are colored by rain intensity; a
model with no data is shown as '-' and announced above the table.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from colorama import Fore, Style

from meteociel_rain.entities import (
    MultiModelForecast,
    MultiModelRainEntry,
    RainForecast,
    RainPerHourInformations,
    WeatherModel,
)

logger = logging.getLogger(__name__)

DISPLAY_ORDER: Tuple[WeatherModel, ...] = (
    WeatherModel.AROME,
    WeatherModel.WRF,
    WeatherModel.ICON_EU,
    WeatherModel.ARPEGE,
    WeatherModel.GFS,
)

FRENCH_WEEKDAYS = ("lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche")
FRENCH_MONTHS = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)

MISSING = "-"
COLUMN_WIDTH = 11


class RainIntensity(Enum):
    """Rain buckets with their console color and spreadsheet fill (RGB hex)."""
    NONE = ("none", "FFFFFF")
    LIGHT = ("light", "EFF6FF")
    MODERATE = ("moderate", "DBEAFE")
    HEAVY = ("heavy", "BFDBFE")
    EXTREME = ("extreme", "93C5FD")

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def fill_color(self) -> str:
        return self.value[1]

    @property
    def console_color(self) -> str:
        return {
            RainIntensity.NONE: Style.DIM,
            RainIntensity.LIGHT: Fore.CYAN,
            RainIntensity.MODERATE: Fore.BLUE,
            RainIntensity.HEAVY: Fore.BLUE + Style.BRIGHT,
            RainIntensity.EXTREME: Fore.MAGENTA + Style.BRIGHT,
        }[self]


def rain_intensity(mm: float) -> RainIntensity:
    if mm <= 0:
        return RainIntensity.NONE
    if mm < 1:
        return RainIntensity.LIGHT
    if mm < 5:
        return RainIntensity.MODERATE
    if mm < 10:
        return RainIntensity.HEAVY
    return RainIntensity.EXTREME


def format_rain_amount(mm: float) -> str:
    """0 -> 'Aucune', below 0.1 -> '< 0.1 mm', else 'x.x mm'."""
    if mm == 0:
        return "Aucune"
    if mm < 0.1:
        return "< 0.1 mm"
    return f"{mm:.1f} mm"


def format_optional_rain(mm: Optional[float]) -> str:
    return MISSING if mm is None else format_rain_amount(mm)


def format_fetched_at(dt: datetime) -> str:
    """French long date, e.g. 'lundi 10 février à 14:30'."""
    return (
        f"{FRENCH_WEEKDAYS[dt.weekday()]} {dt.day} {FRENCH_MONTHS[dt.month - 1]}"
        f" à {dt.hour:02d}:{dt.minute:02d}"
    )


def unavailable_notice(model: WeatherModel) -> str:
    return f"Les données du modèle {model.value} sont temporairement indisponibles (modèle indisponible)."


def group_by_day(entries: Sequence[MultiModelRainEntry]) -> Dict[str, List[MultiModelRainEntry]]:
    """Entries per day label, days in first-seen order."""
    grouped: Dict[str, List[MultiModelRainEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.day, []).append(entry)
    return grouped


def day_totals(entries: Sequence[MultiModelRainEntry], models: Sequence[WeatherModel]) -> Dict[WeatherModel, float]:
    """Per-model sum over a day; missing slots count as 0."""
    return {
        model: round(sum(entry.amount_for(model) or 0.0 for entry in entries), 2)
        for model in models
    }


def _colored(mm: Optional[float], use_color: bool) -> str:
    text = format_optional_rain(mm).ljust(COLUMN_WIDTH)
    if not use_color or mm is None:
        return text
    return f"{rain_intensity(mm).console_color}{text}{Style.RESET_ALL}"


def render_multi_model(forecast: MultiModelForecast, use_color: bool = True) -> str:
    """Full comparison table as printable text."""
    available = set(forecast.available_models())
    lines: List[str] = []

    title = f"Prévisions de pluie - {forecast.location}"
    lines.append(f"{Fore.CYAN}{title}{Style.RESET_ALL}" if use_color else title)
    lines.append(f"Mis à jour {format_fetched_at(forecast.fetched_at)}")

    for model in DISPLAY_ORDER:
        last_update = forecast.last_update_for(model)
        if last_update:
            lines.append(f"  {model.value}: {last_update}")

    for model in DISPLAY_ORDER:
        if model not in available:
            notice = unavailable_notice(model)
            lines.append(f"{Fore.YELLOW}! {notice}{Style.RESET_ALL}" if use_color else f"! {notice}")

    header = "Période (3h)".ljust(14) + "".join(m.value.ljust(COLUMN_WIDTH) for m in DISPLAY_ORDER)

    for day, entries in group_by_day(forecast.entries).items():
        lines.append("")
        lines.append(f"{Style.BRIGHT}{day}{Style.RESET_ALL}" if use_color else day)
        lines.append(header)
        for entry in entries:
            lines.append(
                entry.time_range.ljust(14)
                + "".join(_colored(entry.amount_for(m), use_color) for m in DISPLAY_ORDER)
            )
        totals = day_totals(entries, DISPLAY_ORDER)
        lines.append(
            "Total".ljust(14)
            + "".join(
                (f"{totals[m]:.1f} mm" if m in available else MISSING).ljust(COLUMN_WIDTH)
                for m in DISPLAY_ORDER
            )
        )

    return "\n".join(lines)


def render_single_model(forecast: RainForecast, use_color: bool = True) -> str:
    model = forecast.entries[0].model.value if forecast.entries and forecast.entries[0].model else ""
    lines = [f"Prévisions de pluie {model} - {forecast.location}".rstrip(),
             f"Mis à jour {format_fetched_at(forecast.fetched_at)}"]
    if forecast.last_update:
        lines.append(f"  {forecast.last_update}")

    current_day = None
    for entry in forecast.entries:
        if entry.day != current_day:
            current_day = entry.day
            lines.append("")
            lines.append(f"{Style.BRIGHT}{current_day}{Style.RESET_ALL}" if use_color else current_day)
        lines.append(entry.time_range.ljust(14) + _colored(entry.amount, use_color))
    return "\n".join(lines)


def render_hourly(info: RainPerHourInformations, location: str, use_color: bool = True) -> str:
    lines = [f"Pluie heure par heure (AROME 1h) - {location}",
             f"Réactualisé : {info.updated_at}"]
    for reading in info.data:
        lines.append(reading.hour.ljust(28) + _colored(reading.value, use_color))
    return "\n".join(lines)
