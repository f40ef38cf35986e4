"""
Forecast records produced by the scraping pipeline.

Every record is an immutable value created fresh per request. The
``to_dict()`` helpers produce the JSON shape consumed by the front-end
(camelCase keys, absent optional fields omitted).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class WeatherModel(Enum):
    """Numerical weather models published by meteociel.fr."""
    GFS = "GFS"
    WRF = "WRF"
    AROME = "AROME"
    ARPEGE = "ARPEGE"
    ICON_EU = "ICON-EU"

    @property
    def field_name(self) -> str:
        """Attribute holding this model's amount on a MultiModelRainEntry."""
        return self.value.lower().replace("-", "")


# Merge precedence and column order
MODEL_ORDER: Tuple[WeatherModel, ...] = (
    WeatherModel.GFS,
    WeatherModel.WRF,
    WeatherModel.AROME,
    WeatherModel.ARPEGE,
    WeatherModel.ICON_EU,
)


@dataclass(frozen=True)
class HourlyReading:
    """One parsed table row before any 3-hour bucketing."""
    day: str      # raw page label, e.g. "Mar10"
    hour: int     # 0-23, taken verbatim from the page
    amount: float  # mm


@dataclass(frozen=True)
class RainForecastEntry:
    """One 3-hour rainfall observation for one model."""
    day: str          # "Mardi 11"
    hour: str         # "22h" (end of window)
    amount: float     # mm, never negative
    time_range: str   # "19h-22h"
    model: Optional[WeatherModel] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "day": self.day,
            "hour": self.hour,
            "amount": self.amount,
            "timeRange": self.time_range,
        }
        if self.model is not None:
            data["model"] = self.model.value
        return data


@dataclass(frozen=True)
class RainForecast:
    """One model's full result."""
    location: str
    fetched_at: datetime
    entries: Tuple[RainForecastEntry, ...]
    last_update: Optional[str] = None  # "16:12 (run ARPEGE de 12Z)"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "location": self.location,
            "fetchedAt": self.fetched_at.isoformat(),
            "entries": [entry.to_dict() for entry in self.entries],
        }
        if self.last_update is not None:
            data["lastUpdate"] = self.last_update
        return data


@dataclass(frozen=True)
class MultiModelRainEntry:
    """One (day, hour) slot across all models; absent models stay None."""
    day: str
    hour: str
    time_range: str
    gfs: Optional[float] = None
    wrf: Optional[float] = None
    arome: Optional[float] = None
    arpege: Optional[float] = None
    iconeu: Optional[float] = None

    def amount_for(self, model: WeatherModel) -> Optional[float]:
        return getattr(self, model.field_name)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "day": self.day,
            "hour": self.hour,
            "timeRange": self.time_range,
        }
        for model in MODEL_ORDER:
            amount = self.amount_for(model)
            if amount is not None:
                data[model.field_name] = amount
        return data


@dataclass(frozen=True)
class MultiModelForecast:
    """Aggregate record across the five models."""
    location: str
    fetched_at: datetime
    entries: Tuple[MultiModelRainEntry, ...]
    gfs_last_update: Optional[str] = None
    wrf_last_update: Optional[str] = None
    arome_last_update: Optional[str] = None
    arpege_last_update: Optional[str] = None
    iconeu_last_update: Optional[str] = None

    def last_update_for(self, model: WeatherModel) -> Optional[str]:
        return getattr(self, f"{model.field_name}_last_update")

    def available_models(self) -> Tuple[WeatherModel, ...]:
        """Models that contributed at least one entry."""
        return tuple(
            model for model in MODEL_ORDER
            if any(entry.amount_for(model) is not None for entry in self.entries)
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "location": self.location,
            "fetchedAt": self.fetched_at.isoformat(),
            "entries": [entry.to_dict() for entry in self.entries],
        }
        for model in MODEL_ORDER:
            last_update = self.last_update_for(model)
            if last_update is not None:
                data[f"{model.field_name}LastUpdate"] = last_update
        return data


# --- AROME 1h standalone adapter records ---

@dataclass(frozen=True)
class RainPerHour:
    value: float                 # mm
    hour: str                    # ISO 8601, e.g. "2025-08-05T15:00:00+02:00"
    probability: Optional[int] = None  # percentage chance of rain

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"value": self.value, "hour": self.hour}
        if self.probability is not None:
            data["probability"] = self.probability
        return data


@dataclass(frozen=True)
class RainPerHourInformations:
    updated_at: str  # ISO 8601
    data: Tuple[RainPerHour, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "updatedAt": self.updated_at,
            "data": [reading.to_dict() for reading in self.data],
        }
