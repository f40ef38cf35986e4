"""
Cross-model aggregator.

Runs the five model pipelines concurrently and merges their 3-hour windows
into one row per (day, hour) slot:

    GFS, WRF, AROME, ARPEGE, ICON-EU
        -> gather (settle all) -> outcomes -> merge -> sort -> MultiModelForecast

A failed model is logged and contributes nothing. Only when every model
failed does the caller get an error (ForecastUnavailableError).

Merge rules:
- models are merged in fixed order GFS, WRF, AROME, ARPEGE, ICON-EU
- the first model to produce a slot creates it; later models set their field
- a model meeting a slot it already filled overwrites only its own field
"""

import asyncio
import logging
import re
import time
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

import httpx

from meteociel_rain.config import Settings
from meteociel_rain.entities import (
    MODEL_ORDER,
    MultiModelForecast,
    MultiModelRainEntry,
    RainForecast,
    WeatherModel,
)
from meteociel_rain.errors import ForecastUnavailableError, ScraperErrorType, classify_exception
from meteociel_rain.providers.meteociel import MODEL_CONFIGS, MeteocielProvider, build_providers
from meteociel_rain.scraper.rows import day_of_month, infer_forecast_date

logger = logging.getLogger(__name__)

HOUR_LABEL_RE = re.compile(r"^(\d{1,2})h$")

# Day labels up to this many days old are dated in the past, not next month
PAST_DAY_LOOKBACK = 7


@dataclass
class ModelOutcome:
    """Settled result of one model pipeline."""
    model: WeatherModel
    forecast: Optional[RainForecast] = None
    error_type: Optional[ScraperErrorType] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.forecast is not None

    @property
    def status_label(self) -> str:
        if self.ok:
            return f"OK ({len(self.forecast.entries)} entries)"
        return f"{self.error_type.value if self.error_type else 'ERROR'}: {self.error_message}"


def _slot_key(day: str, hour: str) -> str:
    return f"{day}-{hour}"


def merge_forecasts(forecasts: Sequence[RainForecast]) -> List[MultiModelRainEntry]:
    """
    Merge per-model forecasts into per-slot entries.

    Forecasts are expected in merge order; each entry carries its model tag.
    Entries without a model tag are ignored.

    Returns:
        Entries in first-seen slot order (unsorted)
    """
    merged: Dict[str, MultiModelRainEntry] = {}

    for forecast in forecasts:
        for entry in forecast.entries:
            if entry.model is None:
                logger.debug(f"[Aggregator] Untagged entry {entry.day} {entry.hour} ignored")
                continue

            key = _slot_key(entry.day, entry.hour)
            field_name = entry.model.field_name
            existing = merged.get(key)

            if existing is None:
                merged[key] = MultiModelRainEntry(
                    day=entry.day,
                    hour=entry.hour,
                    time_range=entry.time_range,
                    **{field_name: entry.amount},
                )
            else:
                merged[key] = replace(existing, **{field_name: entry.amount})

    return list(merged.values())


def _hour_value(label: str) -> int:
    match = HOUR_LABEL_RE.match(label)
    return int(match.group(1)) if match else 0


def sort_chronologically(
    entries: Sequence[MultiModelRainEntry],
    reference: date,
) -> List[MultiModelRainEntry]:
    """
    Order entries by calendar date, then by window end hour.

    The date is inferred from the day label's day-of-month relative to
    `reference`: a day up to PAST_DAY_LOOKBACK days behind stays in the past,
    a day further below reference's day belongs to next month.
    Entries whose date cannot be inferred keep their order, after the rest.
    """
    def sort_key(entry: MultiModelRainEntry) -> Tuple:
        day = day_of_month(entry.day)
        forecast_date = (infer_forecast_date(day, reference, PAST_DAY_LOOKBACK)
                         if day is not None else None)
        if forecast_date is None:
            return (1,)
        return (0, forecast_date, _hour_value(entry.hour))

    return sorted(entries, key=sort_key)


async def _settle(
    providers: Sequence[MeteocielProvider],
    client: httpx.AsyncClient,
) -> List[ModelOutcome]:
    start = time.time()
    results = await asyncio.gather(
        *(provider.fetch_forecast(client) for provider in providers),
        return_exceptions=True,
    )
    logger.info(f"[Aggregator] {len(providers)} models settled in {time.time() - start:.2f}s")

    outcomes: List[ModelOutcome] = []
    for provider, result in zip(providers, results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                # CancelledError, KeyboardInterrupt
                raise result
            error_type, error_msg = classify_exception(result)
            outcome = ModelOutcome(provider.model, error_type=error_type, error_message=error_msg)
            logger.error(f"[Aggregator] {provider.model.value} unavailable: {outcome.status_label}")
        else:
            outcome = ModelOutcome(provider.model, forecast=result)
            logger.info(f"[Aggregator] {provider.model.value}: {outcome.status_label}")
        outcomes.append(outcome)
    return outcomes


async def fetch_model_outcomes(
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
    providers: Optional[Sequence[MeteocielProvider]] = None,
    now: Optional[Callable[[], datetime]] = None,
) -> List[ModelOutcome]:
    """Run every model pipeline and return one outcome per model, never raising."""
    settings = settings or Settings()
    providers = list(providers) if providers is not None else build_providers(settings, now)

    if client is not None:
        return await _settle(providers, client)

    async with httpx.AsyncClient(timeout=settings.timeout_seconds,
                                 follow_redirects=True) as own_client:
        return await _settle(providers, own_client)


def build_multi_model_forecast(
    outcomes: Sequence[ModelOutcome],
    location: str,
    fetched_at: datetime,
) -> MultiModelForecast:
    """
    Merge settled outcomes into the aggregate record.

    Raises:
        ForecastUnavailableError: when no model succeeded
    """
    by_model = {outcome.model: outcome for outcome in outcomes}
    succeeded_outcomes = [
        by_model[model] for model in MODEL_ORDER
        if model in by_model and by_model[model].ok
    ]
    succeeded = [outcome.forecast for outcome in succeeded_outcomes]

    if not succeeded:
        failed = [outcome.model.value for outcome in outcomes]
        logger.error(f"[Aggregator] All models failed: {', '.join(failed)}")
        raise ForecastUnavailableError(failed)

    entries = sort_chronologically(merge_forecasts(succeeded), fetched_at.date())

    last_updates = {
        f"{outcome.model.field_name}_last_update": outcome.forecast.last_update
        for outcome in succeeded_outcomes
    }

    available = [outcome.model.value for outcome in outcomes if outcome.ok]
    logger.info(f"[Aggregator] {len(entries)} merged slots from {', '.join(available)}")

    return MultiModelForecast(
        location=location,
        fetched_at=fetched_at,
        entries=tuple(entries),
        **last_updates,
    )


async def fetch_multi_model_forecast(
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
    providers: Optional[Sequence[MeteocielProvider]] = None,
    now: Optional[Callable[[], datetime]] = None,
) -> MultiModelForecast:
    """
    Fetch all five models concurrently and merge them.

    Args:
        settings: Scraping settings (defaults when omitted)
        client: Shared httpx client; one is opened for the call when omitted
        providers: Override the default five providers (tests)
        now: Clock returning the fetch time

    Returns:
        MultiModelForecast over every model that answered

    Raises:
        ForecastUnavailableError: when every model failed
    """
    settings = settings or Settings()
    clock = now or (lambda: datetime.now(ZoneInfo(settings.timezone)))

    logger.info(f"[Aggregator] Fetching multi-model rain forecast for {settings.location}")
    outcomes = await fetch_model_outcomes(settings, client, providers, clock)
    return build_multi_model_forecast(outcomes, settings.location, clock())


async def fetch_forecast(
    model: WeatherModel,
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
    now: Optional[Callable[[], datetime]] = None,
) -> RainForecast:
    """
    Single-model forecast.

    Raises:
        ScraperError: NETWORK_ERROR, FETCH_ERROR or PARSE_ERROR
    """
    provider = MeteocielProvider(MODEL_CONFIGS[model], settings, now)
    return await provider.fetch_forecast(client)
