"""
Tests for the per-model meteociel provider pipeline.

Run with: python -m pytest tests/test_provider.py -v
"""

import logging

import httpx
import pytest
import respx

from meteociel_rain.entities import WeatherModel
from meteociel_rain.errors import ScraperError, ScraperErrorType
from meteociel_rain.providers.meteociel import (
    MODEL_CONFIGS,
    MeteocielProvider,
    build_providers,
)
from meteociel_rain.scraper.locator import LocatorStrategy

from conftest import forecast_page

logger = logging.getLogger(__name__)


def _provider(model, settings, fixed_now):
    return MeteocielProvider(MODEL_CONFIGS[model], settings, fixed_now)


class TestModelConfigs:

    def test_five_models_configured(self):
        assert set(MODEL_CONFIGS) == set(WeatherModel)

    def test_urls(self, settings):
        expected = {
            WeatherModel.GFS: "https://www.meteociel.fr/previsions/12368/la_bouexiere.htm",
            WeatherModel.WRF: "https://www.meteociel.fr/previsions-wrf/12368/la_bouexiere.htm",
            WeatherModel.AROME: "https://www.meteociel.fr/previsions-arome/12368/la_bouexiere.htm",
            WeatherModel.ARPEGE: "https://www.meteociel.fr/previsions-arpege-1h/12368/la_bouexiere.htm",
            WeatherModel.ICON_EU: "https://www.meteociel.fr/previsions-iconeu/12368/la_bouexiere.htm",
        }
        for model, url in expected.items():
            assert MeteocielProvider(MODEL_CONFIGS[model], settings).url == url

    def test_hourly_models_use_structural_locator(self):
        for model in (WeatherModel.ARPEGE, WeatherModel.ICON_EU):
            assert MODEL_CONFIGS[model].hourly
            assert MODEL_CONFIGS[model].strategy is LocatorStrategy.STRUCTURAL
        assert MODEL_CONFIGS[WeatherModel.ICON_EU].min_cells == 8

    def test_build_providers_in_merge_order(self, settings):
        models = [provider.model for provider in build_providers(settings)]
        assert models == [WeatherModel.GFS, WeatherModel.WRF, WeatherModel.AROME,
                          WeatherModel.ARPEGE, WeatherModel.ICON_EU]


class TestThreeHourPipeline:
    """GFS / WRF / AROME pages."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_gfs_forecast(self, settings, fixed_now, gfs_page):
        logger.info("[TEST] Testing GFS end-to-end parse...")
        provider = _provider(WeatherModel.GFS, settings, fixed_now)
        respx.get(provider.url).mock(return_value=httpx.Response(200, text=gfs_page))

        forecast = await provider.fetch_forecast()

        assert forecast.location == "La Bouëxière"
        assert forecast.fetched_at == fixed_now()
        assert forecast.last_update == "16:12 (run GFS de 12Z)"
        assert [(e.day, e.hour, e.amount, e.time_range) for e in forecast.entries] == [
            ("Mardi 10", "01h", 1.4, "22h-01h"),
            ("Mardi 10", "04h", 0.0, "01h-04h"),
            ("Mercredi 11", "01h", 0.5, "22h-01h"),
        ]
        assert all(entry.model is WeatherModel.GFS for entry in forecast.entries)
        logger.info("[TEST] GFS end-to-end test PASSED")

    def test_page_without_banner_has_no_last_update(self, settings, fixed_now):
        html = forecast_page([("Jeu12", [("10:00", "2.0 mm"), ("13:00", "--")])])
        forecast = _provider(WeatherModel.WRF, settings, fixed_now).parse(html, fixed_now())
        assert forecast.last_update is None
        assert len(forecast.entries) == 2

    def test_page_without_table_is_parse_error(self, settings, fixed_now):
        with pytest.raises(ScraperError) as exc_info:
            _provider(WeatherModel.AROME, settings, fixed_now).parse(
                "<html><body>Erreur</body></html>", fixed_now())
        assert exc_info.value.type is ScraperErrorType.PARSE_ERROR


class TestHourlyPipeline:
    """ARPEGE 1h / ICON-EU pages are bucketed into 3h windows."""

    def test_arpege_aggregates_hours(self, settings, fixed_now, arpege_page):
        logger.info("[TEST] Testing ARPEGE hourly aggregation...")
        forecast = _provider(WeatherModel.ARPEGE, settings, fixed_now).parse(arpege_page, fixed_now())

        assert [(e.day, e.hour, e.amount, e.time_range) for e in forecast.entries] == [
            ("Mardi 10", "04h", 3.5, "01h-04h"),
            ("Mercredi 11", "01h", 0.6, "22h-01h"),
        ]
        assert all(entry.model is WeatherModel.ARPEGE for entry in forecast.entries)
        assert forecast.last_update == "16:40 (run ARPEGE de 12Z)"

    def test_iconeu_ignores_short_rows(self, settings, fixed_now):
        html = forecast_page(
            [("Mar10", [("02:00", "1.0 mm"), ("03:00", "1.0 mm")])],
            granularity=1,
            extra_rows="<tr><td>04:00</td><td>9.9 mm</td></tr>",
        )

        iconeu = _provider(WeatherModel.ICON_EU, settings, fixed_now).parse(html, fixed_now())
        arpege = _provider(WeatherModel.ARPEGE, settings, fixed_now).parse(html, fixed_now())

        assert [(e.hour, e.amount) for e in iconeu.entries] == [("04h", 2.0)]
        # ARPEGE keeps the short row; its rain cell is missing and reads 0.0
        assert [(e.hour, e.amount) for e in arpege.entries] == [("04h", 2.0)]
        assert all(entry.model is WeatherModel.ICON_EU for entry in iconeu.entries)


class TestFailures:

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_propagates(self, settings, fixed_now):
        provider = _provider(WeatherModel.WRF, settings, fixed_now)
        respx.get(provider.url).mock(return_value=httpx.Response(500))

        with pytest.raises(ScraperError) as exc_info:
            await provider.fetch_forecast()

        assert exc_info.value.type is ScraperErrorType.FETCH_ERROR

    @pytest.mark.asyncio
    @respx.mock
    async def test_empty_table_is_parse_error(self, settings, fixed_now):
        provider = _provider(WeatherModel.GFS, settings, fixed_now)
        html = forecast_page([])
        respx.get(provider.url).mock(return_value=httpx.Response(200, text=html))

        with pytest.raises(ScraperError) as exc_info:
            await provider.fetch_forecast()

        assert exc_info.value.type is ScraperErrorType.PARSE_ERROR

    @pytest.mark.asyncio
    @respx.mock
    async def test_unexpected_error_becomes_fetch_error(self, settings, fixed_now, gfs_page, monkeypatch):
        logger.info("[TEST] Testing unexpected exception wrapping...")
        provider = _provider(WeatherModel.GFS, settings, fixed_now)
        respx.get(provider.url).mock(return_value=httpx.Response(200, text=gfs_page))

        boom = RuntimeError("parser exploded")

        def explode(markup, fetched_at):
            raise boom

        monkeypatch.setattr(provider, "parse", explode)

        with pytest.raises(ScraperError) as exc_info:
            await provider.fetch_forecast()

        assert exc_info.value.type is ScraperErrorType.FETCH_ERROR
        assert exc_info.value.original_error is boom
        assert exc_info.value.__cause__ is boom
