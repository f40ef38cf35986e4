"""
Forecast sources scraped from meteociel.fr.

- MeteocielProvider: one numerical model page (GFS, WRF, AROME, ARPEGE, ICON-EU)
- MeteocielAdapter: the AROME 1h hourly feed
"""

from meteociel_rain.providers.meteociel import (
    MODEL_CONFIGS,
    MeteocielProvider,
    ModelConfig,
    build_providers,
)
from meteociel_rain.providers.arome_1h import MeteocielAdapter

__all__ = [
    "MODEL_CONFIGS",
    "MeteocielProvider",
    "ModelConfig",
    "build_providers",
    "MeteocielAdapter",
]
