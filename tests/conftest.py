"""
Shared fixtures: synthetic meteociel.fr pages.

The builders reproduce the parts of the real markup the scraper depends on:
layout tables wrapping the forecast grid, day-start rows whose first cell
spans the day (rowspan), continuation rows shifted one cell left, and the
"Réactualisé à ..." run banner.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from meteociel_rain.config import Settings

logging.basicConfig(level=logging.DEBUG)

PARIS = ZoneInfo("Europe/Paris")

# (day label, [(hour text, rain text), ...])
DaySlots = Sequence[Tuple[str, Sequence[Tuple[str, str]]]]


def _filler(count: int) -> List[str]:
    return ["<td>12 °C</td>"] * count


def forecast_rows(days: DaySlots) -> str:
    """Rows laid out as on the model pages: rain at cell 7 / cell 6."""
    rows = []
    for label, slots in days:
        for index, (hour, rain) in enumerate(slots):
            if index == 0:
                cells = [f'<td rowspan="{max(len(slots), 2)}">{label}</td>', f"<td>{hour}</td>"]
            else:
                cells = [f"<td>{hour}</td>"]
            cells += _filler(5) + [f"<td>{rain}</td>", "<td>1015 hPa</td>"]
            rows.append(f"<tr>{''.join(cells)}</tr>")
    return "\n".join(rows)


def forecast_page(days: DaySlots, granularity: int = 3, banner: Optional[str] = None,
                  extra_rows: str = "") -> str:
    """A model page: layout table around a legend table and the forecast grid."""
    banner_html = f"<p>{banner}</p>" if banner else ""
    return f"""<html><body>
{banner_html}
<table width="100%"><tr><td>
  <table><tr><td>Légende : Pluie sur {granularity}h en mm</td></tr></table>
  <table border="1">
    <tr><td>Jour</td><td>Heure</td><td>Temp.</td><td>Ressentie</td><td>Vent</td>
        <td>Rafales</td><td>Humidité</td><td>Pluie sur {granularity}h</td><td>Pression</td></tr>
    {forecast_rows(days)}
    {extra_rows}
  </table>
</td></tr></table>
</body></html>"""


def arome_1h_rows(days: Sequence[Tuple[str, Sequence[Tuple[str, str]]]]) -> str:
    """AROME 1h rows: 11 cells on a day's first row, 10 on the others."""
    rows = ['<tr bgcolor="#aaaaff"><td>Jour</td><td>Heure</td><td>Temp.</td><td>Ressentie</td>'
            '<td>Vent</td><td>Vitesse</td><td>Rafales</td><td>Pluie</td><td>Humidité</td>'
            '<td>Pression</td><td>Temps</td></tr>']
    for label, slots in days:
        for index, (hour, rain) in enumerate(slots):
            cells = []
            if index == 0:
                cells.append(f'<td rowspan="{max(len(slots), 2)}" align="center">{label}</td>')
            cells += [
                f"<td>{hour}</td>",
                '<td align="center">26 °C</td>',
                '<td align="center"><font color="#ffaaaa">30</font></td>',
                '<td align="center"><img alt="Nord : 6 °"></td>',
                '<td align="center">10</td>',
                '<td align="center">30</td>',
                f'<td align="center">{rain}</td>',
                '<td align="center">49 %</td>',
                '<td align="center">1020 hPa</td>',
                '<td align="center"><img alt="Ciel clair"></td>',
            ]
            rows.append(f'<tr bgcolor="#CCFFFF">{"".join(cells)}</tr>')
    return "\n".join(rows)


def arome_1h_page(days, banner: Optional[str] = "Dernière mise à jour à 18:00") -> str:
    """Grid five tables deep under the second cell of the root table."""
    center = f"<center>{banner}</center>" if banner is not None else ""
    return f"""<html><body>
<table><tr><td>menu</td><td>
  <table><tr><td>
    <table><tr><td>
      <table><tr><td>
        <table>
          {arome_1h_rows(days)}
        </table>
      </td></tr></table>
    </td></tr></table>
  </td></tr></table>
</td></tr></table>
{center}
</body></html>"""


@pytest.fixture
def settings() -> Settings:
    return Settings(timeout_seconds=5.0)


@pytest.fixture
def fixed_now() -> Callable[[], datetime]:
    """Clock frozen on Tuesday 2025-06-10 08:00 Paris time."""
    return lambda: datetime(2025, 6, 10, 8, 0, tzinfo=PARIS)


@pytest.fixture
def gfs_page() -> str:
    return forecast_page(
        [
            ("Mar10", [("01:00", "1.4 mm"), ("04:00", "--")]),
            ("Mer11", [("01:00", "0.5 mm")]),
        ],
        banner="Réactualisé à 16:12 (run GFS de 12Z)",
    )


@pytest.fixture
def arpege_page() -> str:
    return forecast_page(
        [
            ("Mar10", [("02:00", "1.0 mm"), ("03:00", "2.0 mm"), ("04:00", "0.5 mm"),
                       ("23:00", "0.3 mm")]),
            ("Mer11", [("00:00", "0.2 mm"), ("01:00", "0.1 mm")]),
        ],
        granularity=1,
        banner="R&eacute;actualis&eacute; &agrave; 16:40 (run ARPEGE de 12Z)",
    )
