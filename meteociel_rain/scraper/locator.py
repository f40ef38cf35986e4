"""
Table locator: picks the forecast grid out of meteociel's nested layout tables.

Each strategy is a per-table test that yields zero or one candidate; the
candidates are then reduced with an explicit tie-break. "No candidate" comes
back as None and is turned into a PARSE_ERROR by ``locate_table``.

Strategies:
- TEXT_ANCHOR: table text mentions "Pluie sur Nh" and holds day rows ("Mar10").
               Fewest rows wins (the innermost, cleanest table).
- STRUCTURAL:  some row's second cell is an "HH:MM" time. First match wins.
- NESTED:      fixed descent used by the AROME 1h page, no text validation.
"""

import logging
import re
from enum import Enum
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from meteociel_rain.errors import ScraperError, ScraperErrorType

logger = logging.getLogger(__name__)

DAY_CELL_RE = re.compile(r"^(Lun|Mar|Mer|Jeu|Ven|Sam|Dim)\d+$")
TIME_CELL_RE = re.compile(r"^\d{2}:\d{2}$")


class LocatorStrategy(Enum):
    TEXT_ANCHOR = "text_anchor"
    STRUCTURAL = "structural"
    NESTED = "nested"


def parse_markup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def table_rows(table: Tag) -> List[Tag]:
    """All rows under a table, nested ones included."""
    return table.find_all("tr")


def row_cells(row: Tag) -> List[Tag]:
    """The row's own <td> cells."""
    return row.find_all("td", recursive=False)


def cell_text(cells: List[Tag], index: int) -> str:
    """Stripped text of cells[index]; a missing cell reads as ''."""
    if index < 0 or index >= len(cells):
        return ""
    return cells[index].get_text(strip=True)


def _compact(text: str) -> str:
    return re.sub(r"\s+", "", text).lower()


def rain_marker(granularity_hours: int) -> str:
    """Whitespace-free form of the 'Pluie sur Nh' column header."""
    return f"pluiesur{granularity_hours}h"


def _has_day_rows(table: Tag) -> bool:
    for row in table_rows(table):
        cells = row_cells(row)
        if cells and DAY_CELL_RE.match(cell_text(cells, 0)):
            return True
    return False


def _text_anchor_candidate(table: Tag, marker: str) -> Optional[Tag]:
    if marker not in _compact(table.get_text()):
        return None
    if not _has_day_rows(table):
        # Legend or header-only table
        return None
    return table


def _structural_candidate(table: Tag) -> Optional[Tag]:
    for row in table_rows(table):
        cells = row_cells(row)
        if len(cells) > 1 and TIME_CELL_RE.match(cell_text(cells, 1)):
            return table
    return None


def find_text_anchor_table(soup: BeautifulSoup, granularity_hours: int = 3) -> Optional[Tag]:
    marker = rain_marker(granularity_hours)
    candidates = [
        table for table in soup.find_all("table")
        if _text_anchor_candidate(table, marker) is not None
    ]
    logger.debug(f"[Locator] {len(candidates)} table(s) match '{marker}'")
    if not candidates:
        return None
    # min() keeps the first of equal-sized candidates
    return min(candidates, key=lambda table: len(table_rows(table)))


def find_structural_table(soup: BeautifulSoup) -> Optional[Tag]:
    for table in soup.find_all("table"):
        if _structural_candidate(table) is not None:
            return table
    return None


def nested_table_rows(soup: BeautifulSoup) -> List[Tag]:
    """
    Rows of the AROME 1h grid: root table -> 2nd cell of its first row ->
    table -> table -> table -> table. Any missing step gives [].
    """
    root = soup.find("table")
    if root is None:
        return []
    first_row = root.find("tr")
    if first_row is None:
        return []
    cells = row_cells(first_row)
    if len(cells) < 2:
        return []

    node: Optional[Tag] = cells[1]
    for _ in range(4):
        node = node.find("table")
        if node is None:
            logger.debug("[Locator] Nested descent stopped early")
            return []
    return table_rows(node)


def locate_table(
    soup: BeautifulSoup,
    strategy: LocatorStrategy,
    granularity_hours: int = 3,
    label: str = "forecast",
) -> Tag:
    """
    Find the forecast table with the given strategy.

    Raises:
        ScraperError: PARSE_ERROR when no table qualifies
    """
    if strategy is LocatorStrategy.TEXT_ANCHOR:
        table = find_text_anchor_table(soup, granularity_hours)
    elif strategy is LocatorStrategy.STRUCTURAL:
        table = find_structural_table(soup)
    else:
        raise ValueError(f"locate_table does not handle {strategy}; use nested_table_rows")

    if table is None:
        raise ScraperError(
            ScraperErrorType.PARSE_ERROR,
            f"Unable to find the {label} rain forecast table",
        )
    logger.debug(f"[Locator] {label}: picked table with {len(table_rows(table))} rows")
    return table
