"""
Model run timestamp ("Réactualisé à 16:12 (run ARPEGE de 12Z)") extraction.

Advisory metadata only: no match gives None, never an error.
"""

import html
import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

_RUN_CLAUSE = r"(\d{1,2}:\d{2})\s*\(run\s+([\w-]+)\s+de\s+(\d+Z)\)"

LAST_UPDATE_RE = re.compile(r"R[eé]actualis[eé]\s+[aà]\s+" + _RUN_CLAUSE, re.IGNORECASE)
RUN_CLAUSE_RE = re.compile(_RUN_CLAUSE, re.IGNORECASE)


def parse_last_update(markup: str) -> Optional[str]:
    """
    Find the model run descriptor anywhere in the page.

    Returns:
        "HH:MM (run <MODEL> de <N>Z)" or None
    """
    text = html.unescape(markup)

    match = LAST_UPDATE_RE.search(text) or RUN_CLAUSE_RE.search(text)
    if not match:
        logger.debug("[LastUpdate] No run descriptor found")
        return None

    time_str, model, run = match.groups()
    return f"{time_str} (run {model} de {run})"
