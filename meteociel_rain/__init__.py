"""
Meteociel Rain: multi-model rainfall comparison

Scrapes the rendered forecast pages of meteociel.fr for five numerical
weather models and lines their rainfall up on a common 3-hour grid so the
runs can be compared side by side.

Architecture:
    scraper/       - Page-level building blocks:
                     * fetcher.py     - single uncached GET per page
                     * locator.py     - finds the forecast table in the markup
                     * rows.py        - row walk (day-start / continuation rows)
                     * hourly.py      - 1h -> 3h bucketing with midnight handling
                     * last_update.py - model run timestamp
    providers/     - Forecast sources:
                     * meteociel.py   - one parameterized pipeline, five models
                                        (GFS, WRF, AROME, ARPEGE, ICON-EU)
                     * arome_1h.py    - standalone AROME 1h adapter
    aggregator.py  - concurrent fetch of all models + (day, hour) merge
    report.py      - console comparison table
    xlsx_report.py - same table as an Excel workbook

Entry Points:
    main.py                      - CLI (multi-model table by default)
    meteociel-rain               - console script installed by pyproject
"""

__version__ = "1.0.0"
__author__ = "Meteociel Rain"
