"""
Meteociel Rain: multi-model rain forecast for one meteociel.fr station.

Compares GFS, WRF, AROME, ARPEGE and ICON-EU rainfall on a common 3-hour
grid. Run `python main.py --help` for options.
"""

import sys

from meteociel_rain.cli import main

if __name__ == "__main__":
    sys.exit(main())
