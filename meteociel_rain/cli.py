"""
Command-line entry point: rain forecast for one meteociel.fr station.

    python main.py                    multi-model comparison table
    python main.py --model WRF        one model
    python main.py --arome-1h         AROME 1h hourly feed
    python main.py --arome-1h --three-hour
                                      AROME 1h bucketed into 3h windows
    python main.py --json             JSON instead of the table
    python main.py --xlsx out.xlsx    also write the Excel workbook

Exit code 0 on success, 1 when no forecast could be produced.
"""

import argparse
import asyncio
import json
import logging
import os
import sys
import time
from typing import List, Optional

from colorama import Fore, Style, init
from dotenv import load_dotenv

from meteociel_rain import __version__
from meteociel_rain.aggregator import fetch_forecast, fetch_multi_model_forecast
from meteociel_rain.config import load_settings
from meteociel_rain.entities import WeatherModel
from meteociel_rain.errors import ForecastUnavailableError, ScraperError
from meteociel_rain.providers.arome_1h import MeteocielAdapter
from meteociel_rain.report import render_hourly, render_multi_model, render_single_model
from meteociel_rain.xlsx_report import write_xlsx_report

logger = logging.getLogger(__name__)

LOG_DIR = "logs"
LOG_FILE = os.path.join(LOG_DIR, "meteociel_rain.log")


def configure_logging() -> None:
    """Log to logs/meteociel_rain.log (append) and stdout, level from LOG_LEVEL."""
    os.makedirs(LOG_DIR, exist_ok=True)
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(LOG_FILE, mode='a', encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="meteociel-rain",
        description="Prévisions de pluie multi-modèles depuis meteociel.fr"
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--model",
        choices=[model.value for model in WeatherModel],
        help="Only fetch this model"
    )
    source.add_argument(
        "--arome-1h",
        action="store_true",
        help="Hour-by-hour AROME 1h feed"
    )
    parser.add_argument(
        "--three-hour",
        action="store_true",
        help="With --arome-1h: 3h windows like the other models"
    )
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    parser.add_argument("--xlsx", metavar="PATH", help="Also write the comparison table to PATH")
    parser.add_argument("--no-color", action="store_true", help="Plain text output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    """Fetch, print and optionally export. Returns the process exit code."""
    settings = load_settings()
    use_color = not args.no_color and not args.json
    start = time.time()

    logger.info("=" * 60)
    logger.info(f"[main] Rain forecast for {settings.location}")
    logger.info("=" * 60)

    try:
        if args.arome_1h and args.three_hour:
            forecast = await MeteocielAdapter(settings).get_three_hour_forecast()
            output = (json.dumps(forecast.to_dict(), ensure_ascii=False, indent=2) if args.json
                      else render_single_model(forecast, use_color))

        elif args.arome_1h:
            info = await MeteocielAdapter(settings).get_next_24_hours_rain()
            output = (json.dumps(info.to_dict(), ensure_ascii=False, indent=2) if args.json
                      else render_hourly(info, settings.location, use_color))

        elif args.model:
            forecast = await fetch_forecast(WeatherModel(args.model), settings)
            output = (json.dumps(forecast.to_dict(), ensure_ascii=False, indent=2) if args.json
                      else render_single_model(forecast, use_color))

        else:
            multi = await fetch_multi_model_forecast(settings)
            output = (json.dumps(multi.to_dict(), ensure_ascii=False, indent=2) if args.json
                      else render_multi_model(multi, use_color))
            if args.xlsx:
                xlsx_path = write_xlsx_report(multi, args.xlsx)
                logger.info(f"[main] Workbook saved to: {xlsx_path}")

    except ForecastUnavailableError as e:
        logger.error(f"[main] {e}")
        print(f"{Fore.RED}ERREUR : {e}{Style.RESET_ALL}", file=sys.stderr)
        return 1
    except ScraperError as e:
        logger.error(f"[main] {e}")
        print(f"{Fore.RED}ERREUR : {e.message}{Style.RESET_ALL}", file=sys.stderr)
        return 1

    if args.xlsx and (args.model or args.arome_1h):
        logger.warning("[main] --xlsx only applies to the multi-model table, ignored")
    if args.three_hour and not args.arome_1h:
        logger.warning("[main] --three-hour only applies to --arome-1h, ignored")

    print(output)
    logger.info(f"[main] Done in {time.time() - start:.2f}s")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    configure_logging()
    init()
    args = parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
