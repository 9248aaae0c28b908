"""
Battery Decider
Queries the Enphase API for a solar system over a date range and reports average
daily production, consumption, net, exported and imported energy, to help decide
whether adding a battery is warranted
"""
import sys
import logging
import argparse
from datetime import datetime
from typing import List, Optional
from pythonjsonlogger import jsonlogger

from enphase_client import EnphaseClient
from interval_fetcher import FetchError, IntervalFetcher
from daily_aggregator import (
    AlignmentError,
    consumption_wh,
    daily_net,
    daily_paired_totals,
    daily_totals,
    exported_wh,
    imported_wh,
    production_wh,
)
from battery_report import BatteryReport, EmptyRangeError, build_report, format_report
from decider_settings import Settings, SettingsError

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"

DESCRIPTION = """\
This program queries the Enphase API for a given solar system and
retrieves production and consumption data for a specified date range.
Statistics are then computed including average daily export energy
to help in deciding whether adding a battery is warranted (with the
assumption being that it's best to self-consume rather than export)."""


def setup_logging(settings: Settings):
    """Configure root logging, as plain text or JSON, on stderr"""
    if settings.log_format == "json":
        root = logging.getLogger()
        root.setLevel(settings.log_level)
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(jsonlogger.JsonFormatter(
            '%(asctime)s %(name)s %(levelname)s %(message)s',
            timestamp=True
        ))
        root.addHandler(handler)
    else:
        logging.basicConfig(
            level=settings.log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )


def local_midnight_timestamp(value: str) -> int:
    """Unix timestamp of local midnight on a YYYY-MM-DD date (host time zone)"""
    try:
        midnight = datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD")
    return int(midnight.timestamp())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="battery-decider",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('system_id',
                        help='found in the URL for your enphase system e.g. /pv/systems/<systemId>/')
    parser.add_argument('key',
                        help='developer key, which you can get here https://developer.enphase.com/docs/quickstart.html')
    parser.add_argument('user_id',
                        help='found in your API settings at /pv/settings/<systemId>/')
    parser.add_argument('start_date', type=local_midnight_timestamp, help='YYYY-MM-DD')
    parser.add_argument('end_date', type=local_midnight_timestamp, help='YYYY-MM-DD')
    return parser


def run(args: argparse.Namespace, settings: Settings, fetcher: Optional[IntervalFetcher] = None) -> BatteryReport:
    """
    Fetch both series, aggregate them per day and average them

    Args:
        args: Parsed command line
        settings: Runtime settings
        fetcher: Optional pre-built fetcher (tests inject one with a fake client)

    Returns:
        The computed report
    """
    if fetcher is None:
        client = EnphaseClient(
            api_key=args.key,
            user_id=args.user_id,
            system_id=args.system_id,
            base_url=settings.base_url,
            timeout=settings.request_timeout,
        )
        fetcher = IntervalFetcher(client, max_days=settings.max_query_days, delay=settings.query_delay)

    start_at = args.start_date
    end_at = args.end_date

    consumption = fetcher.fetch_consumption(start_at, end_at)
    production = fetcher.fetch_production(start_at, end_at)

    daily_consumption = daily_totals(consumption, consumption_wh, start_at)
    daily_production = daily_totals(production, production_wh, start_at)
    net = daily_net(daily_production, daily_consumption)

    exported = daily_paired_totals(production, consumption, exported_wh, start_at)
    imported = daily_paired_totals(production, consumption, imported_wh, start_at)

    return build_report(daily_production, daily_consumption, net, exported, imported)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the battery-decider command"""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.end_date <= args.start_date:
        parser.error("end_date must be after start_date")

    try:
        settings = Settings.from_env()
    except SettingsError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_logging(settings)

    try:
        report = run(args, settings)
    except (FetchError, AlignmentError, EmptyRangeError) as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1

    print(format_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
