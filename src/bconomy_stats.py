# ================================================================================
# =                                 BCONOMY_STATS                                =
# ================================================================================

import argparse
import logging
import sys

from catalog import load_items, parse_item_selector
from collector import collect
from config import (
    DATABASE,
    DEFAULT_GRANULARITY,
    DEFAULT_OFFSET,
    DEFAULT_PERIOD,
    LOG_FILE,
)
from feed import FeedClient, FeedError
from report import report
from storage import init_database
from window import GRANULARITIES, plan_rolling_day, plan_window


def setup_logging(verbose: bool = False) -> None:
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(LOG_FILE),
            logging.StreamHandler(),
        ],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bconomy-stats",
        description="Collect and report Bconomy market trade statistics.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("collect", "Fetch market logs and save stats for one window"),
        ("report", "Show stored stats for a window and the 24 hours before it"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--verbose", action="store_true", help="Extended logging")
        sub.add_argument("--period", type=int, default=DEFAULT_PERIOD)
        sub.add_argument(
            "--granularity", choices=sorted(GRANULARITIES), default=DEFAULT_GRANULARITY
        )
        sub.add_argument(
            "--offset",
            type=int,
            default=DEFAULT_OFFSET,
            help="Number of periods in the past",
        )
        if name == "collect":
            sub.add_argument(
                "--item",
                type=parse_item_selector,
                default="all",
                help="Item ID or 'all'",
            )

    return parser


def run_collect(args: argparse.Namespace) -> int:
    """Collect stats for the requested window. Returns the exit code."""
    items = load_items()
    conn = init_database(DATABASE)

    try:
        with FeedClient() as feed:
            feed.connect()
            result = collect(
                feed,
                conn,
                args.period,
                args.granularity,
                args.offset,
                args.item,
                item_count=len(items),
            )
    except FeedError as e:
        logging.error(f"Collection aborted: {e}")
        return 1
    finally:
        conn.close()

    if not result.ok:
        return 1

    logging.info("Saved to database!")
    return 0


def run_report(args: argparse.Namespace) -> int:
    items = load_items()
    conn = init_database(DATABASE)

    try:
        live = plan_window(args.period, args.granularity, args.offset)
        day = plan_rolling_day(args.period, args.granularity)
        report(conn, items, live, day)
    finally:
        conn.close()

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for bconomy_stats."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "collect":
        return run_collect(args)
    return run_report(args)


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logging.info("Bconomy stats interrupted")
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        sys.exit(1)
