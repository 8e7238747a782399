"""
Command Line Interface

Usage:
    gravity-books calendar --start 2020-01-01 [--end 2024-12-31]
    gravity-books report [--start ...] [--end ...] [--output report.parquet]
    gravity-books view orders-by-city [--country Canada] [--output cities.csv]
    gravity-books seed-demo [--orders 500]
    gravity-books serve [--host 127.0.0.1] [--port 8000]

Exit codes: 0 success, 2 invalid range or arguments, 3 calendar does not
cover the requested dates, 4 database failure, 5 output file cannot be
written.
"""

import argparse
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

import polars as pl
import structlog

from gravity_books.config import get_settings
from gravity_books.config.logging import configure_logging
from gravity_books.database.connection import create_db_engine, session_scope
from gravity_books.exceptions import (
    DataAccessError,
    InvalidRangeError,
    MissingCalendarRangeError,
)
from gravity_books.ingestion.seed_db import rebuild_calendar, seed_demo_data
from gravity_books.reporting.daily_report import build_daily_report, report_to_frame, write_frame
from gravity_books.reporting.views import DEFAULT_COUNTRY, VIEWS, run_view
from gravity_books.transformation.daily_metrics import UncoveredOrderPolicy

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_INVALID = 2
EXIT_MISSING_CALENDAR = 3
EXIT_DATA_ACCESS = 4
EXIT_OUTPUT = 5


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from None


def _emit(df: pl.DataFrame, output: Optional[Path]) -> None:
    """Write to ``output``, or CSV to stdout when no path is given"""
    if output is None:
        sys.stdout.write(df.write_csv())
    else:
        write_frame(df, output)


def cmd_calendar(args: argparse.Namespace) -> int:
    engine = create_db_engine(args.database_url)
    try:
        rows = rebuild_calendar(engine, args.start, args.end)
    finally:
        engine.dispose()
    print(f"Calendar rebuilt with {rows} days")
    return EXIT_OK


def cmd_report(args: argparse.Namespace) -> int:
    policy = UncoveredOrderPolicy.EXCLUDE if args.exclude_uncovered else UncoveredOrderPolicy.RAISE
    engine = create_db_engine(args.database_url)
    try:
        with session_scope(engine) as session:
            rows = build_daily_report(session, args.start, args.end, on_uncovered=policy)
    finally:
        engine.dispose()
    
    _emit(report_to_frame(rows), args.output)
    return EXIT_OK


def cmd_view(args: argparse.Namespace) -> int:
    params = {"country": args.country} if args.name == "orders-by-city" else {}
    engine = create_db_engine(args.database_url)
    try:
        with session_scope(engine) as session:
            df = run_view(session, args.name, **params)
    finally:
        engine.dispose()
    _emit(df, args.output)
    return EXIT_OK


def cmd_seed_demo(args: argparse.Namespace) -> int:
    engine = create_db_engine(args.database_url)
    try:
        counts = seed_demo_data(
            engine,
            n_orders=args.orders,
            seed=args.seed,
            start_date=args.start,
            end_date=args.end,
        )
    finally:
        engine.dispose()
    for table, count in counts.items():
        print(f"{table}: {count}")
    return EXIT_OK


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn
    from gravity_books.serving.api.main import create_api_app
    
    uvicorn.run(
        create_api_app(create_db_engine(args.database_url)),
        host=args.host,
        port=args.port,
        log_config=None,
    )
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    
    parser = argparse.ArgumentParser(
        prog="gravity-books",
        description="Calendar dimension and daily order reporting for Gravity Books",
    )
    parser.add_argument("--database-url", default=None, help="SQLAlchemy URL (default: DATABASE_URL setting)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    subparsers = parser.add_subparsers(dest="command", required=True)
    
    calendar = subparsers.add_parser("calendar", help="Rebuild the calendar table")
    calendar.add_argument("--start", type=_iso_date, default=settings.calendar.start_date)
    calendar.add_argument("--end", type=_iso_date, default=settings.calendar.end_date, help="Defaults to today")
    calendar.set_defaults(handler=cmd_calendar)
    
    report = subparsers.add_parser("report", help="Daily order report")
    report.add_argument("--start", type=_iso_date, default=None, help="Defaults to first calendar day")
    report.add_argument("--end", type=_iso_date, default=None, help="Defaults to last calendar day")
    report.add_argument("--output", type=Path, default=None, help=".csv or .parquet file; CSV to stdout if omitted")
    report.add_argument(
        "--exclude-uncovered",
        action="store_true",
        help="Leave out orders dated outside the calendar instead of failing",
    )
    report.set_defaults(handler=cmd_report)
    
    view = subparsers.add_parser("view", help="Export a visualization view")
    view.add_argument("name", choices=sorted(VIEWS))
    view.add_argument("--country", default=DEFAULT_COUNTRY, help="Country for orders-by-city")
    view.add_argument("--output", type=Path, default=None, help=".csv or .parquet file; CSV to stdout if omitted")
    view.set_defaults(handler=cmd_view)
    
    seed = subparsers.add_parser("seed-demo", help="Load generated bookstore data into an empty database")
    seed.add_argument("--orders", type=int, default=200)
    seed.add_argument("--seed", type=int, default=42)
    seed.add_argument("--start", type=_iso_date, default=date(2020, 1, 1))
    seed.add_argument("--end", type=_iso_date, default=None)
    seed.set_defaults(handler=cmd_seed_demo)
    
    serve = subparsers.add_parser("serve", help="Run the reporting API")
    serve.add_argument("--host", default=settings.api_host)
    serve.add_argument("--port", type=int, default=settings.api_port)
    serve.set_defaults(handler=cmd_serve)
    
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    
    try:
        return args.handler(args)
    except InvalidRangeError as e:
        logger.error("Invalid date range", error=str(e))
        return EXIT_INVALID
    except MissingCalendarRangeError as e:
        logger.error("Calendar does not cover requested dates", error=str(e))
        return EXIT_MISSING_CALENDAR
    except DataAccessError as e:
        logger.error("Database access failed", error=str(e))
        return EXIT_DATA_ACCESS
    except ValueError as e:
        logger.error("Invalid arguments", error=str(e))
        return EXIT_INVALID
    except OSError as e:
        logger.error("Cannot write output", error=str(e))
        return EXIT_OUTPUT


if __name__ == "__main__":
    sys.exit(main())
