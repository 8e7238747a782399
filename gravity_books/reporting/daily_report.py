"""
Daily Order Report

Reads the calendar, orders and order lines for a date range and produces the
calendar-backed daily order metrics, plus tabular export for BI tools.

Window metrics cover the requested range only: a report starting mid-month
starts its month-to-date sums at the first requested day, and the first seven
rows of every report carry no lagged value.
"""

from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import List, Optional, Tuple, Union

import polars as pl
import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gravity_books.database.models import Calendar, CustomerOrder, OrderLine
from gravity_books.exceptions import (
    DataAccessError,
    InvalidRangeError,
    MissingCalendarRangeError,
)
from gravity_books.quality.validators import create_calendar_validator
from gravity_books.transformation.calendar_builder import CalendarDay, calendar_to_frame
from gravity_books.transformation.daily_metrics import (
    DailyOrderMetric,
    OrderLineRecord,
    OrderRecord,
    UncoveredOrderPolicy,
    aggregate_daily_orders,
)

logger = structlog.get_logger(__name__)

REPORT_SCHEMA = {
    "calendar_date": pl.Date,
    "calendar_year": pl.Int32,
    "calendar_month": pl.Int32,
    "day_of_week_name": pl.Utf8,
    "num_orders": pl.Int64,
    "num_books": pl.Int64,
    "total_price": pl.Float64,
    "rolling_num_books": pl.Int64,
    "rolling_total_price": pl.Float64,
    "prev_books": pl.Int64,
}

CALENDAR_COLUMNS = [c.name for c in Calendar.__table__.columns]


def _day_bounds(start: date, end: date) -> Tuple[datetime, datetime]:
    """Half-open timestamp window covering whole days start..end"""
    return datetime.combine(start, time.min), datetime.combine(end + timedelta(days=1), time.min)


def calendar_extent(session: Session) -> Optional[Tuple[date, date]]:
    """First and last calendar date, or None when the calendar is empty"""
    first, last = session.execute(
        select(func.min(Calendar.calendar_date), func.max(Calendar.calendar_date))
    ).one()
    if first is None:
        return None
    return first, last


def load_calendar(session: Session, start: date, end: date) -> List[CalendarDay]:
    """
    Load and verify calendar rows for [start, end].
    
    Raises:
        DataAccessError: If the stored rows break the calendar invariants
    """
    records = session.execute(
        select(Calendar)
        .where(Calendar.calendar_date.between(start, end))
        .order_by(Calendar.calendar_date)
    ).scalars().all()
    days = [
        CalendarDay(**{column: getattr(record, column) for column in CALENDAR_COLUMNS})
        for record in records
    ]
    
    expected = (end - start).days + 1
    if len(days) != expected:
        raise DataAccessError(
            f"Calendar holds {len(days)} rows for {start}..{end}, expected {expected}"
        )
    
    result = create_calendar_validator().validate(calendar_to_frame(days))
    if not result.passed:
        messages = "; ".join(check.message for check in result.failures)
        raise DataAccessError(f"Calendar table is malformed: {messages}")
    
    return days


def _count_orders_outside(session: Session, extent: Tuple[date, date]) -> Tuple[int, Optional[datetime], Optional[datetime]]:
    lower, upper = _day_bounds(*extent)
    return session.execute(
        select(
            func.count(CustomerOrder.order_id),
            func.min(CustomerOrder.order_date),
            func.max(CustomerOrder.order_date),
        ).where(or_(CustomerOrder.order_date < lower, CustomerOrder.order_date >= upper))
    ).one()


def build_daily_report(
    session: Session,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    on_uncovered: Union[UncoveredOrderPolicy, str] = UncoveredOrderPolicy.RAISE,
) -> List[DailyOrderMetric]:
    """
    Build one DailyOrderMetric per calendar day in the requested range.
    
    Args:
        session: Open database session
        start_date: First reported day (defaults to the first calendar day)
        end_date: Last reported day (defaults to the last calendar day)
        on_uncovered: RAISE fails when any order is dated outside the
            calendar; EXCLUDE leaves such orders out and logs a warning
    
    Raises:
        InvalidRangeError: If start_date is after end_date
        MissingCalendarRangeError: If the calendar is empty, does not cover
            the requested range, or (with RAISE) orders fall outside it
        DataAccessError: If the database cannot be read or the calendar is
            malformed
    """
    on_uncovered = UncoveredOrderPolicy(on_uncovered)
    if start_date and end_date and start_date > end_date:
        raise InvalidRangeError(start_date, end_date)
    
    try:
        extent = calendar_extent(session)
        if extent is None:
            raise MissingCalendarRangeError("Calendar table is empty; rebuild the calendar first")
        
        # An open bound takes the calendar edge, so only coverage can fail here
        start = start_date or extent[0]
        end = end_date or extent[1]
        if start < extent[0] or end > extent[1]:
            raise MissingCalendarRangeError(
                f"Requested range {start}..{end} is outside the calendar {extent[0]}..{extent[1]}"
            )
        
        outside, first_seen, last_seen = _count_orders_outside(session, extent)
        if outside:
            if on_uncovered is UncoveredOrderPolicy.RAISE:
                raise MissingCalendarRangeError(
                    f"{outside} orders fall outside the calendar {extent[0]}..{extent[1]}",
                    uncovered_dates=sorted({first_seen.date(), last_seen.date()}),
                )
            logger.warning(
                "Excluding orders outside calendar",
                excluded_orders=outside,
                first_order_date=str(first_seen),
                last_order_date=str(last_seen),
            )
        
        days = load_calendar(session, start, end)
        
        lower, upper = _day_bounds(start, end)
        in_range = (CustomerOrder.order_date >= lower) & (CustomerOrder.order_date < upper)
        orders = [
            OrderRecord(order_id=row.order_id, order_date=row.order_date)
            for row in session.execute(
                select(CustomerOrder.order_id, CustomerOrder.order_date).where(in_range)
            )
        ]
        lines = [
            OrderLineRecord(order_id=row.order_id, book_id=row.book_id, price=row.price)
            for row in session.execute(
                select(OrderLine.order_id, OrderLine.book_id, OrderLine.price)
                .join(CustomerOrder, CustomerOrder.order_id == OrderLine.order_id)
                .where(in_range)
            )
        ]
    except SQLAlchemyError as e:
        logger.error("Failed to read report data", error=str(e))
        raise DataAccessError(f"Failed to read report data: {e}") from e
    
    metrics = aggregate_daily_orders(days, orders, lines, on_uncovered=on_uncovered)
    logger.info(
        "Daily order report built",
        start_date=str(start),
        end_date=str(end),
        days=len(metrics),
        orders=len(orders),
    )
    return metrics


def report_to_frame(rows: List[DailyOrderMetric]) -> pl.DataFrame:
    """Flat table with one column per report field; prices as floats"""
    records = []
    for row in rows:
        record = row.to_dict()
        record["total_price"] = float(row.total_price)
        record["rolling_total_price"] = float(row.rolling_total_price)
        records.append(record)
    return pl.DataFrame(records, schema=REPORT_SCHEMA)


def write_frame(df: pl.DataFrame, path: Union[str, Path]) -> Path:
    """
    Write a frame as CSV or Parquet, chosen by file suffix.
    
    Missing parent directories are created.
    
    Raises:
        ValueError: If the suffix is neither .csv nor .parquet
        OSError: If the file or its directory cannot be written
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in (".csv", ".parquet"):
        raise ValueError(f"Unsupported export format: {path.suffix!r}")
    
    path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".csv":
        df.write_csv(path)
    else:
        df.write_parquet(path)
    logger.info(f"Written {len(df)} rows to {path}")
    return path


def export_report(rows: List[DailyOrderMetric], path: Union[str, Path]) -> Path:
    """Write the report with write_frame"""
    return write_frame(report_to_frame(rows), path)
