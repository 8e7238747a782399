"""
Calendar Builder

Generates calendar dimension rows: one per day in an inclusive date range,
each carrying date parts, English weekday/month names, a YYYYMMDD key and a
quarter code. Output is deterministic for a given range.
"""

from dataclasses import dataclass, asdict
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional, Union

import polars as pl

from gravity_books.exceptions import InvalidRangeError

# Fixed English names so output does not depend on the process locale
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

DateLike = Union[date, datetime]


@dataclass(frozen=True)
class CalendarDay:
    """One calendar dimension row"""
    calendar_date: date
    calendar_day: int
    calendar_month: int
    calendar_quarter: int
    calendar_year: int
    day_of_week_num: int
    day_of_week_name: str
    date_num: str
    quarter_cd: str
    month_name_cd: str
    full_month_name: str
    holiday_name: Optional[str] = None
    holiday_flag: bool = False
    
    @classmethod
    def from_date(cls, d: date) -> "CalendarDay":
        """Derive every attribute from the date alone"""
        quarter = (d.month - 1) // 3 + 1
        month_name = MONTH_NAMES[d.month - 1]
        return cls(
            calendar_date=d,
            calendar_day=d.day,
            calendar_month=d.month,
            calendar_quarter=quarter,
            calendar_year=d.year,
            # Sunday=1 ... Saturday=7
            day_of_week_num=d.isoweekday() % 7 + 1,
            day_of_week_name=WEEKDAY_NAMES[d.weekday()],
            date_num=f"{d.year:04d}{d.month:02d}{d.day:02d}",
            quarter_cd=f"{d.year}Q{quarter}",
            month_name_cd=month_name[:3],
            full_month_name=month_name,
        )
    
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def generate_calendar(start_date: DateLike, end_date: DateLike) -> List[CalendarDay]:
    """
    Build one CalendarDay per date in ``[start_date, end_date]``.
    
    Datetimes are truncated to their date, so ``datetime.now()`` is accepted
    as an end bound.
    
    Raises:
        InvalidRangeError: If start_date is after end_date
    """
    start = _as_date(start_date)
    end = _as_date(end_date)
    if start > end:
        raise InvalidRangeError(start, end)
    
    return [
        CalendarDay.from_date(start + timedelta(days=offset))
        for offset in range((end - start).days + 1)
    ]


def calendar_to_frame(days: List[CalendarDay]) -> pl.DataFrame:
    """Convert calendar rows to a DataFrame with one column per attribute"""
    schema = {
        "calendar_date": pl.Date,
        "calendar_day": pl.Int32,
        "calendar_month": pl.Int32,
        "calendar_quarter": pl.Int32,
        "calendar_year": pl.Int32,
        "day_of_week_num": pl.Int32,
        "day_of_week_name": pl.Utf8,
        "date_num": pl.Utf8,
        "quarter_cd": pl.Utf8,
        "month_name_cd": pl.Utf8,
        "full_month_name": pl.Utf8,
        "holiday_name": pl.Utf8,
        "holiday_flag": pl.Boolean,
    }
    return pl.DataFrame([day.to_dict() for day in days], schema=schema)
