"""
Integration Tests - Daily Order Report
"""
from datetime import date, datetime
from decimal import Decimal

import polars as pl
import pytest
from sqlalchemy import delete
from sqlalchemy.orm import Session

from gravity_books.database.connection import create_db_engine
from gravity_books.database.models import Calendar, CustomerOrder
from gravity_books.exceptions import (
    DataAccessError,
    InvalidRangeError,
    MissingCalendarRangeError,
)
from gravity_books.ingestion.seed_db import rebuild_calendar
from gravity_books.reporting.daily_report import (
    REPORT_SCHEMA,
    build_daily_report,
    export_report,
    report_to_frame,
)

CALENDAR_START = date(2020, 1, 1)
CALENDAR_END = date(2020, 2, 29)


@pytest.fixture
def calendar(engine, bookstore):
    rebuild_calendar(engine, CALENDAR_START, CALENDAR_END)
    return bookstore


def _by_date(rows):
    return {r.calendar_date: r for r in rows}


class TestBuildDailyReport:
    """Tests for build_daily_report"""
    
    def test_one_row_per_calendar_day(self, calendar):
        rows = build_daily_report(calendar)
        
        assert len(rows) == 60
        assert rows[0].calendar_date == CALENDAR_START
        assert rows[-1].calendar_date == CALENDAR_END
    
    def test_daily_totals(self, calendar):
        rows = _by_date(build_daily_report(calendar))
        
        jan5 = rows[date(2020, 1, 5)]
        assert jan5.num_orders == 2
        assert jan5.num_books == 3
        assert jan5.total_price == Decimal("22.50")
        assert jan5.day_of_week_name == "Sunday"
        
        jan12 = rows[date(2020, 1, 12)]
        assert jan12.num_orders == 1
        assert jan12.total_price == Decimal("3.25")
        
        feb2 = rows[date(2020, 2, 2)]
        assert feb2.num_orders == 1
        assert feb2.num_books == 0
        assert feb2.total_price == 0
    
    def test_empty_days_are_zero(self, calendar):
        rows = _by_date(build_daily_report(calendar))
        
        jan6 = rows[date(2020, 1, 6)]
        assert (jan6.num_orders, jan6.num_books, jan6.total_price) == (0, 0, 0)
    
    def test_rolling_sums_by_month(self, calendar):
        rows = _by_date(build_daily_report(calendar))
        
        assert rows[date(2020, 1, 4)].rolling_num_books == 0
        assert rows[date(2020, 1, 12)].rolling_num_books == 4
        assert rows[date(2020, 1, 31)].rolling_num_books == 4
        assert rows[date(2020, 1, 31)].rolling_total_price == Decimal("25.75")
        assert rows[date(2020, 2, 1)].rolling_num_books == 1
        assert rows[date(2020, 2, 1)].rolling_total_price == Decimal("4.00")
        assert rows[date(2020, 2, 29)].rolling_num_books == 1
    
    def test_lagged_books(self, calendar):
        rows = build_daily_report(calendar)
        by_date = _by_date(rows)
        
        assert all(r.prev_books is None for r in rows[:7])
        assert by_date[date(2020, 1, 8)].prev_books == 0
        assert by_date[date(2020, 1, 12)].prev_books == 3
        assert by_date[date(2020, 1, 19)].prev_books == 1
    
    def test_sub_range_windows_start_at_range(self, calendar):
        """Running sums and lag only see the requested days"""
        rows = build_daily_report(calendar, date(2020, 1, 10), date(2020, 1, 20))
        by_date = _by_date(rows)
        
        assert len(rows) == 11
        assert by_date[date(2020, 1, 12)].rolling_num_books == 1
        assert by_date[date(2020, 1, 16)].prev_books is None
        assert by_date[date(2020, 1, 17)].prev_books == 0
        assert by_date[date(2020, 1, 19)].prev_books == 1
    
    def test_inverted_range(self, calendar):
        with pytest.raises(InvalidRangeError):
            build_daily_report(calendar, date(2020, 2, 1), date(2020, 1, 1))
    
    def test_range_outside_calendar(self, calendar):
        with pytest.raises(MissingCalendarRangeError):
            build_daily_report(calendar, date(2019, 12, 1), date(2020, 1, 31))
        with pytest.raises(MissingCalendarRangeError):
            build_daily_report(calendar, date(2020, 2, 1), date(2020, 3, 1))
    
    def test_open_start_after_calendar(self, calendar):
        """A start bound alone past the calendar is a coverage failure"""
        with pytest.raises(MissingCalendarRangeError):
            build_daily_report(calendar, start_date=date(2021, 1, 1))
    
    def test_open_end_before_calendar(self, calendar):
        with pytest.raises(MissingCalendarRangeError):
            build_daily_report(calendar, end_date=date(2019, 6, 30))
    
    def test_inverted_range_on_empty_calendar(self, bookstore):
        with pytest.raises(InvalidRangeError):
            build_daily_report(bookstore, date(2020, 2, 1), date(2020, 1, 1))
    
    def test_empty_calendar(self, bookstore):
        with pytest.raises(MissingCalendarRangeError):
            build_daily_report(bookstore)
    
    def test_orders_outside_calendar_raise(self, calendar):
        calendar.add(CustomerOrder(order_id=6, order_date=datetime(2020, 3, 15, 9, 0), dest_address_id=1))
        calendar.commit()
        
        with pytest.raises(MissingCalendarRangeError) as exc_info:
            build_daily_report(calendar)
        
        assert exc_info.value.uncovered_dates == [date(2020, 3, 15)]
    
    def test_orders_outside_calendar_excluded(self, calendar):
        calendar.add(CustomerOrder(order_id=6, order_date=datetime(2019, 6, 1, 9, 0), dest_address_id=1))
        calendar.commit()
        
        rows = build_daily_report(calendar, on_uncovered="exclude")
        
        assert sum(r.num_orders for r in rows) == 5
    
    def test_calendar_with_gap_is_malformed(self, calendar):
        calendar.execute(delete(Calendar).where(Calendar.calendar_date == date(2020, 1, 20)))
        calendar.commit()
        
        with pytest.raises(DataAccessError):
            build_daily_report(calendar)
    
    def test_missing_tables(self):
        engine = create_db_engine("sqlite:///:memory:")
        
        with Session(engine) as session:
            with pytest.raises(DataAccessError):
                build_daily_report(session)
        engine.dispose()


class TestReportExport:
    """Tests for report_to_frame and export_report"""
    
    def test_frame_columns(self, calendar):
        df = report_to_frame(build_daily_report(calendar))
        
        assert df.columns == list(REPORT_SCHEMA)
        assert df.height == 60
        assert df.filter(pl.col("calendar_date") == date(2020, 1, 5))["total_price"].item() == pytest.approx(22.5)
        assert df["prev_books"].null_count() == 7
    
    def test_export_csv(self, calendar, tmp_path):
        path = export_report(build_daily_report(calendar), tmp_path / "daily.csv")
        
        df = pl.read_csv(path)
        assert df.height == 60
        assert df["num_books"].sum() == 5
    
    def test_export_parquet(self, calendar, tmp_path):
        path = export_report(build_daily_report(calendar), tmp_path / "out" / "daily.parquet")
        
        df = pl.read_parquet(path)
        assert df.schema["calendar_date"] == pl.Date
        assert df["rolling_total_price"].max() == pytest.approx(25.75)
    
    def test_export_unknown_format(self, calendar, tmp_path):
        with pytest.raises(ValueError):
            export_report(build_daily_report(calendar), tmp_path / "daily.xlsx")
