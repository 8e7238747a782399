"""
Report API Endpoints
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session
import structlog

from gravity_books.reporting.daily_report import build_daily_report
from gravity_books.serving.api.dependencies import get_session
from gravity_books.transformation.daily_metrics import UncoveredOrderPolicy

router = APIRouter()
logger = structlog.get_logger(__name__)


class DailyOrderMetricData(BaseModel):
    """Metrics for one calendar day"""
    calendar_date: date
    calendar_year: int
    calendar_month: int
    day_of_week_name: str
    num_orders: int
    num_books: int
    total_price: float
    rolling_num_books: int
    rolling_total_price: float
    prev_books: Optional[int]


class DailyOrderReport(BaseModel):
    """Daily order report response"""
    data: List[DailyOrderMetricData]
    period_start: Optional[date]
    period_end: Optional[date]
    total_orders: int
    total_books: int
    total_price: float


@router.get("/daily-orders", response_model=DailyOrderReport)
def get_daily_orders(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    on_uncovered: UncoveredOrderPolicy = Query(default=UncoveredOrderPolicy.RAISE),
    db: Session = Depends(get_session),
) -> DailyOrderReport:
    """Calendar-backed daily order metrics with month-to-date sums and 7-day lag"""
    logger.info("get_daily_orders called", start_date=str(start_date), end_date=str(end_date))
    
    rows = build_daily_report(db, start_date, end_date, on_uncovered=on_uncovered)
    data = [
        DailyOrderMetricData(
            calendar_date=row.calendar_date,
            calendar_year=row.calendar_year,
            calendar_month=row.calendar_month,
            day_of_week_name=row.day_of_week_name,
            num_orders=row.num_orders,
            num_books=row.num_books,
            total_price=float(row.total_price),
            rolling_num_books=row.rolling_num_books,
            rolling_total_price=float(row.rolling_total_price),
            prev_books=row.prev_books,
        )
        for row in rows
    ]
    
    return DailyOrderReport(
        data=data,
        period_start=rows[0].calendar_date if rows else None,
        period_end=rows[-1].calendar_date if rows else None,
        total_orders=sum(row.num_orders for row in rows),
        total_books=sum(row.num_books for row in rows),
        total_price=float(sum(row.total_price for row in rows)),
    )
