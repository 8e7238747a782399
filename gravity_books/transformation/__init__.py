"""
Data Transformation Module
"""
from .calendar_builder import CalendarDay, generate_calendar, calendar_to_frame
from .daily_metrics import (
    DailyOrderMetric,
    OrderLineRecord,
    OrderRecord,
    UncoveredOrderPolicy,
    aggregate_daily_orders,
)

__all__ = [
    "CalendarDay",
    "generate_calendar",
    "calendar_to_frame",
    "DailyOrderMetric",
    "OrderLineRecord",
    "OrderRecord",
    "UncoveredOrderPolicy",
    "aggregate_daily_orders",
]
