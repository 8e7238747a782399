"""
Daily Order Metrics

Calendar-backed daily aggregation of orders and order lines.

Pipeline:
1. Outer join calendar -> orders on the order's date (timestamp truncated)
2. Outer join -> order lines on order id
3. Group per calendar date: distinct orders, line count, price total
4. Month-to-date running sums, restarting at every (year, month)
5. Book count from seven rows earlier in the full date-ordered sequence

Steps 4 and 5 run as one pass over the ordered rows, carrying a partition
accumulator and a fixed-size trailing buffer.
"""

from collections import defaultdict, deque
from dataclasses import dataclass, asdict
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Deque, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import structlog

from gravity_books.exceptions import MissingCalendarRangeError
from gravity_books.transformation.calendar_builder import CalendarDay

logger = structlog.get_logger(__name__)

LAG_ROWS = 7
ZERO = Decimal("0")


class UncoveredOrderPolicy(str, Enum):
    """What to do with orders dated outside the calendar"""
    RAISE = "raise"
    EXCLUDE = "exclude"


@dataclass(frozen=True)
class OrderRecord:
    """Order header as read from cust_order"""
    order_id: int
    order_date: datetime


@dataclass(frozen=True)
class OrderLineRecord:
    """Order line as read from order_line"""
    order_id: int
    book_id: int
    price: Decimal


@dataclass
class DailyOrderMetric:
    """Aggregated metrics for one calendar day"""
    calendar_date: date
    calendar_year: int
    calendar_month: int
    day_of_week_name: str
    num_orders: int = 0
    num_books: int = 0
    total_price: Decimal = ZERO
    rolling_num_books: int = 0
    rolling_total_price: Decimal = ZERO
    prev_books: Optional[int] = None
    
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class MonthToDateWindow:
    """Running sums partitioned by (year, month), reset on partition change"""
    
    def __init__(self):
        self._partition: Optional[Tuple[int, int]] = None
        self.books = 0
        self.price = ZERO
    
    def add(self, partition: Tuple[int, int], books: int, price: Decimal) -> Tuple[int, Decimal]:
        if partition != self._partition:
            self._partition = partition
            self.books = 0
            self.price = ZERO
        self.books += books
        self.price += price
        return self.books, self.price


class LagWindow:
    """Returns the value pushed ``offset`` rows earlier, or None"""
    
    def __init__(self, offset: int = LAG_ROWS):
        if offset < 1:
            raise ValueError(f"Lag offset must be at least 1, got {offset}")
        self._buffer: Deque[int] = deque(maxlen=offset)
    
    def push(self, value: int) -> Optional[int]:
        lagged = self._buffer[0] if len(self._buffer) == self._buffer.maxlen else None
        self._buffer.append(value)
        return lagged


def find_uncovered_orders(
    calendar_dates: Set[date],
    orders: Iterable[OrderRecord],
) -> List[OrderRecord]:
    """Orders whose date has no calendar row"""
    return [o for o in orders if o.order_date.date() not in calendar_dates]


def aggregate_daily_orders(
    calendar: Sequence[CalendarDay],
    orders: Iterable[OrderRecord],
    lines: Iterable[OrderLineRecord],
    on_uncovered: UncoveredOrderPolicy = UncoveredOrderPolicy.RAISE,
) -> List[DailyOrderMetric]:
    """
    Compute one DailyOrderMetric per calendar day, including empty days.
    
    Days without orders report zero orders, zero books and a zero total, so
    the running sums carry the previous value forward. Lines referencing an
    order that is not in ``orders`` are ignored.
    
    Args:
        calendar: Gap-free calendar rows
        orders: Order headers
        lines: Order lines for those orders
        on_uncovered: RAISE to fail on orders dated outside the calendar,
            EXCLUDE to drop them with a warning
    
    Raises:
        MissingCalendarRangeError: If an order falls outside the calendar
            and ``on_uncovered`` is RAISE
    """
    on_uncovered = UncoveredOrderPolicy(on_uncovered)
    days = sorted(calendar, key=lambda d: d.calendar_date)
    calendar_dates = {d.calendar_date for d in days}
    orders = list(orders)
    
    uncovered = find_uncovered_orders(calendar_dates, orders)
    if uncovered:
        uncovered_dates = sorted({o.order_date.date() for o in uncovered})
        if on_uncovered is UncoveredOrderPolicy.RAISE:
            raise MissingCalendarRangeError(
                f"{len(uncovered)} orders fall outside the calendar "
                f"({uncovered_dates[0]} .. {uncovered_dates[-1]})",
                uncovered_dates=uncovered_dates,
            )
        logger.warning(
            "Excluding orders outside calendar",
            excluded_orders=len(uncovered),
            first_date=str(uncovered_dates[0]),
            last_date=str(uncovered_dates[-1]),
        )
    
    # Steps 1-2: map each covered order to its calendar day
    order_day: Dict[int, date] = {
        o.order_id: o.order_date.date()
        for o in orders
        if o.order_date.date() in calendar_dates
    }
    
    # Step 3: group
    orders_per_day: Dict[date, Set[int]] = defaultdict(set)
    for order_id, day in order_day.items():
        orders_per_day[day].add(order_id)
    
    books_per_day: Dict[date, int] = defaultdict(int)
    price_per_day: Dict[date, Decimal] = defaultdict(lambda: ZERO)
    for line in lines:
        day = order_day.get(line.order_id)
        if day is None:
            continue
        books_per_day[day] += 1
        price_per_day[day] += line.price
    
    # Steps 4-5: single ordered pass
    month_to_date = MonthToDateWindow()
    lag = LagWindow(LAG_ROWS)
    metrics: List[DailyOrderMetric] = []
    
    for day in days:
        d = day.calendar_date
        books = books_per_day.get(d, 0)
        price = price_per_day.get(d, ZERO)
        rolling_books, rolling_price = month_to_date.add(
            (day.calendar_year, day.calendar_month), books, price
        )
        metrics.append(DailyOrderMetric(
            calendar_date=d,
            calendar_year=day.calendar_year,
            calendar_month=day.calendar_month,
            day_of_week_name=day.day_of_week_name,
            num_orders=len(orders_per_day.get(d, ())),
            num_books=books,
            total_price=price,
            rolling_num_books=rolling_books,
            rolling_total_price=rolling_price,
            prev_books=lag.push(books),
        ))
    
    logger.debug(
        "Aggregated daily order metrics",
        days=len(metrics),
        orders=len(order_day),
        books=sum(books_per_day.values()),
    )
    return metrics
