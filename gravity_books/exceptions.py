"""
Error taxonomy for calendar generation and order reporting.
"""

from datetime import date
from typing import Optional


class GravityBooksError(Exception):
    """Base class for all errors raised by this package"""


class InvalidRangeError(GravityBooksError, ValueError):
    """Start date falls after end date"""
    
    def __init__(self, start_date: date, end_date: date):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(f"Start date {start_date} is after end date {end_date}")


class DataAccessError(GravityBooksError):
    """Underlying data source is unreachable or returned malformed data"""


class MissingCalendarRangeError(GravityBooksError):
    """
    Requested dates, or order dates, fall outside the generated calendar.
    
    ``uncovered_dates`` lists the offending order dates when the error was
    raised for orders rather than for the requested report range.
    """
    
    def __init__(self, message: str, uncovered_dates: Optional[list] = None):
        self.uncovered_dates = uncovered_dates or []
        super().__init__(message)
