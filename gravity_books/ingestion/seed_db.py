"""
Database Seeding

- rebuild_calendar: replace the calendar dimension in a single transaction
- seed_demo_data: load a generated bookstore dataset into an empty database
"""

from datetime import date
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import delete, func, insert, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from gravity_books.config import get_settings
from gravity_books.data.generators import BookstoreGenerator
from gravity_books.database.connection import create_schema
from gravity_books.database.models import Base, Calendar, CustomerOrder
from gravity_books.exceptions import DataAccessError
from gravity_books.transformation.calendar_builder import generate_calendar

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 1000


def execute_batch_insert(conn: Connection, table, records: List[Dict[str, Any]]) -> None:
    """Insert records in chunks on an open connection"""
    for i in range(0, len(records), CHUNK_SIZE):
        conn.execute(insert(table), records[i:i + CHUNK_SIZE])


def rebuild_calendar(
    engine: Engine,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> int:
    """
    Replace the calendar table with one row per day in [start_date, end_date].
    
    Rows are computed before touching the database. Deleting the old rows and
    inserting the new ones happen in one transaction, so readers see either
    the previous calendar or the complete new one.
    
    Args:
        engine: Target database
        start_date: First day (defaults to CALENDAR_START_DATE)
        end_date: Last day (defaults to CALENDAR_END_DATE, then today)
    
    Returns:
        Number of calendar rows written
    
    Raises:
        InvalidRangeError: If start_date is after end_date
        DataAccessError: If the replace fails; the previous calendar is kept
    """
    settings = get_settings()
    start = start_date or settings.calendar.start_date
    end = end_date or settings.calendar.end_date or date.today()
    
    rows = [day.to_dict() for day in generate_calendar(start, end)]
    table = Calendar.__table__
    
    logger.info("Rebuilding calendar", start_date=str(start), end_date=str(end), rows=len(rows))
    try:
        table.create(engine, checkfirst=True)
        with engine.begin() as conn:
            conn.execute(delete(table))
            execute_batch_insert(conn, table, rows)
    except SQLAlchemyError as e:
        logger.error("Calendar rebuild failed, previous calendar kept", error=str(e))
        raise DataAccessError(f"Calendar rebuild failed: {e}") from e
    
    logger.info("Calendar rebuilt", rows=len(rows))
    return len(rows)


def seed_demo_data(
    engine: Engine,
    n_orders: int = 200,
    seed: int = 42,
    start_date: date = date(2020, 1, 1),
    end_date: Optional[date] = None,
) -> Dict[str, int]:
    """
    Create the schema and load a generated bookstore dataset.
    
    Returns:
        Row count per table
    
    Raises:
        DataAccessError: If the database already holds orders or loading fails
    """
    create_schema(engine)
    data = BookstoreGenerator(seed=seed).generate(
        n_orders=n_orders, start_date=start_date, end_date=end_date
    )
    
    counts = {}
    try:
        with engine.begin() as conn:
            existing = conn.execute(select(func.count()).select_from(CustomerOrder)).scalar_one()
            if existing:
                raise DataAccessError(
                    f"Refusing to seed: cust_order already holds {existing} rows"
                )
            for name, records in data.tables().items():
                execute_batch_insert(conn, Base.metadata.tables[name], records)
                counts[name] = len(records)
                logger.info(f"Inserted {len(records)} records into {name}")
    except SQLAlchemyError as e:
        logger.error("Seeding failed", error=str(e))
        raise DataAccessError(f"Seeding failed: {e}") from e
    
    return counts
