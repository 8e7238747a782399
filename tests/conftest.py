"""
Test Suite Configuration
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Generator

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from gravity_books.config import Settings
from gravity_books.database.connection import create_db_engine, create_schema
from gravity_books.database.models import (
    Address,
    Author,
    Book,
    BookAuthor,
    Country,
    CustomerOrder,
    OrderLine,
)



@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(app_env="testing")


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """In-memory SQLite database with the full schema"""
    engine = create_db_engine("sqlite:///:memory:", echo=False)
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    """Session on the test database"""
    with Session(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def bookstore(session) -> Session:
    """
    Small bookstore dataset.
    
    2020-01-05: order 1 (10.00 + 5.00), order 2 (7.50)
    2020-01-12: order 3 (3.25)
    2020-02-01: order 4 (4.00)
    2020-02-02: order 5 (no lines)
    """
    session.add_all([
        Country(country_id=1, country_name="United States of America"),
        Country(country_id=2, country_name="Canada"),
    ])
    session.add_all([
        Address(address_id=1, street_number="12", street_name="Evergreen Terrace", city="Springfield", country_id=1),
        Address(address_id=2, street_number="7", street_name="Main Street", city="Shelbyville", country_id=1),
        Address(address_id=3, street_number="100", street_name="Queen Street", city="Toronto", country_id=2),
    ])
    session.add_all([
        Author(author_id=1, author_name="Ann Author"),
        Author(author_id=2, author_name="Bob Writer"),
    ])
    session.add_all([
        Book(book_id=1, title="Alpha", isbn13="9780000000001", num_pages=100, publication_date=date(2001, 1, 1)),
        Book(book_id=2, title="Beta", isbn13="9780000000002", num_pages=200, publication_date=date(2002, 2, 2)),
        Book(book_id=3, title="Gamma", isbn13="9780000000003", num_pages=300, publication_date=date(2003, 3, 3)),
    ])
    session.flush()
    session.add_all([
        BookAuthor(book_id=1, author_id=1),
        BookAuthor(book_id=2, author_id=1),
        BookAuthor(book_id=2, author_id=2),
    ])
    session.add_all([
        CustomerOrder(order_id=1, order_date=datetime(2020, 1, 5, 9, 30), customer_id=1, dest_address_id=1),
        CustomerOrder(order_id=2, order_date=datetime(2020, 1, 5, 18, 0), customer_id=2, dest_address_id=2),
        CustomerOrder(order_id=3, order_date=datetime(2020, 1, 12, 12, 0), customer_id=3, dest_address_id=3),
        CustomerOrder(order_id=4, order_date=datetime(2020, 2, 1, 8, 0), customer_id=1, dest_address_id=1),
        CustomerOrder(order_id=5, order_date=datetime(2020, 2, 2, 10, 0), customer_id=1, dest_address_id=1),
    ])
    session.flush()
    session.add_all([
        OrderLine(line_id=1, order_id=1, book_id=1, price=Decimal("10.00")),
        OrderLine(line_id=2, order_id=1, book_id=2, price=Decimal("5.00")),
        OrderLine(line_id=3, order_id=2, book_id=1, price=Decimal("7.50")),
        OrderLine(line_id=4, order_id=3, book_id=2, price=Decimal("3.25")),
        OrderLine(line_id=5, order_id=4, book_id=1, price=Decimal("4.00")),
    ])
    session.commit()
    return session
