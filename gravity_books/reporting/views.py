"""
Visualization Views

Read-only flat tables over the bookstore schema, shaped for a BI tool.
Every view returns a polars DataFrame; prices are converted to floats.
"""

from decimal import Decimal
from typing import Callable, Dict

import polars as pl
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from gravity_books.database.models import (
    Address,
    Author,
    Book,
    BookAuthor,
    Country,
    CustomerOrder,
    OrderLine,
)
from gravity_books.exceptions import DataAccessError

DEFAULT_COUNTRY = "United States of America"


def _to_frame(session: Session, stmt: Select) -> pl.DataFrame:
    try:
        result = session.execute(stmt)
        columns = list(result.keys())
        rows = [
            {
                column: float(value) if isinstance(value, Decimal) else value
                for column, value in zip(columns, row)
            }
            for row in result
        ]
    except SQLAlchemyError as e:
        raise DataAccessError(f"View query failed: {e}") from e
    
    if not rows:
        return pl.DataFrame(schema=columns)
    return pl.DataFrame(rows, infer_schema_length=None)


def book_author_catalog(session: Session) -> pl.DataFrame:
    """Every author/book pairing, ordered by title"""
    stmt = (
        select(
            Author.author_id,
            Author.author_name,
            Book.book_id,
            Book.title,
            Book.isbn13,
            Book.num_pages,
            Book.publication_date,
        )
        .join(BookAuthor, BookAuthor.author_id == Author.author_id)
        .join(Book, Book.book_id == BookAuthor.book_id)
        .order_by(Book.title, Author.author_name)
    )
    return _to_frame(session, stmt)


def book_author_orders(session: Session) -> pl.DataFrame:
    """
    One row per author, book and order line combination.
    
    Books without authors or orders still appear with nulls in those columns.
    An author appears once for each ordered copy of each of their books.
    """
    stmt = (
        select(
            Author.author_id,
            Author.author_name,
            Book.book_id,
            Book.title,
            Book.publication_date,
            OrderLine.order_id,
            OrderLine.price,
            CustomerOrder.order_date,
            CustomerOrder.dest_address_id,
        )
        .select_from(Book)
        .outerjoin(BookAuthor, BookAuthor.book_id == Book.book_id)
        .outerjoin(Author, Author.author_id == BookAuthor.author_id)
        .outerjoin(OrderLine, OrderLine.book_id == Book.book_id)
        .outerjoin(CustomerOrder, CustomerOrder.order_id == OrderLine.order_id)
        # Unattributed books sort last
        .order_by(Author.author_name.is_(None), Author.author_name, Book.title, OrderLine.line_id)
    )
    return _to_frame(session, stmt)


def book_orders(session: Session) -> pl.DataFrame:
    """Every book with its order lines and orders; unordered books included"""
    stmt = (
        select(
            Book.book_id,
            Book.title,
            Book.isbn13,
            Book.publication_date,
            OrderLine.line_id,
            OrderLine.order_id,
            OrderLine.price,
            CustomerOrder.order_date,
            CustomerOrder.dest_address_id,
        )
        .select_from(Book)
        .outerjoin(OrderLine, OrderLine.book_id == Book.book_id)
        .outerjoin(CustomerOrder, CustomerOrder.order_id == OrderLine.order_id)
        .order_by(Book.book_id, OrderLine.line_id)
    )
    return _to_frame(session, stmt)


def order_details(session: Session) -> pl.DataFrame:
    """Orders joined to their lines, ordered by order date"""
    stmt = (
        select(
            CustomerOrder.order_id,
            CustomerOrder.order_date,
            CustomerOrder.customer_id,
            CustomerOrder.dest_address_id,
            OrderLine.line_id,
            OrderLine.book_id,
            OrderLine.price,
        )
        .join(OrderLine, OrderLine.order_id == CustomerOrder.order_id)
        .order_by(CustomerOrder.order_date, CustomerOrder.order_id, OrderLine.line_id)
    )
    return _to_frame(session, stmt)


def orders_by_city(session: Session, country: str = DEFAULT_COUNTRY) -> pl.DataFrame:
    """Order lines shipped to each city of one country, busiest city first"""
    line_count = func.count(OrderLine.order_id).label("order_line_count")
    stmt = (
        select(Address.city, line_count)
        .select_from(OrderLine)
        .join(CustomerOrder, CustomerOrder.order_id == OrderLine.order_id)
        .join(Address, Address.address_id == CustomerOrder.dest_address_id)
        .join(Country, Country.country_id == Address.country_id)
        .where(Country.country_name == country)
        .group_by(Address.city)
        .order_by(line_count.desc(), Address.city)
    )
    return _to_frame(session, stmt)


VIEWS: Dict[str, Callable[..., pl.DataFrame]] = {
    "book-authors": book_author_catalog,
    "book-author-orders": book_author_orders,
    "book-orders": book_orders,
    "order-details": order_details,
    "orders-by-city": orders_by_city,
}


def run_view(session: Session, name: str, **params) -> pl.DataFrame:
    """
    Run a named view.
    
    Raises:
        KeyError: If no view has that name
    """
    try:
        view = VIEWS[name]
    except KeyError:
        raise KeyError(f"Unknown view {name!r}; available: {', '.join(sorted(VIEWS))}") from None
    return view(session, **params)
