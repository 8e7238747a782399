"""
Database Models - Gravity Books Schema

Declarative models for the bookstore database and the calendar dimension.

Dimension Tables:
- Calendar: one row per calendar day with derived date attributes

Bookstore Tables (owned by the order-management system, read-only here):
- Author, Book, BookAuthor: catalog
- Country, Address: shipping destinations
- CustomerOrder, OrderLine: orders and their line items
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# DIMENSION TABLES
# =============================================================================

class Calendar(Base):
    """
    Calendar Dimension Table
    
    One row per day between the configured start and end dates, with no gaps.
    Rebuilt in full by ``rebuild_calendar``; never updated in place.
    Holiday columns are reserved for later enrichment.
    """
    __tablename__ = "calendar"
    
    calendar_date: Mapped[date] = mapped_column(Date, primary_key=True)
    calendar_day: Mapped[int] = mapped_column(Integer, nullable=False)
    calendar_month: Mapped[int] = mapped_column(Integer, nullable=False)
    calendar_quarter: Mapped[int] = mapped_column(Integer, nullable=False)
    calendar_year: Mapped[int] = mapped_column(Integer, nullable=False)
    day_of_week_num: Mapped[int] = mapped_column(Integer, nullable=False)  # 1=Sunday
    day_of_week_name: Mapped[str] = mapped_column(String(10), nullable=False)
    date_num: Mapped[str] = mapped_column(String(8), nullable=False)  # YYYYMMDD
    quarter_cd: Mapped[str] = mapped_column(String(6), nullable=False)  # 2020Q1
    month_name_cd: Mapped[str] = mapped_column(String(3), nullable=False)
    full_month_name: Mapped[str] = mapped_column(String(10), nullable=False)
    holiday_name: Mapped[Optional[str]] = mapped_column(String(50))
    holiday_flag: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    
    __table_args__ = (
        Index("ix_calendar_year_month", "calendar_year", "calendar_month"),
    )


# =============================================================================
# CATALOG TABLES
# =============================================================================

class Author(Base):
    """Book author"""
    __tablename__ = "author"
    
    author_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    author_name: Mapped[str] = mapped_column(String(400), nullable=False)
    
    books: Mapped[List["BookAuthor"]] = relationship(back_populates="author")


class Book(Base):
    """Book in the store catalog"""
    __tablename__ = "book"
    
    book_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(400), nullable=False)
    isbn13: Mapped[Optional[str]] = mapped_column(String(13))
    num_pages: Mapped[Optional[int]] = mapped_column(Integer)
    publication_date: Mapped[Optional[date]] = mapped_column(Date)
    
    authors: Mapped[List["BookAuthor"]] = relationship(back_populates="book")
    order_lines: Mapped[List["OrderLine"]] = relationship(back_populates="book")


class BookAuthor(Base):
    """Association between books and their authors"""
    __tablename__ = "book_author"
    
    book_id: Mapped[int] = mapped_column(ForeignKey("book.book_id"), primary_key=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("author.author_id"), primary_key=True)
    
    book: Mapped["Book"] = relationship(back_populates="authors")
    author: Mapped["Author"] = relationship(back_populates="books")


# =============================================================================
# GEOGRAPHY TABLES
# =============================================================================

class Country(Base):
    """Destination country"""
    __tablename__ = "country"
    
    country_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    country_name: Mapped[str] = mapped_column(String(200), nullable=False)


class Address(Base):
    """Order destination address"""
    __tablename__ = "address"
    
    address_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    street_number: Mapped[Optional[str]] = mapped_column(String(10))
    street_name: Mapped[Optional[str]] = mapped_column(String(200))
    city: Mapped[Optional[str]] = mapped_column(String(100))
    country_id: Mapped[int] = mapped_column(ForeignKey("country.country_id"), nullable=False)
    
    country: Mapped["Country"] = relationship()


# =============================================================================
# ORDER TABLES
# =============================================================================

class CustomerOrder(Base):
    """Customer order header"""
    __tablename__ = "cust_order"
    
    order_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    customer_id: Mapped[Optional[int]] = mapped_column(Integer)
    dest_address_id: Mapped[Optional[int]] = mapped_column(ForeignKey("address.address_id"))
    
    lines: Mapped[List["OrderLine"]] = relationship(back_populates="order")
    
    __table_args__ = (
        Index("ix_cust_order_order_date", "order_date"),
    )


class OrderLine(Base):
    """Single book sold on an order"""
    __tablename__ = "order_line"
    
    line_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("cust_order.order_id"), nullable=False)
    book_id: Mapped[int] = mapped_column(ForeignKey("book.book_id"), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    
    order: Mapped["CustomerOrder"] = relationship(back_populates="lines")
    book: Mapped["Book"] = relationship(back_populates="order_lines")
    
    __table_args__ = (
        Index("ix_order_line_order_id", "order_id"),
    )
