"""
Synthetic Bookstore Data Generator

Generates a small, reproducible Gravity Books dataset for local exploration
and tests:
- Countries and destination addresses
- Authors, books and book/author links
- Customer orders with one or more order lines
"""

import random
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

import numpy as np
from faker import Faker

# =============================================================================
# CONFIGURATION
# =============================================================================

COUNTRIES = [
    "United States of America",
    "Canada",
    "United Kingdom",
    "Germany",
    "France",
    "Australia",
]

# Lines per order: most orders carry one or two books
LINES_PER_ORDER = ([1, 2, 3, 4, 5], [0.45, 0.30, 0.15, 0.07, 0.03])

Record = Dict[str, Any]


@dataclass
class BookstoreData:
    """Generated rows, keyed by table"""
    countries: List[Record] = field(default_factory=list)
    addresses: List[Record] = field(default_factory=list)
    authors: List[Record] = field(default_factory=list)
    books: List[Record] = field(default_factory=list)
    book_authors: List[Record] = field(default_factory=list)
    orders: List[Record] = field(default_factory=list)
    order_lines: List[Record] = field(default_factory=list)
    
    def tables(self) -> Dict[str, List[Record]]:
        """Rows in foreign-key insertion order"""
        return {
            "country": self.countries,
            "address": self.addresses,
            "author": self.authors,
            "book": self.books,
            "book_author": self.book_authors,
            "cust_order": self.orders,
            "order_line": self.order_lines,
        }


# =============================================================================
# GENERATORS
# =============================================================================

class AddressGenerator:
    """Generate countries and destination addresses"""
    
    def __init__(self, fake: Faker, rng: random.Random):
        self.fake = fake
        self.rng = rng
    
    def generate(self, n: int = 40):
        countries = [
            {"country_id": i, "country_name": name}
            for i, name in enumerate(COUNTRIES, start=1)
        ]
        # Small city pool so per-city counts are meaningful
        cities = [self.fake.city() for _ in range(max(3, n // 4))]
        addresses = [
            {
                "address_id": i,
                "street_number": self.fake.building_number(),
                "street_name": self.fake.street_name(),
                "city": self.rng.choice(cities),
                "country_id": self.rng.choice(countries)["country_id"],
            }
            for i in range(1, n + 1)
        ]
        return countries, addresses


class CatalogGenerator:
    """Generate authors, books and their associations"""
    
    def __init__(self, fake: Faker, rng: random.Random):
        self.fake = fake
        self.rng = rng
    
    def generate(self, n_books: int = 50, n_authors: int = 20):
        authors = [
            {"author_id": i, "author_name": self.fake.name()}
            for i in range(1, n_authors + 1)
        ]
        books = []
        book_authors = []
        for book_id in range(1, n_books + 1):
            books.append({
                "book_id": book_id,
                "title": self.fake.catch_phrase().title(),
                "isbn13": self.fake.isbn13(separator=""),
                "num_pages": self.rng.randint(80, 900),
                "publication_date": self.fake.date_between(
                    start_date=date(1950, 1, 1), end_date=date(2019, 12, 31)
                ),
            })
            # Some books have no recorded author
            if self.rng.random() < 0.9:
                n_links = 1 if self.rng.random() < 0.8 else 2
                for author in self.rng.sample(authors, k=min(n_links, len(authors))):
                    book_authors.append({"book_id": book_id, "author_id": author["author_id"]})
        return authors, books, book_authors


class OrderGenerator:
    """Generate orders and order lines"""
    
    def __init__(
        self,
        fake: Faker,
        rng: random.Random,
        np_rng: np.random.Generator,
        book_ids: List[int],
        address_ids: List[int],
    ):
        self.fake = fake
        self.rng = rng
        self.np_rng = np_rng
        self.book_ids = book_ids
        self.address_ids = address_ids
    
    def generate(self, n: int, start_date: date, end_date: date):
        window_start = datetime.combine(start_date, time.min)
        window_end = datetime.combine(end_date, time.max)
        choices, weights = LINES_PER_ORDER
        
        orders = []
        lines = []
        line_id = 1
        for order_id in range(1, n + 1):
            order_date = self.fake.date_time_between(start_date=window_start, end_date=window_end)
            orders.append({
                "order_id": order_id,
                "order_date": order_date.replace(microsecond=0),
                "customer_id": self.rng.randint(1, max(1, n // 2)),
                "dest_address_id": self.rng.choice(self.address_ids),
            })
            num_lines = int(self.np_rng.choice(choices, p=weights))
            for _ in range(num_lines):
                price = float(self.np_rng.uniform(0.99, 29.99))
                lines.append({
                    "line_id": line_id,
                    "order_id": order_id,
                    "book_id": self.rng.choice(self.book_ids),
                    "price": Decimal(f"{price:.2f}"),
                })
                line_id += 1
        return orders, lines


# =============================================================================
# MAIN GENERATOR
# =============================================================================

class BookstoreGenerator:
    """Reproducible generator for a complete bookstore dataset"""
    
    def __init__(self, seed: int = 42):
        self.seed = seed
        self.fake = Faker()
        self.fake.seed_instance(seed)
        self.rng = random.Random(seed)
        self.np_rng = np.random.default_rng(seed)
    
    def generate(
        self,
        n_orders: int = 200,
        start_date: date = date(2020, 1, 1),
        end_date: Optional[date] = None,
        n_books: int = 50,
        n_authors: int = 20,
        n_addresses: int = 40,
    ) -> BookstoreData:
        """Generate every table; orders are dated within [start_date, end_date]"""
        end_date = end_date or start_date + timedelta(days=364)
        
        countries, addresses = AddressGenerator(self.fake, self.rng).generate(n_addresses)
        authors, books, book_authors = CatalogGenerator(self.fake, self.rng).generate(n_books, n_authors)
        orders, lines = OrderGenerator(
            self.fake,
            self.rng,
            self.np_rng,
            book_ids=[b["book_id"] for b in books],
            address_ids=[a["address_id"] for a in addresses],
        ).generate(n_orders, start_date, end_date)
        
        return BookstoreData(
            countries=countries,
            addresses=addresses,
            authors=authors,
            books=books,
            book_authors=book_authors,
            orders=orders,
            order_lines=lines,
        )
