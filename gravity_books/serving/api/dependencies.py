"""
Request-scoped dependencies
"""

from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from gravity_books.database.connection import session_scope


def get_session(request: Request) -> Generator[Session, None, None]:
    """Session bound to the application's engine, closed after the request"""
    with session_scope(request.app.state.engine) as session:
        yield session
