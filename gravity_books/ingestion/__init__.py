"""
Data Ingestion Module
"""
from .seed_db import rebuild_calendar, seed_demo_data

__all__ = [
    "rebuild_calendar",
    "seed_demo_data",
]
