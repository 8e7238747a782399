"""
Data Generation Module
"""
from .generators import BookstoreData, BookstoreGenerator

__all__ = [
    "BookstoreData",
    "BookstoreGenerator",
]
