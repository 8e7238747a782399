"""
Gravity Books Analytics

Calendar dimension and calendar-backed daily order reporting for the
Gravity Books bookstore database.
"""

__version__ = "1.0.0"
