"""
Reporting Module
"""
from .daily_report import build_daily_report, export_report, report_to_frame, write_frame
from .views import VIEWS, run_view

__all__ = [
    "build_daily_report",
    "export_report",
    "report_to_frame",
    "write_frame",
    "VIEWS",
    "run_view",
]
