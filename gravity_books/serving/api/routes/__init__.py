"""
API Routes Module
"""
from .health import router as health_router
from .reports import router as reports_router
from .views import router as views_router

__all__ = [
    "health_router",
    "reports_router",
    "views_router",
]
