"""
API Routes Module
"""
from .health import router as health_router
from .public import router as public_router
from .pages import router as pages_router
from .components import router as components_router
from .analytics import router as analytics_router
from .sales import router as sales_router

__all__ = [
    "health_router",
    "public_router",
    "pages_router",
    "components_router",
    "analytics_router",
    "sales_router",
]
