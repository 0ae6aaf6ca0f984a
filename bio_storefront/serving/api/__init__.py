"""
REST API

FastAPI routers, middleware and error mapping.
"""

from bio_storefront.serving.api.errors import register_exception_handlers
from bio_storefront.serving.api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "register_exception_handlers",
]
