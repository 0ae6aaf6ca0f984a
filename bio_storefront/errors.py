"""
Domain Errors

Every failure a service can surface to a caller. The HTTP layer maps each
class onto its status code and renders ``{"error": message}``.
"""

from typing import Any, Dict, Optional


class StorefrontError(Exception):
    """Base class for all domain errors"""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        payload.update(self.details)
        return payload


class ValidationError(StorefrontError):
    """Missing or malformed input"""
    status_code = 400


class UnauthorizedError(StorefrontError):
    """No credential supplied where one is required"""
    status_code = 401


class ForbiddenError(StorefrontError):
    """Credential present but it does not own the resource"""
    status_code = 403


class NotFoundError(StorefrontError):
    """Referenced page, component, sale or user does not exist"""
    status_code = 404


class UnexpectedError(StorefrontError):
    """Store or network failure"""
    status_code = 500
