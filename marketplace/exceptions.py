"""
Marketplace exceptions

Raised by the service layer; the API layer maps each class to its HTTP
status and the {success: false, message, errors?} error body.
"""
from typing import Any, List, Optional


class MarketplaceError(Exception):
    """Base exception for marketplace errors"""
    status_code = 500

    def __init__(self, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors


class ValidationError(MarketplaceError):
    """Malformed or semantically invalid input"""
    status_code = 400


class AuthenticationError(MarketplaceError):
    """Missing, invalid or expired credentials"""
    status_code = 401


class AuthorizationError(MarketplaceError):
    """Authenticated principal may not act on this resource"""
    status_code = 403


class NotFoundError(MarketplaceError):
    status_code = 404


class ProductNotFoundError(NotFoundError):
    pass


class OrderNotFoundError(NotFoundError):
    pass


class VendorNotFoundError(NotFoundError):
    pass


class ReviewNotFoundError(NotFoundError):
    pass


class StateError(MarketplaceError):
    """Operation not allowed in the current lifecycle state"""
    status_code = 400


class InvalidTransitionError(StateError):
    pass


class AvailabilityError(MarketplaceError):
    status_code = 400


class InsufficientAvailabilityError(AvailabilityError):
    """Requested quantity cannot be fulfilled"""
    pass


class ConflictError(MarketplaceError):
    """Resource already exists"""
    status_code = 409


class InternalError(MarketplaceError):
    """Store or transport failure"""
    status_code = 500
