"""
Request dependencies: authentication and service wiring
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from marketplace.config import settings
from marketplace.database import get_db
from marketplace.exceptions import AuthenticationError, AuthorizationError
from marketplace.publishers.event_publisher import EventPublisher
from marketplace.security import Principal, decode_access_token
from marketplace.services.order_service import OrderService


def get_current_principal(request: Request) -> Principal:
    """Authenticate the caller from a Bearer token or the auth cookie"""
    token = None
    authorization = request.headers.get("Authorization")
    if authorization and authorization.startswith("Bearer "):
        token = authorization.split(" ", 1)[1].strip()
    elif request.cookies.get(settings.AUTH_COOKIE_NAME):
        token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    
    if not token:
        raise AuthenticationError("Not authorized to access this route - no token provided")
    return decode_access_token(token)


def require_roles(*roles: str):
    """Dependency factory granting access to the given roles only"""
    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise AuthorizationError(f"User role {principal.role} is not authorized to access this route")
        return principal
    return dependency


def get_event_publisher() -> EventPublisher:
    return EventPublisher()


def get_order_service(
    db: Session = Depends(get_db),
    event_publisher: EventPublisher = Depends(get_event_publisher)
) -> OrderService:
    """Dependency to get OrderService instance"""
    return OrderService(db, event_publisher)
