"""
Access token issuing and validation
"""
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from marketplace.config import settings
from marketplace.exceptions import AuthenticationError

Role = Literal['customer', 'vendor', 'admin']


class Principal(BaseModel):
    """Authenticated caller"""
    id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == 'admin'


def create_access_token(user_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    claims = {"sub": str(user_id), "role": role, "exp": expire}
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Principal:
    """
    Validate a token and return its principal

    Raises:
        AuthenticationError: If the token is invalid, expired or incomplete
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise AuthenticationError("Not authorized to access this route")

    subject = payload.get("sub")
    role = payload.get("role")
    if subject is None or role not in ('customer', 'vendor', 'admin'):
        raise AuthenticationError("Not authorized to access this route")
    try:
        return Principal(id=int(subject), role=role)
    except ValueError:
        raise AuthenticationError("Not authorized to access this route")
