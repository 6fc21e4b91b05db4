"""
JWT Authentication utilities
"""

from datetime import timedelta
from jose import JWTError, jwt
from typing import Dict, Optional
import uuid
from admin_console.core.config import get_settings
from admin_console.models.types import utcnow
from admin_console.schemas.token import TokenPayload

settings = get_settings()


def create_access_token(
    user_id: uuid.UUID,
    role: str,
    account_id: Optional[uuid.UUID] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create JWT access token with user claims"""
    if expires_delta:
        expire = utcnow() + expires_delta
    else:
        expire = utcnow() + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(user_id),
        "role": role,
        "account_id": str(account_id) if account_id else None,
        "exp": expire,
        "iat": utcnow(),
    }

    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> Optional[Dict]:
    """Decode and validate JWT token"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError:
        return None


def verify_token(token: str) -> Optional[uuid.UUID]:
    """Verify token and return user_id if valid"""
    payload = decode_access_token(token)
    if payload is None:
        return None

    # pydantic ValidationError is a ValueError
    try:
        claims = TokenPayload(**payload)
        return uuid.UUID(claims.sub)
    except ValueError:
        return None
