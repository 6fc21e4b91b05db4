"""
Authentication dependencies for FastAPI
"""

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session
from typing import Optional
import structlog

from admin_console.core.auth import verify_token
from admin_console.core.database import get_session
from admin_console.core.errors import UnauthorizedError
from admin_console.models.app_user import AppUser, UserStatus
from admin_console.schemas.token import CallerIdentity

logger = structlog.get_logger(__name__)
security = HTTPBearer(auto_error=False)


def resolve_identity(session: Session, token: Optional[str]) -> Optional[CallerIdentity]:
    """Map a bearer token onto the AppUser it names; None when it names nobody usable"""
    if not token:
        return None

    user_id = verify_token(token)
    if user_id is None:
        return None

    user = session.get(AppUser, user_id)
    if not user or user.status == UserStatus.SUSPENDED:
        return None

    return CallerIdentity(
        user_id=user.id,
        role=user.role,
        account_id=user.account_id,
        email=user.email,
    )


def get_optional_caller_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: Session = Depends(get_session),
) -> Optional[CallerIdentity]:
    """Caller identity, or None for anonymous or invalid credentials"""
    token = credentials.credentials if credentials else None
    return resolve_identity(session, token)


def get_caller_identity(
    identity: Optional[CallerIdentity] = Depends(get_optional_caller_identity),
) -> CallerIdentity:
    """Get the authenticated caller from the bearer token"""
    if identity is None:
        raise UnauthorizedError("Not authenticated")

    logger.debug(f"Caller authenticated: {identity.user_id}")
    return identity
