"""
"View as user" session issuance, revocation and resolution
"""

from datetime import datetime, timedelta
from typing import Optional
import secrets
import uuid

from sqlmodel import Session, select
import structlog

from admin_console.core.config import get_settings
from admin_console.core.errors import NotFoundError, UnauthorizedError, ValidationError
from admin_console.core.permissions import Capability, require_capability
from admin_console.models.account import Account
from admin_console.models.app_user import AppUser
from admin_console.models.view_as_session import ViewAsSession
from admin_console.models.types import utcnow
from admin_console.schemas.account import AccountRead
from admin_console.schemas.token import CallerIdentity
from admin_console.schemas.user import UserResponse
from admin_console.schemas.view_as import ViewAsSessionCreated, ViewAsSessionInfo

logger = structlog.get_logger(__name__)
settings = get_settings()


def generate_session_token() -> str:
    return secrets.token_urlsafe(32)


def issue_view_as_session(
    session: Session,
    identity: Optional[CallerIdentity],
    account_id: uuid.UUID,
    user_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> ViewAsSessionCreated:
    """Grant the calling super-admin a time-boxed view of one user of one account"""
    admin = require_capability(identity, Capability.VIEW_AS)

    account = session.get(Account, account_id)
    if not account:
        raise NotFoundError("Account not found")

    user = session.get(AppUser, user_id)
    if not user:
        raise NotFoundError("User not found")
    if user.account_id != account.id:
        raise ValidationError("User does not belong to this account")

    now = now or utcnow()
    view_as = ViewAsSession(
        super_admin_id=admin.user_id,
        viewing_account_id=account.id,
        viewing_user_id=user.id,
        session_token=generate_session_token(),
        expires_at=now + timedelta(hours=settings.VIEW_AS_SESSION_HOURS),
        is_active=True,
        created_at=now,
    )
    session.add(view_as)
    session.commit()
    session.refresh(view_as)

    logger.info(f"View-as session {view_as.id} issued by {admin.user_id} for user {user.id} of account {account.id}")

    return ViewAsSessionCreated(
        session_token=view_as.session_token,
        expires_at=view_as.expires_at,
        account_name=account.name,
        user_name=user.full_name,
        user_role=user.role,
    )


def end_view_as_session(session: Session, identity: Optional[CallerIdentity], session_token: str) -> str:
    """Revoke a session owned by the caller; ending an ended session is a no-op"""
    admin = require_capability(identity, Capability.VIEW_AS)

    view_as = session.exec(
        select(ViewAsSession).where(ViewAsSession.session_token == session_token)
    ).first()
    if not view_as:
        raise NotFoundError("Session not found")
    if view_as.super_admin_id != admin.user_id:
        raise UnauthorizedError("Invalid session")

    if view_as.end():
        session.add(view_as)
        session.commit()
        logger.info(f"View-as session {view_as.id} ended by {admin.user_id}")
    else:
        logger.debug(f"View-as session {view_as.id} already ended")

    return "View As User session ended"


def resolve_view_as_session(
    session: Session,
    identity: Optional[CallerIdentity],
    session_token: str,
    now: Optional[datetime] = None,
) -> Optional[ViewAsSessionInfo]:
    """Account and user behind a live session owned by the caller, else None

    Expiry is evaluated here against ``now``; it is never written back.
    """
    admin = require_capability(identity, Capability.VIEW_AS)

    view_as = session.exec(
        select(ViewAsSession).where(ViewAsSession.session_token == session_token)
    ).first()
    if not view_as or view_as.super_admin_id != admin.user_id:
        return None
    if not view_as.is_live(now):
        return None

    account = session.get(Account, view_as.viewing_account_id)
    user = session.get(AppUser, view_as.viewing_user_id)
    if not account or not user:
        return None

    return ViewAsSessionInfo(
        account=AccountRead.model_validate(account),
        user=UserResponse.model_validate(user),
        session_token=view_as.session_token,
        expires_at=view_as.expires_at,
    )
