"""
Account user administration and the minimum-user invariant guard
"""

from typing import List
import uuid

from sqlmodel import Session, select
import structlog

from admin_console.core.errors import InvariantViolation, NotFoundError, ValidationError
from admin_console.core.permissions import Capability, require_capability
from admin_console.models.account import Account
from admin_console.models.app_user import AppUser, MembershipType, UserRole, UserStatus
from admin_console.models.plan import AccountType
from admin_console.models.types import utcnow
from admin_console.schemas.token import CallerIdentity
from admin_console.schemas.user import UserCreate, UserStats, UserUpdate
from admin_console.services.hierarchy import count_users

logger = structlog.get_logger(__name__)


def account_row_lock(account_id: uuid.UUID):
    """SELECT ... FOR UPDATE on the account; serialises concurrent member removals"""
    return select(Account).where(Account.id == account_id).with_for_update()


def ensure_user_removable(session: Session, user: AppUser) -> None:
    """Refuse to remove the last user of an account"""
    if user.account_id is None:
        return

    if count_users(session, user.account_id) <= 1:
        raise InvariantViolation("Cannot delete the last user of an account")


def _get_account(session: Session, account_id: uuid.UUID) -> Account:
    account = session.get(Account, account_id)
    if not account:
        raise NotFoundError("Account not found")
    return account


def _get_account_user(session: Session, user_id: uuid.UUID) -> AppUser:
    user = session.get(AppUser, user_id)
    if not user or user.account_id is None:
        raise NotFoundError("User not found")
    return user


def list_account_users(session: Session, identity: CallerIdentity, account_id: uuid.UUID) -> List[AppUser]:
    require_capability(identity, Capability.USERS_MANAGE, account_id=account_id)
    _get_account(session, account_id)

    return session.exec(
        select(AppUser).where(AppUser.account_id == account_id).order_by(AppUser.created_at)
    ).all()


def create_user(
    session: Session,
    identity: CallerIdentity,
    account_id: uuid.UUID,
    user_data: UserCreate,
) -> AppUser:
    """Add an invited user to an account, within the account's user quota"""
    require_capability(identity, Capability.USERS_MANAGE, account_id=account_id)
    account = _get_account(session, account_id)

    email = str(user_data.email).lower()
    if session.exec(select(AppUser.id).where(AppUser.email == email)).first() is not None:
        raise ValidationError("User with this email already exists")

    limit = account.user_limit()
    if limit and count_users(session, account_id) >= limit:
        raise InvariantViolation(f"Account has reached the maximum number of users ({limit})")

    user = AppUser(
        account_id=account.id,
        account_type=MembershipType(AccountType(account.type).value),
        email=email,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
        phone=user_data.phone,
        role=UserRole(user_data.role.value),
        status=UserStatus.INVITED,
    )
    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info(f"User created: {user.id} in account {account_id}")
    return user


def update_user(
    session: Session,
    identity: CallerIdentity,
    user_id: uuid.UUID,
    updates: UserUpdate,
) -> AppUser:
    user = _get_account_user(session, user_id)
    require_capability(identity, Capability.USERS_MANAGE, account_id=user.account_id)

    changes = updates.model_dump(exclude_unset=True, exclude_none=True)
    if "role" in changes:
        changes["role"] = UserRole(changes["role"])
    for key, value in changes.items():
        setattr(user, key, value)

    user.updated_at = utcnow()
    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info(f"User updated: {user_id}")
    return user


def delete_user(session: Session, identity: CallerIdentity, user_id: uuid.UUID) -> None:
    """Delete a user unless it is the last member of its account"""
    user = _get_account_user(session, user_id)
    require_capability(identity, Capability.USERS_MANAGE, account_id=user.account_id)
    session.exec(account_row_lock(user.account_id)).one()

    try:
        ensure_user_removable(session, user)
    except InvariantViolation:
        logger.warning(f"Refused to delete last user {user_id} of account {user.account_id}")
        raise

    session.delete(user)
    session.commit()
    logger.info(f"User deleted: {user_id}")


def get_user_stats(session: Session, identity: CallerIdentity, account_id: uuid.UUID) -> UserStats:
    users = list_account_users(session, identity, account_id)

    return UserStats(
        total=len(users),
        active=sum(1 for u in users if u.status == UserStatus.ACTIVE),
        invited=sum(1 for u in users if u.status == UserStatus.INVITED),
        suspended=sum(1 for u in users if u.status == UserStatus.SUSPENDED),
        org_admins=sum(1 for u in users if u.role == UserRole.ORGADMIN),
        client_users=sum(1 for u in users if u.role == UserRole.CLIENTUSER),
        email_verified=sum(1 for u in users if u.email_verified),
    )
