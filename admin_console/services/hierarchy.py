"""
Franchise hierarchy: structural validation and sub-account management
"""

from typing import List, Optional
import uuid

from sqlmodel import Session, func, select
import structlog

from admin_console.core.errors import InvariantViolation, NotFoundError, UnauthorizedError, ValidationError
from admin_console.core.permissions import Capability, require_capability, require_superadmin
from admin_console.models.account import Account
from admin_console.models.app_user import AppUser
from admin_console.models.plan import AccountType, Plan
from admin_console.models.types import utcnow
from admin_console.schemas.account import AccountDetail, FranchiseHierarchy, FranchiseSummary
from admin_console.schemas.token import CallerIdentity

logger = structlog.get_logger(__name__)


def validate_parent(session: Session, account_type: AccountType, parent_id: Optional[uuid.UUID]) -> Optional[Account]:
    """Check that ``parent_id`` may parent an account of ``account_type``"""
    if parent_id is None:
        return None

    parent = session.get(Account, parent_id)
    if not parent or not parent.is_franchise():
        raise InvariantViolation("Invalid parent account: parent must be an existing franchise account")

    if AccountType(account_type) == AccountType.FRANCHISE:
        raise InvariantViolation("Franchise accounts cannot be nested under another franchise")

    return parent


def validate_plan(session: Session, account_type: AccountType, plan_id: uuid.UUID) -> Plan:
    """Check that the plan exists and is scoped to ``account_type``"""
    plan = session.get(Plan, plan_id)
    if not plan:
        raise NotFoundError("Plan not found")

    if plan.type != AccountType(account_type):
        raise ValidationError(
            f"Cannot assign {AccountType(plan.type).value} plan to {AccountType(account_type).value} account"
        )

    return plan


def validate_hierarchy_and_plan(
    session: Session,
    account_type: AccountType,
    plan_id: Optional[uuid.UUID] = None,
    parent_id: Optional[uuid.UUID] = None,
) -> Optional[Plan]:
    """Gate run before every account-creating or plan-reassigning mutation

    Reads only; the same inputs against the same store state always give the
    same decision. Returns the validated plan when one was supplied.
    """
    validate_parent(session, account_type, parent_id)
    if plan_id is None:
        return None
    return validate_plan(session, account_type, plan_id)


def count_users(session: Session, account_id: uuid.UUID) -> int:
    return session.exec(
        select(func.count()).select_from(AppUser).where(AppUser.account_id == account_id)
    ).one()


def get_franchise(session: Session, franchise_id: uuid.UUID) -> Account:
    franchise = session.get(Account, franchise_id)
    if not franchise:
        raise NotFoundError("Account not found")
    if not franchise.is_franchise():
        raise InvariantViolation("Account is not a franchise")
    return franchise


def count_sub_accounts(session: Session, franchise_id: uuid.UUID) -> int:
    return session.exec(
        select(func.count()).select_from(Account).where(Account.parent_id == franchise_id)
    ).one()


def ensure_sub_account_capacity(session: Session, franchise: Account) -> None:
    """Refuse to attach another sub-account once the franchise quota is used up"""
    limit = int(franchise.limits.get("subAccounts", 0))
    current = count_sub_accounts(session, franchise.id)
    if limit and current >= limit:
        raise InvariantViolation(f"Franchise has reached the maximum number of sub-accounts ({limit})")


def _detail(session: Session, account: Account) -> AccountDetail:
    detail = AccountDetail.model_validate(account)
    detail.user_count = count_users(session, account.id)
    return detail


def get_franchise_hierarchy(
    session: Session,
    identity: CallerIdentity,
    franchise_id: uuid.UUID,
) -> FranchiseHierarchy:
    """Franchise with all its sub-accounts and aggregated user counts"""
    require_capability(identity, Capability.FRANCHISE_MANAGE, account_id=franchise_id)
    franchise = get_franchise(session, franchise_id)

    sub_accounts = session.exec(
        select(Account).where(Account.parent_id == franchise_id).order_by(Account.created_at)
    ).all()

    franchise_detail = _detail(session, franchise)
    sub_details = [_detail(session, sub) for sub in sub_accounts]

    return FranchiseHierarchy(
        franchise=franchise_detail,
        sub_accounts=sub_details,
        total_sub_accounts=len(sub_details),
        total_users=franchise_detail.user_count + sum(sub.user_count for sub in sub_details),
    )


def list_franchise_accounts(session: Session, identity: CallerIdentity) -> List[FranchiseSummary]:
    """Every franchise with its sub-account and user counts"""
    require_superadmin(identity)

    franchises = session.exec(
        select(Account).where(Account.type == AccountType.FRANCHISE).order_by(Account.name)
    ).all()

    summaries = []
    for franchise in franchises:
        sub_ids = session.exec(select(Account.id).where(Account.parent_id == franchise.id)).all()
        direct_users = count_users(session, franchise.id)

        summary = FranchiseSummary.model_validate(franchise)
        summary.sub_account_count = len(sub_ids)
        summary.direct_user_count = direct_users
        summary.total_user_count = direct_users + sum(count_users(session, sub_id) for sub_id in sub_ids)
        summaries.append(summary)

    return summaries


def list_available_individual_accounts(session: Session, identity: CallerIdentity) -> List[AccountDetail]:
    """Standalone individual accounts, the only candidates for ``convert_to_sub_account``"""
    require_superadmin(identity)

    accounts = session.exec(
        select(Account)
        .where(Account.type == AccountType.INDIVIDUAL, Account.parent_id.is_(None))
        .order_by(Account.name)
    ).all()
    return [_detail(session, account) for account in accounts]


def convert_to_sub_account(
    session: Session,
    identity: CallerIdentity,
    individual_account_id: uuid.UUID,
    franchise_account_id: uuid.UUID,
) -> Account:
    """Attach a standalone individual account to a franchise"""
    require_superadmin(identity)

    account = session.get(Account, individual_account_id)
    if not account:
        raise NotFoundError("Account not found")
    if account.type != AccountType.INDIVIDUAL:
        raise InvariantViolation("Account is not an individual account")
    if account.is_sub_account():
        raise InvariantViolation("Account is already part of a franchise")

    franchise = get_franchise(session, franchise_account_id)
    ensure_sub_account_capacity(session, franchise)

    account.parent_id = franchise.id
    account.updated_at = utcnow()
    session.add(account)
    session.commit()
    session.refresh(account)

    logger.info(f"Account {account.id} joined franchise {franchise.id}")
    return account


def remove_from_franchise(
    session: Session,
    identity: CallerIdentity,
    sub_account_id: uuid.UUID,
) -> Account:
    """Detach a sub-account; it becomes a standalone individual account"""
    account = session.get(Account, sub_account_id)
    if not account:
        raise NotFoundError("Account not found")
    if not account.is_sub_account():
        raise ValidationError("Account is not part of a franchise")

    require_capability(identity, Capability.FRANCHISE_MANAGE, account_id=account.parent_id)

    previous_parent = account.parent_id
    account.parent_id = None
    account.updated_at = utcnow()
    session.add(account)
    session.commit()
    session.refresh(account)

    logger.info(f"Account {account.id} removed from franchise {previous_parent}")
    return account


def transfer_sub_account(
    session: Session,
    identity: CallerIdentity,
    sub_account_id: uuid.UUID,
    new_franchise_id: uuid.UUID,
) -> Account:
    """Move a sub-account to a different franchise"""
    require_superadmin(identity)

    account = session.get(Account, sub_account_id)
    if not account:
        raise NotFoundError("Sub-account not found")
    if not account.is_sub_account():
        raise ValidationError("Account is not part of a franchise")

    new_franchise = get_franchise(session, new_franchise_id)
    if new_franchise.id == account.parent_id:
        raise ValidationError("Account already belongs to this franchise")
    ensure_sub_account_capacity(session, new_franchise)

    previous_parent = account.parent_id
    account.parent_id = new_franchise.id
    account.updated_at = utcnow()
    session.add(account)
    session.commit()
    session.refresh(account)

    logger.info(f"Account {account.id} transferred from {previous_parent} to {new_franchise.id}")
    return account


def get_account_hierarchy_path(
    session: Session,
    identity: CallerIdentity,
    account_id: uuid.UUID,
) -> List[Account]:
    """Ancestors first, the account itself last"""
    account = session.get(Account, account_id)
    if not account:
        raise NotFoundError("Account not found")

    if not identity.is_superadmin and identity.account_id not in {account.id, account.parent_id}:
        raise UnauthorizedError("Insufficient permissions for this account")

    path = [account]
    seen = {account.id}
    current = account
    while current.parent_id is not None and current.parent_id not in seen:
        parent = session.get(Account, current.parent_id)
        if parent is None:
            break
        path.insert(0, parent)
        seen.add(parent.id)
        current = parent

    return path
