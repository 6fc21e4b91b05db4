"""
Account provisioning workflow

Validates hierarchy and plan, allocates a slug, creates the account and its
mandatory first user (orgadmin, invited). The account and the user are
written in a single transaction: either both exist afterwards or neither does.
"""

from datetime import datetime, timedelta
from typing import Optional
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
import structlog

from admin_console.core.config import get_settings
from admin_console.core.errors import InvariantViolation, ValidationError
from admin_console.core.permissions import Capability, require_capability, require_superadmin
from admin_console.models.account import Account, AccountStatus, PlanStatus
from admin_console.models.app_user import AppUser, MembershipType, UserRole, UserStatus
from admin_console.models.plan import AccountType, Plan
from admin_console.models.types import utcnow
from admin_console.schemas.account import (
    AccountCreate,
    AccountLimits,
    AdminUserProfile,
    ProvisionResult,
    SubAccountCreate,
)
from admin_console.schemas.token import CallerIdentity
from admin_console.services.hierarchy import (
    ensure_sub_account_capacity,
    get_franchise,
    validate_hierarchy_and_plan,
)
from admin_console.services.slugs import allocate_slug, slug_candidates

logger = structlog.get_logger(__name__)
settings = get_settings()


def snapshot_limits(plan: Plan, account_type: AccountType) -> dict:
    """Quota snapshot captured when a plan is assigned"""
    sub_accounts = 0
    if AccountType(account_type) == AccountType.FRANCHISE:
        sub_accounts = plan.max_sub_accounts() or settings.DEFAULT_FRANCHISE_SUB_ACCOUNTS

    return AccountLimits(users=plan.max_users(), sub_accounts=sub_accounts).model_dump(by_alias=True)


def create_first_user(session: Session, account: Account, profile: AdminUserProfile) -> AppUser:
    """Create the orgadmin that establishes the one-user minimum"""
    user = AppUser(
        account_id=account.id,
        account_type=MembershipType(AccountType(account.type).value),
        email=str(profile.email).lower(),
        first_name=profile.first_name,
        last_name=profile.last_name,
        phone=profile.phone,
        role=UserRole.ORGADMIN,
        status=UserStatus.INVITED,
        email_verified=False,
    )
    session.add(user)
    session.flush()
    return user


def _insert_account(session: Session, account: Account, name: str) -> Account:
    """Insert with a freshly allocated slug, retrying on slug conflicts

    Nothing else has been written in this transaction yet, so a rollback on
    conflict discards only the failed insert.
    """
    candidates = slug_candidates(name)

    for attempt in range(1, settings.SLUG_INSERT_ATTEMPTS + 1):
        account.slug = allocate_slug(session, candidates=candidates)
        session.add(account)
        try:
            session.flush()
            return account
        except IntegrityError:
            session.rollback()
            logger.warning(f"Slug {account.slug} taken concurrently, retrying (attempt {attempt})")

    raise InvariantViolation(f"Could not allocate a unique slug for '{name}'")


def provision_account(
    session: Session,
    identity: CallerIdentity,
    request: AccountCreate,
    now: Optional[datetime] = None,
) -> ProvisionResult:
    """Create an account with its trial and its first admin user as one unit"""
    creator = require_superadmin(identity)
    return _provision(session, creator, request, now)


def create_sub_account(
    session: Session,
    identity: CallerIdentity,
    franchise_id: uuid.UUID,
    request: SubAccountCreate,
    now: Optional[datetime] = None,
) -> ProvisionResult:
    """Provision an individual account under a franchise"""
    creator = require_capability(identity, Capability.FRANCHISE_MANAGE, account_id=franchise_id)
    get_franchise(session, franchise_id)

    account_request = AccountCreate(
        type=AccountType.INDIVIDUAL,
        name=request.name,
        plan_id=request.plan_id,
        admin_user=request.admin_user,
        location=request.location,
        parent_id=franchise_id,
        trial_days=request.trial_days,
    )
    return _provision(session, creator, account_request, now)


def _provision(
    session: Session,
    creator: CallerIdentity,
    request: AccountCreate,
    now: Optional[datetime],
) -> ProvisionResult:
    plan = validate_hierarchy_and_plan(session, request.type, request.plan_id, request.parent_id)
    if request.parent_id is not None:
        ensure_sub_account_capacity(session, get_franchise(session, request.parent_id))

    email = str(request.admin_user.email).lower()
    if session.exec(select(AppUser.id).where(AppUser.email == email)).first() is not None:
        raise ValidationError("User with this email already exists")

    now = now or utcnow()
    trial_days = request.trial_days or settings.DEFAULT_TRIAL_DAYS
    trial_ends_at = now + timedelta(days=trial_days)
    limits = snapshot_limits(plan, request.type)
    profile = request.admin_user

    account = Account(
        type=request.type,
        name=request.name,
        slug="",
        parent_id=request.parent_id,
        plan_id=plan.id,
        plan_status=PlanStatus.TRIAL,
        trial_ends_at=trial_ends_at,
        status=AccountStatus.ACTIVE,
        limits=limits,
        primary_contact={
            "name": f"{profile.first_name} {profile.last_name}",
            "email": email,
            "phone": profile.phone,
        },
        location=request.location.model_dump(by_alias=True) if request.location else None,
        created_by=creator.user_id,
        created_at=now,
    )

    try:
        _insert_account(session, account, request.name)
        admin_user = create_first_user(session, account, profile)
        session.commit()
    except Exception:
        session.rollback()
        logger.error(f"Provisioning of account '{request.name}' failed, rolled back")
        raise

    logger.info(f"Account provisioned: {account.id} ({account.slug}) with admin user {admin_user.id}")

    return ProvisionResult(
        account_id=account.id,
        admin_user_id=admin_user.id,
        slug=account.slug,
        trial_ends_at=trial_ends_at,
        message=f'Account "{request.name}" created with {trial_days}-day trial and admin user',
    )
