"""
Account administration: plan reassignment, status, trial and billing updates
"""

from datetime import datetime
from typing import List, Optional
import uuid

from sqlmodel import Session, func, select
import structlog

from admin_console.core.errors import InvariantViolation, NotFoundError
from admin_console.core.permissions import require_superadmin
from admin_console.models.account import Account, AccountStatus, PlanStatus
from admin_console.models.app_user import AppUser
from admin_console.models.plan import AccountType, Plan
from admin_console.models.types import utcnow
from admin_console.schemas.account import (
    AccountDetail,
    PlatformStats,
    TrialSettingsUpdate,
    TrialSummary,
    TrialUpdateResult,
)
from admin_console.schemas.plan import PlanRead
from admin_console.schemas.token import CallerIdentity
from admin_console.services.hierarchy import count_sub_accounts, count_users, validate_hierarchy_and_plan
from admin_console.services.provisioning import snapshot_limits
from admin_console.services.trial import command_from_update, compute_trial_transition

logger = structlog.get_logger(__name__)


def _get_account(session: Session, account_id: uuid.UUID) -> Account:
    account = session.get(Account, account_id)
    if not account:
        raise NotFoundError("Account not found")
    return account


def describe_account(session: Session, account: Account, now: Optional[datetime] = None) -> AccountDetail:
    """Account with its plan, member count and trial summary"""
    detail = AccountDetail.model_validate(account)
    plan = session.get(Plan, account.plan_id)
    detail.plan = PlanRead.model_validate(plan) if plan else None
    detail.user_count = count_users(session, account.id)
    summary = account.trial_summary(now)
    if summary:
        detail.trial_status = TrialSummary.model_validate(summary)
    return detail


def get_account(
    session: Session,
    identity: CallerIdentity,
    account_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> AccountDetail:
    require_superadmin(identity)
    return describe_account(session, _get_account(session, account_id), now)


def list_accounts(
    session: Session,
    identity: CallerIdentity,
    limit: Optional[int] = None,
    now: Optional[datetime] = None,
) -> List[AccountDetail]:
    require_superadmin(identity)

    query = select(Account).order_by(Account.created_at)
    if limit:
        query = query.limit(limit)

    return [describe_account(session, account, now) for account in session.exec(query).all()]


def _reassign_plan(session: Session, account: Account, plan_id: uuid.UUID) -> Plan:
    plan = validate_hierarchy_and_plan(session, account.type, plan_id)
    limits = snapshot_limits(plan, account.type)

    if account.is_franchise():
        quota = limits["subAccounts"]
        current = count_sub_accounts(session, account.id)
        if current > quota:
            raise InvariantViolation(
                f"Plan \"{plan.name}\" allows {quota} sub-account(s) but the franchise has {current}"
            )

    account.plan_id = plan.id
    account.limits = limits
    return plan


def update_account(
    session: Session,
    identity: CallerIdentity,
    account_id: uuid.UUID,
    name: str,
    plan_id: uuid.UUID,
) -> Account:
    """Rename an account and (re)assign its plan"""
    require_superadmin(identity)
    account = _get_account(session, account_id)

    _reassign_plan(session, account, plan_id)
    account.name = name
    account.updated_at = utcnow()

    session.add(account)
    session.commit()
    session.refresh(account)

    logger.info(f"Account updated: {account_id}")
    return account


def assign_plan(
    session: Session,
    identity: CallerIdentity,
    account_id: uuid.UUID,
    plan_id: uuid.UUID,
) -> str:
    require_superadmin(identity)
    account = _get_account(session, account_id)

    plan = _reassign_plan(session, account, plan_id)
    account.updated_at = utcnow()
    plan_name, account_name = plan.name, account.name

    session.add(account)
    session.commit()

    logger.info(f"Plan {plan_id} assigned to account {account_id}")
    return f'Plan "{plan_name}" assigned to account "{account_name}" successfully'


def update_account_status(
    session: Session,
    identity: CallerIdentity,
    account_id: uuid.UUID,
    status: AccountStatus,
) -> Account:
    """Operator suspend / reactivate; billing status is untouched"""
    require_superadmin(identity)
    account = _get_account(session, account_id)

    account.status = AccountStatus(status)
    account.updated_at = utcnow()
    session.add(account)
    session.commit()
    session.refresh(account)

    logger.info(f"Account {account_id} status set to {account.status.value}")
    return account


def update_trial_settings(
    session: Session,
    identity: CallerIdentity,
    account_id: uuid.UUID,
    update: TrialSettingsUpdate,
    now: Optional[datetime] = None,
) -> TrialUpdateResult:
    """Run a trial action through the state machine and persist the result"""
    require_superadmin(identity)
    account = _get_account(session, account_id)

    command = command_from_update(update)
    state = compute_trial_transition(account.plan_status, account.trial_ends_at, command, now)

    account.apply_billing(state.plan_status, state.trial_ends_at)
    session.add(account)
    session.commit()

    logger.info(
        f"Trial updated for account {account_id}: {command.action} -> "
        f"{state.plan_status.value} until {state.trial_ends_at}"
    )
    return TrialUpdateResult(
        message="Trial settings updated successfully",
        new_plan_status=state.plan_status,
        new_trial_ends_at=state.trial_ends_at,
    )


def update_billing_status(
    session: Session,
    identity: CallerIdentity,
    account_id: uuid.UUID,
    plan_status: PlanStatus,
) -> str:
    """Administrative override of the billing status

    Bypasses the trial transition table and leaves trialEndsAt as it is.
    """
    require_superadmin(identity)
    account = _get_account(session, account_id)

    plan_status = PlanStatus(plan_status)
    account.plan_status = plan_status
    account.updated_at = utcnow()
    session.add(account)
    session.commit()

    logger.info(f"Billing status of account {account_id} overridden to {plan_status.value}")
    return f"Billing status updated to {plan_status.value}"


def convert_trial_to_paid(
    session: Session,
    identity: CallerIdentity,
    account_id: uuid.UUID,
    new_plan_id: Optional[uuid.UUID] = None,
) -> str:
    """Move an account onto a paid subscription, optionally switching plan in the same write"""
    require_superadmin(identity)
    account = _get_account(session, account_id)

    if new_plan_id is not None:
        _reassign_plan(session, account, new_plan_id)
    account.apply_billing(PlanStatus.ACTIVE, None)

    session.add(account)
    session.commit()

    logger.info(f"Trial converted to paid for account {account_id} on plan {account.plan_id}")
    return "Trial converted to paid subscription"


def get_platform_stats(
    session: Session,
    identity: CallerIdentity,
    now: Optional[datetime] = None,
) -> PlatformStats:
    require_superadmin(identity)
    now = now or utcnow()

    accounts = session.exec(select(Account)).all()
    total_users = session.exec(select(func.count()).select_from(AppUser)).one()
    total_plans = session.exec(select(func.count()).select_from(Plan)).one()

    trials = [a for a in accounts if a.plan_status == PlanStatus.TRIAL]

    return PlatformStats(
        total_accounts=len(accounts),
        franchise_accounts=sum(1 for a in accounts if a.type == AccountType.FRANCHISE),
        individual_accounts=sum(1 for a in accounts if a.type == AccountType.INDIVIDUAL),
        sub_accounts=sum(1 for a in accounts if a.parent_id is not None),
        active_accounts=sum(1 for a in accounts if a.status == AccountStatus.ACTIVE),
        suspended_accounts=sum(1 for a in accounts if a.status == AccountStatus.SUSPENDED),
        trial_accounts=len(trials),
        active_trials=sum(1 for a in trials if a.trial_ends_at and a.trial_ends_at >= now),
        expired_trials=sum(1 for a in trials if a.trial_ends_at and a.trial_ends_at < now),
        paid_accounts=sum(1 for a in accounts if a.plan_status == PlanStatus.ACTIVE),
        past_due_accounts=sum(1 for a in accounts if a.plan_status == PlanStatus.PAST_DUE),
        cancelled_accounts=sum(1 for a in accounts if a.plan_status == PlanStatus.CANCELLED),
        total_users=total_users,
        total_plans=total_plans,
    )
