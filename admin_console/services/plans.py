"""
Plan catalogue management
"""

from typing import List
import uuid

from sqlmodel import Session, func, select
import structlog

from admin_console.core.errors import InvariantViolation, NotFoundError
from admin_console.core.permissions import require_superadmin
from admin_console.models.account import Account
from admin_console.models.plan import AccountType, BillingPeriod, Plan, PlanAvailability
from admin_console.models.types import utcnow
from admin_console.schemas.plan import PlanCreate, PlanUpdate
from admin_console.schemas.token import CallerIdentity

logger = structlog.get_logger(__name__)


def _get_plan(session: Session, plan_id: uuid.UUID) -> Plan:
    plan = session.get(Plan, plan_id)
    if not plan:
        raise NotFoundError("Plan not found")
    return plan


def count_plan_accounts(session: Session, plan_id: uuid.UUID) -> int:
    return session.exec(
        select(func.count()).select_from(Account).where(Account.plan_id == plan_id)
    ).one()


def create_plan(session: Session, identity: CallerIdentity, plan_data: PlanCreate) -> Plan:
    require_superadmin(identity)

    plan = Plan(
        name=plan_data.name,
        type=AccountType(plan_data.type),
        price=plan_data.price,
        billing_period=BillingPeriod(plan_data.billing_period),
        features=plan_data.features.model_dump(by_alias=True),
        feature_list=list(plan_data.feature_list),
        status=PlanAvailability(plan_data.status),
    )
    session.add(plan)
    session.commit()
    session.refresh(plan)

    logger.info(f"Plan created: {plan.id} ({plan.name})")
    return plan


def list_plans(session: Session, identity: CallerIdentity, include_inactive: bool = False) -> List[Plan]:
    """Catalogue ordered by account type then price"""
    require_superadmin(identity)

    query = select(Plan)
    if not include_inactive:
        query = query.where(Plan.status == PlanAvailability.ACTIVE)

    return session.exec(query.order_by(Plan.type, Plan.price)).all()


def get_plan(session: Session, identity: CallerIdentity, plan_id: uuid.UUID) -> Plan:
    require_superadmin(identity)
    return _get_plan(session, plan_id)


def update_plan(session: Session, identity: CallerIdentity, plan_id: uuid.UUID, updates: PlanUpdate) -> Plan:
    """Partial update; the account type is frozen once accounts reference the plan"""
    require_superadmin(identity)
    plan = _get_plan(session, plan_id)

    changes = updates.model_dump(exclude_unset=True, exclude_none=True)

    if "type" in changes and AccountType(changes["type"]) != plan.type:
        in_use = count_plan_accounts(session, plan_id)
        if in_use:
            raise InvariantViolation(f"Cannot change the account type of a plan used by {in_use} account(s)")
        plan.type = AccountType(changes["type"])

    if "name" in changes:
        plan.name = changes["name"]
    if "price" in changes:
        plan.price = changes["price"]
    if "billing_period" in changes:
        plan.billing_period = BillingPeriod(changes["billing_period"])
    if "status" in changes:
        plan.status = PlanAvailability(changes["status"])
    if updates.features is not None:
        plan.features = updates.features.model_dump(by_alias=True)
    if updates.feature_list is not None:
        plan.feature_list = list(updates.feature_list)

    plan.updated_at = utcnow()
    session.add(plan)
    session.commit()
    session.refresh(plan)

    logger.info(f"Plan updated: {plan_id}")
    return plan


def delete_plan(session: Session, identity: CallerIdentity, plan_id: uuid.UUID) -> None:
    """Delete a plan no account references"""
    require_superadmin(identity)
    plan = _get_plan(session, plan_id)

    in_use = count_plan_accounts(session, plan_id)
    if in_use:
        raise InvariantViolation(f"Cannot delete plan: {in_use} account(s) are using this plan")

    session.delete(plan)
    session.commit()
    logger.info(f"Plan deleted: {plan_id}")
