"""
Account model - tenant hierarchy, plan assignment and billing lifecycle
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import JSON
from datetime import datetime
from typing import Any, Dict, Optional
from enum import Enum
import math
import uuid

from admin_console.models.plan import AccountType
from admin_console.models.types import UTCDateTime, utcnow, value_enum


class PlanStatus(str, Enum):
    """Billing status of an account"""
    TRIAL = "trial"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELLED = "cancelled"


class AccountStatus(str, Enum):
    """Operator status, independent of billing"""
    ACTIVE = "active"
    SUSPENDED = "suspended"


class Account(SQLModel, table=True):
    """Tenant account: a standalone business, a franchise, or a franchise sub-account"""

    __tablename__ = "accounts"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True, max_length=255)
    slug: str = Field(unique=True, index=True, max_length=255, description="Unique URL-safe identifier")
    type: AccountType = Field(sa_type=value_enum(AccountType), index=True)

    # Hierarchy: only franchises may be referenced as parents
    parent_id: Optional[uuid.UUID] = Field(default=None, foreign_key="accounts.id", index=True)

    # Plan and billing
    plan_id: uuid.UUID = Field(foreign_key="plans.id", index=True)
    plan_status: PlanStatus = Field(default=PlanStatus.TRIAL, sa_type=value_enum(PlanStatus), index=True)
    trial_ends_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    status: AccountStatus = Field(default=AccountStatus.ACTIVE, sa_type=value_enum(AccountStatus), index=True)

    # Quota snapshot taken from the plan at assignment time: {"users": n, "subAccounts": m}
    limits: Dict[str, int] = Field(default_factory=dict, sa_type=JSON)

    primary_contact: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    location: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    created_by: Optional[uuid.UUID] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    def is_franchise(self) -> bool:
        return self.type == AccountType.FRANCHISE

    def is_sub_account(self) -> bool:
        return self.parent_id is not None

    def user_limit(self) -> int:
        return int(self.limits.get("users", 0))

    def apply_billing(self, plan_status: PlanStatus, trial_ends_at: Optional[datetime]) -> None:
        """Persist a (planStatus, trialEndsAt) pair as one write"""
        self.plan_status = plan_status
        self.trial_ends_at = trial_ends_at
        self.updated_at = utcnow()

    def trial_summary(self, now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
        """Days remaining and expiry for accounts on trial; None otherwise"""
        if self.plan_status != PlanStatus.TRIAL or self.trial_ends_at is None:
            return None

        now = now or utcnow()
        remaining = (self.trial_ends_at - now).total_seconds() / 86400
        return {
            "days_remaining": max(0, math.ceil(remaining)),
            "is_expired": now > self.trial_ends_at,
            "expires_at": self.trial_ends_at,
        }
