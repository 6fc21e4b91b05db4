"""
Subscription plan model
"""

from sqlmodel import Field, SQLModel
from sqlalchemy import JSON
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from enum import Enum
import uuid

from admin_console.models.types import UTCDateTime, utcnow, value_enum


class AccountType(str, Enum):
    """Tenant shape; a plan is scoped to exactly one of these"""
    INDIVIDUAL = "individual"
    FRANCHISE = "franchise"


class BillingPeriod(str, Enum):
    MONTHLY = "monthly"
    ANNUAL = "annual"


class PlanAvailability(str, Enum):
    """Catalogue status of a plan"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    DISCONTINUED = "discontinued"


class Plan(SQLModel, table=True):
    """Subscription tier referenced (never owned) by accounts"""

    __tablename__ = "plans"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True, max_length=255)
    type: AccountType = Field(sa_type=value_enum(AccountType), index=True)
    price: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    billing_period: BillingPeriod = Field(default=BillingPeriod.MONTHLY, sa_type=value_enum(BillingPeriod))

    # Quota block, camelCase keys (maxUsers, maxSubAccounts, dataRetention, ...)
    features: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    feature_list: List[str] = Field(default_factory=list, sa_type=JSON)

    status: PlanAvailability = Field(
        default=PlanAvailability.ACTIVE,
        sa_type=value_enum(PlanAvailability),
        index=True,
    )

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    def max_users(self) -> int:
        return int(self.features.get("maxUsers", 0))

    def max_sub_accounts(self) -> int:
        return int(self.features.get("maxSubAccounts", 0))
