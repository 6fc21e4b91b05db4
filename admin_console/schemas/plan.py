"""
Pydantic schemas for subscription plans
"""

from pydantic import Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
import uuid

from admin_console.models.plan import AccountType, BillingPeriod, PlanAvailability
from admin_console.schemas.common import CamelModel


class PlanFeatures(CamelModel):
    """Quota block of a plan"""
    max_users: int = Field(..., ge=1)
    max_sub_accounts: int = Field(default=0, ge=0)
    data_retention: int = Field(default=365, ge=0, description="Days")
    api_calls: int = Field(default=0, ge=0)
    custom_domain: bool = False
    custom_branding: bool = False
    priority_support: bool = False
    analytics: bool = False
    integrations: bool = False
    multi_location: bool = False


class PlanCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: AccountType
    price: Decimal = Field(..., ge=0)
    billing_period: BillingPeriod = BillingPeriod.MONTHLY
    features: PlanFeatures
    feature_list: List[str] = Field(default_factory=list)
    status: PlanAvailability = PlanAvailability.ACTIVE


class PlanUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    type: Optional[AccountType] = None
    price: Optional[Decimal] = Field(None, ge=0)
    billing_period: Optional[BillingPeriod] = None
    features: Optional[PlanFeatures] = None
    feature_list: Optional[List[str]] = None
    status: Optional[PlanAvailability] = None


class PlanRead(CamelModel):
    id: uuid.UUID
    name: str
    type: AccountType
    price: Decimal
    billing_period: BillingPeriod
    features: PlanFeatures
    feature_list: List[str]
    status: PlanAvailability
    created_at: datetime
