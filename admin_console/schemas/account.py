"""
Pydantic schemas for accounts, provisioning and billing updates
"""

from pydantic import EmailStr, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum
import uuid

from admin_console.models.account import AccountStatus, PlanStatus
from admin_console.models.plan import AccountType
from admin_console.schemas.common import CamelModel
from admin_console.schemas.plan import PlanRead


class AdminUserProfile(CamelModel):
    """Profile of the first user created with an account"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)


class LocationInfo(CamelModel):
    address: str
    city: str
    state: str
    zip: str
    country: str
    timezone: str = "UTC"


class PrimaryContact(CamelModel):
    name: str
    email: str
    phone: Optional[str] = None


class AccountLimits(CamelModel):
    users: int = 0
    sub_accounts: int = 0


class AccountCreate(CamelModel):
    """Provisioning request"""
    type: AccountType
    name: str = Field(..., min_length=1, max_length=255)
    plan_id: uuid.UUID
    admin_user: AdminUserProfile
    location: Optional[LocationInfo] = None
    parent_id: Optional[uuid.UUID] = None
    trial_days: Optional[int] = Field(None, ge=1, le=365)


class SubAccountCreate(CamelModel):
    """Provisioning request for an individual account under a franchise"""
    name: str = Field(..., min_length=1, max_length=255)
    plan_id: uuid.UUID
    admin_user: AdminUserProfile
    location: Optional[LocationInfo] = None
    trial_days: Optional[int] = Field(None, ge=1, le=365)


class ProvisionResult(CamelModel):
    account_id: uuid.UUID
    admin_user_id: uuid.UUID
    slug: str
    trial_ends_at: datetime
    message: str


class TrialSummary(CamelModel):
    days_remaining: int
    is_expired: bool
    expires_at: datetime


class AccountRead(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    type: AccountType
    parent_id: Optional[uuid.UUID] = None
    plan_id: uuid.UUID
    plan_status: PlanStatus
    trial_ends_at: Optional[datetime] = None
    status: AccountStatus
    limits: AccountLimits
    primary_contact: PrimaryContact
    location: Optional[LocationInfo] = None
    created_at: datetime


class AccountDetail(AccountRead):
    """Account enriched for admin list views"""
    plan: Optional[PlanRead] = None
    user_count: int = 0
    trial_status: Optional[TrialSummary] = None


class AccountUpdate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    plan_id: uuid.UUID


class PlanAssignment(CamelModel):
    plan_id: uuid.UUID


class AccountStatusUpdate(CamelModel):
    status: AccountStatus


class BillingStatusUpdate(CamelModel):
    plan_status: PlanStatus


class TrialAction(str, Enum):
    EXTEND = "extend"
    END = "end"
    RESTART = "restart"
    SET_CUSTOM_END = "set_custom_end"


class TrialSettingsUpdate(CamelModel):
    """Raw trial request; required parameters are checked by the trial state machine"""
    action: TrialAction
    extension_days: Optional[int] = None
    trial_ends_at: Optional[datetime] = None


class TrialUpdateResult(CamelModel):
    message: str
    new_plan_status: PlanStatus
    new_trial_ends_at: Optional[datetime] = None


class ConvertToSubAccount(CamelModel):
    franchise_account_id: uuid.UUID


class TransferSubAccount(CamelModel):
    new_franchise_id: uuid.UUID


class FranchiseSummary(AccountRead):
    """Franchise row for the franchise picker"""
    sub_account_count: int = 0
    direct_user_count: int = 0
    total_user_count: int = 0


class ConvertTrialToPaid(CamelModel):
    new_plan_id: Optional[uuid.UUID] = None


class FranchiseHierarchy(CamelModel):
    franchise: AccountDetail
    sub_accounts: List[AccountDetail]
    total_sub_accounts: int
    total_users: int


class PlatformStats(CamelModel):
    total_accounts: int
    franchise_accounts: int
    individual_accounts: int
    sub_accounts: int
    active_accounts: int
    suspended_accounts: int
    trial_accounts: int
    active_trials: int
    expired_trials: int
    paid_accounts: int
    past_due_accounts: int
    cancelled_accounts: int
    total_users: int
    total_plans: int
