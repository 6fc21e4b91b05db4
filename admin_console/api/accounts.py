"""
Account API endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List, Optional
import uuid

from admin_console.core.database import get_session
from admin_console.core.dependencies import get_caller_identity
from admin_console.schemas.account import (
    AccountCreate,
    AccountDetail,
    AccountRead,
    AccountStatusUpdate,
    AccountUpdate,
    BillingStatusUpdate,
    ConvertToSubAccount,
    ConvertTrialToPaid,
    FranchiseHierarchy,
    FranchiseSummary,
    PlanAssignment,
    PlatformStats,
    ProvisionResult,
    SubAccountCreate,
    TransferSubAccount,
    TrialSettingsUpdate,
    TrialUpdateResult,
)
from admin_console.schemas.common import MessageResponse
from admin_console.schemas.token import CallerIdentity
from admin_console.services import accounts, hierarchy, provisioning

router = APIRouter()


@router.post("/", response_model=ProvisionResult, status_code=status.HTTP_201_CREATED)
async def provision_account(
    request: AccountCreate,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    """Create an account with its trial and first admin user"""
    return provisioning.provision_account(session, identity, request)


@router.get("/", response_model=List[AccountDetail])
async def list_accounts(
    limit: Optional[int] = None,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    return accounts.list_accounts(session, identity, limit=limit)


@router.get("/stats", response_model=PlatformStats)
async def get_platform_stats(
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    """Platform-wide account and user counts"""
    return accounts.get_platform_stats(session, identity)


@router.get("/franchises", response_model=List[FranchiseSummary])
async def list_franchise_accounts(
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    """Franchises with sub-account and user counts"""
    return hierarchy.list_franchise_accounts(session, identity)


@router.get("/available-individuals", response_model=List[AccountDetail])
async def list_available_individual_accounts(
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    """Standalone individual accounts that can join a franchise"""
    return hierarchy.list_available_individual_accounts(session, identity)


@router.get("/{account_id}", response_model=AccountDetail)
async def get_account(
    account_id: uuid.UUID,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    return accounts.get_account(session, identity, account_id)


@router.put("/{account_id}", response_model=AccountRead)
async def update_account(
    account_id: uuid.UUID,
    account_update: AccountUpdate,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    account = accounts.update_account(
        session, identity, account_id, account_update.name, account_update.plan_id
    )
    return AccountRead.model_validate(account)


@router.put("/{account_id}/plan", response_model=MessageResponse)
async def assign_plan(
    account_id: uuid.UUID,
    assignment: PlanAssignment,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    message = accounts.assign_plan(session, identity, account_id, assignment.plan_id)
    return MessageResponse(message=message)


@router.put("/{account_id}/status", response_model=AccountRead)
async def update_account_status(
    account_id: uuid.UUID,
    status_update: AccountStatusUpdate,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    """Suspend or reactivate an account"""
    account = accounts.update_account_status(session, identity, account_id, status_update.status)
    return AccountRead.model_validate(account)


@router.post("/{account_id}/trial", response_model=TrialUpdateResult)
async def update_trial_settings(
    account_id: uuid.UUID,
    update: TrialSettingsUpdate,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    """Extend, end, restart or set a custom end for the account's trial"""
    return accounts.update_trial_settings(session, identity, account_id, update)


@router.put("/{account_id}/billing-status", response_model=MessageResponse)
async def update_billing_status(
    account_id: uuid.UUID,
    billing_update: BillingStatusUpdate,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    message = accounts.update_billing_status(session, identity, account_id, billing_update.plan_status)
    return MessageResponse(message=message)


@router.post("/{account_id}/convert-trial-to-paid", response_model=MessageResponse)
async def convert_trial_to_paid(
    account_id: uuid.UUID,
    conversion: ConvertTrialToPaid,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    message = accounts.convert_trial_to_paid(session, identity, account_id, conversion.new_plan_id)
    return MessageResponse(message=message)


@router.get("/{account_id}/hierarchy-path", response_model=List[AccountRead])
async def get_account_hierarchy_path(
    account_id: uuid.UUID,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    """Breadcrumb path from the top-level ancestor down to the account"""
    path = hierarchy.get_account_hierarchy_path(session, identity, account_id)
    return [AccountRead.model_validate(account) for account in path]


@router.get("/{account_id}/franchise-hierarchy", response_model=FranchiseHierarchy)
async def get_franchise_hierarchy(
    account_id: uuid.UUID,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    return hierarchy.get_franchise_hierarchy(session, identity, account_id)


@router.post(
    "/{account_id}/sub-accounts",
    response_model=ProvisionResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_sub_account(
    account_id: uuid.UUID,
    request: SubAccountCreate,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    """Provision an individual account under this franchise"""
    return provisioning.create_sub_account(session, identity, account_id, request)


@router.post("/{account_id}/convert-to-sub-account", response_model=AccountRead)
async def convert_to_sub_account(
    account_id: uuid.UUID,
    conversion: ConvertToSubAccount,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    account = hierarchy.convert_to_sub_account(
        session, identity, account_id, conversion.franchise_account_id
    )
    return AccountRead.model_validate(account)


@router.post("/{account_id}/remove-from-franchise", response_model=AccountRead)
async def remove_from_franchise(
    account_id: uuid.UUID,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    account = hierarchy.remove_from_franchise(session, identity, account_id)
    return AccountRead.model_validate(account)


@router.post("/{account_id}/transfer", response_model=AccountRead)
async def transfer_sub_account(
    account_id: uuid.UUID,
    transfer: TransferSubAccount,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    """Move a sub-account to another franchise"""
    account = hierarchy.transfer_sub_account(session, identity, account_id, transfer.new_franchise_id)
    return AccountRead.model_validate(account)
