"""
Plan catalogue API endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List
import uuid

from admin_console.core.database import get_session
from admin_console.core.dependencies import get_caller_identity
from admin_console.schemas.common import MessageResponse
from admin_console.schemas.plan import PlanCreate, PlanRead, PlanUpdate
from admin_console.schemas.token import CallerIdentity
from admin_console.services import plans

router = APIRouter()


@router.get("/", response_model=List[PlanRead])
async def list_plans(
    include_inactive: bool = False,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    """List plans, active ones only unless include_inactive is set"""
    return [PlanRead.model_validate(plan) for plan in plans.list_plans(session, identity, include_inactive)]


@router.post("/", response_model=PlanRead, status_code=status.HTTP_201_CREATED)
async def create_plan(
    plan_data: PlanCreate,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    return PlanRead.model_validate(plans.create_plan(session, identity, plan_data))


@router.get("/{plan_id}", response_model=PlanRead)
async def get_plan(
    plan_id: uuid.UUID,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    return PlanRead.model_validate(plans.get_plan(session, identity, plan_id))


@router.patch("/{plan_id}", response_model=PlanRead)
async def update_plan(
    plan_id: uuid.UUID,
    updates: PlanUpdate,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    return PlanRead.model_validate(plans.update_plan(session, identity, plan_id, updates))


@router.delete("/{plan_id}", response_model=MessageResponse)
async def delete_plan(
    plan_id: uuid.UUID,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    """Delete a plan that no account uses"""
    plans.delete_plan(session, identity, plan_id)
    return MessageResponse(message="Plan deleted successfully")
