"""
Users API endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List
import uuid

from admin_console.core.database import get_session
from admin_console.core.dependencies import get_caller_identity
from admin_console.schemas.common import MessageResponse
from admin_console.schemas.token import CallerIdentity
from admin_console.schemas.user import UserCreate, UserResponse, UserStats, UserUpdate
from admin_console.services import users

router = APIRouter()


@router.get("/account/{account_id}", response_model=List[UserResponse])
async def list_account_users(
    account_id: uuid.UUID,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    """List the users of an account"""
    return [UserResponse.model_validate(user) for user in users.list_account_users(session, identity, account_id)]


@router.get("/account/{account_id}/stats", response_model=UserStats)
async def get_user_stats(
    account_id: uuid.UUID,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    return users.get_user_stats(session, identity, account_id)


@router.post("/account/{account_id}", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    account_id: uuid.UUID,
    user_data: UserCreate,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    """Invite a new user into an account"""
    user = users.create_user(session, identity, account_id, user_data)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: uuid.UUID,
    updates: UserUpdate,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    user = users.update_user(session, identity, user_id, updates)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: uuid.UUID,
    identity: CallerIdentity = Depends(get_caller_identity),
    session: Session = Depends(get_session),
):
    """Delete a user; the last user of an account cannot be deleted"""
    users.delete_user(session, identity, user_id)
    return MessageResponse(message="User deleted successfully")
