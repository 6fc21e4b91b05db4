"""
Pydantic schemas for "view as user" sessions
"""

from datetime import datetime
import uuid

from admin_console.models.app_user import UserRole
from admin_console.schemas.account import AccountRead
from admin_console.schemas.common import CamelModel
from admin_console.schemas.user import UserResponse


class ViewAsSessionCreate(CamelModel):
    account_id: uuid.UUID
    user_id: uuid.UUID


class ViewAsSessionCreated(CamelModel):
    session_token: str
    expires_at: datetime
    account_name: str
    user_name: str
    user_role: UserRole


class ViewAsSessionEnd(CamelModel):
    session_token: str


class ViewAsSessionInfo(CamelModel):
    """Snapshot returned while a session is live"""
    account: AccountRead
    user: UserResponse
    session_token: str
    expires_at: datetime
