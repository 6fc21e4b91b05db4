"""
Pydantic schemas for account users
"""

from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime
from enum import Enum
import uuid

from admin_console.models.app_user import MembershipType, UserRole, UserStatus
from admin_console.schemas.common import CamelModel


class AccountRole(str, Enum):
    """Roles that can be granted inside an account"""
    ORGADMIN = "orgadmin"
    CLIENTUSER = "clientuser"


class UserCreate(CamelModel):
    """New member of an account"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    role: AccountRole = AccountRole.CLIENTUSER


class UserUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    role: Optional[AccountRole] = None
    status: Optional[UserStatus] = None


class UserResponse(CamelModel):
    """User response model"""
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: UserRole
    status: UserStatus
    account_id: Optional[uuid.UUID] = None
    account_type: MembershipType
    email_verified: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None


class UserStats(CamelModel):
    total: int
    active: int
    invited: int
    suspended: int
    org_admins: int
    client_users: int
    email_verified: int
