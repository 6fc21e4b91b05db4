"""
Application user model with roles and account membership
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

from admin_console.models.types import UTCDateTime, utcnow, value_enum


class UserRole(str, Enum):
    """User roles for capability checks"""
    SUPERADMIN = "superadmin"
    ORGADMIN = "orgadmin"
    CLIENTUSER = "clientuser"


class UserStatus(str, Enum):
    INVITED = "invited"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class MembershipType(str, Enum):
    """Kind of tenant the user belongs to; platform users have no account"""
    PLATFORM = "platform"
    FRANCHISE = "franchise"
    INDIVIDUAL = "individual"


class AppUser(SQLModel, table=True):
    """User bound to one account (super-admins belong to the platform instead)"""

    __tablename__ = "app_users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    account_id: Optional[uuid.UUID] = Field(default=None, foreign_key="accounts.id", index=True)
    account_type: MembershipType = Field(default=MembershipType.INDIVIDUAL, sa_type=value_enum(MembershipType))

    # Profile
    email: str = Field(index=True, unique=True, max_length=255)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    phone: Optional[str] = Field(default=None, max_length=50)

    role: UserRole = Field(default=UserRole.CLIENTUSER, sa_type=value_enum(UserRole), index=True)
    status: UserStatus = Field(default=UserStatus.INVITED, sa_type=value_enum(UserStatus), index=True)
    email_verified: bool = Field(default=False)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)
    last_login_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
