"""
Pydantic schemas for authentication and caller identity
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
import uuid

from admin_console.models.app_user import UserRole
from admin_console.models.types import utcnow


class TokenPayload(BaseModel):
    """JWT token payload"""
    sub: str = Field(..., description="AppUser ID")
    role: str = Field(..., description="User role")
    account_id: Optional[str] = Field(None, description="Account ID, absent for platform users")
    exp: datetime = Field(..., description="Expiration time")
    iat: datetime = Field(default_factory=utcnow, description="Issued at")


class CallerIdentity(BaseModel):
    """Authenticated caller, passed explicitly to every engine operation"""

    model_config = ConfigDict(frozen=True)

    user_id: uuid.UUID
    role: UserRole
    account_id: Optional[uuid.UUID] = None
    email: Optional[str] = None

    @property
    def is_superadmin(self) -> bool:
        return self.role == UserRole.SUPERADMIN
