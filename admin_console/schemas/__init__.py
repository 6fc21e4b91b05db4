"""
Schemas module
"""

from admin_console.schemas.token import CallerIdentity, TokenPayload
from admin_console.schemas.user import UserCreate, UserResponse, UserUpdate

__all__ = [
    "CallerIdentity",
    "TokenPayload",
    "UserCreate",
    "UserResponse",
    "UserUpdate",
]
