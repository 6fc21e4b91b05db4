"""
"View as user" impersonation session model
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
import uuid

from admin_console.models.types import UTCDateTime, utcnow


class ViewAsSession(SQLModel, table=True):
    """Time-boxed grant letting a super-admin act as one user of one account

    issued(active) -> ended (explicit revoke) or expired (expires_at elapsed,
    detected lazily on read, never persisted). Neither terminal state returns
    to active.
    """

    __tablename__ = "view_as_sessions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    super_admin_id: uuid.UUID = Field(foreign_key="app_users.id", index=True)
    viewing_account_id: uuid.UUID = Field(foreign_key="accounts.id", index=True)
    viewing_user_id: uuid.UUID = Field(foreign_key="app_users.id", index=True)

    session_token: str = Field(unique=True, index=True, max_length=128)
    expires_at: datetime = Field(index=True, sa_type=UTCDateTime)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    ended_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) >= self.expires_at

    def is_live(self, now: Optional[datetime] = None) -> bool:
        """Active and not yet expired"""
        return self.is_active and not self.is_expired(now)

    def end(self) -> bool:
        """Mark the session ended; returns False when it already was"""
        if not self.is_active:
            return False

        self.is_active = False
        self.ended_at = utcnow()
        return True
