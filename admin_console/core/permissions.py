"""
Capability gate for the account lifecycle engine
"""

from enum import Enum
from typing import Optional, Set, Union
import uuid

from pydantic import BaseModel

from admin_console.core.errors import UnauthorizedError
from admin_console.models.app_user import UserRole
from admin_console.schemas.token import CallerIdentity


class Capability(str, Enum):
    """Capability definitions"""
    PLATFORM_ADMIN = "platform:admin"
    VIEW_AS = "view_as:start"
    USERS_MANAGE = "users:manage"
    FRANCHISE_MANAGE = "franchise:manage"


# Role capability mapping
ROLE_CAPABILITIES = {
    UserRole.SUPERADMIN: {
        Capability.PLATFORM_ADMIN,
        Capability.VIEW_AS,
        Capability.USERS_MANAGE,
        Capability.FRANCHISE_MANAGE,
    },
    # Org admins act only inside their own account
    UserRole.ORGADMIN: {
        Capability.USERS_MANAGE,
        Capability.FRANCHISE_MANAGE,
    },
    UserRole.CLIENTUSER: set(),
}


class CapabilityGranted(BaseModel):
    identity: CallerIdentity
    capability: Capability


class CapabilityDenied(BaseModel):
    capability: Capability
    reason: str


CapabilityResult = Union[CapabilityGranted, CapabilityDenied]


def get_capabilities_for_role(role: UserRole) -> Set[Capability]:
    """Get capabilities for a given role"""
    return ROLE_CAPABILITIES.get(UserRole(role), set())


def check_capability(
    identity: Optional[CallerIdentity],
    capability: Capability,
    account_id: Optional[uuid.UUID] = None,
) -> CapabilityResult:
    """Decide whether the caller holds a capability, optionally for one account"""
    if identity is None:
        return CapabilityDenied(capability=capability, reason="Not authenticated")

    if capability not in get_capabilities_for_role(identity.role):
        if capability == Capability.PLATFORM_ADMIN:
            reason = "Unauthorized: SuperAdmin access required"
        else:
            reason = f"Unauthorized: {capability.value} required"
        return CapabilityDenied(capability=capability, reason=reason)

    if not identity.is_superadmin and account_id is not None and identity.account_id != account_id:
        return CapabilityDenied(capability=capability, reason="Insufficient permissions for this account")

    return CapabilityGranted(identity=identity, capability=capability)


def require_capability(
    identity: Optional[CallerIdentity],
    capability: Capability,
    account_id: Optional[uuid.UUID] = None,
) -> CallerIdentity:
    """Raise UnauthorizedError unless the caller holds the capability"""
    result = check_capability(identity, capability, account_id)
    if isinstance(result, CapabilityDenied):
        raise UnauthorizedError(result.reason)
    return result.identity


def require_superadmin(identity: Optional[CallerIdentity]) -> CallerIdentity:
    return require_capability(identity, Capability.PLATFORM_ADMIN)
