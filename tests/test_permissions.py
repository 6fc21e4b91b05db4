"""
Unit tests for the capability gate
"""

import pytest
import uuid

from admin_console.core.errors import UnauthorizedError
from admin_console.core.permissions import (
    Capability,
    CapabilityDenied,
    CapabilityGranted,
    check_capability,
    get_capabilities_for_role,
    require_capability,
    require_superadmin,
)
from admin_console.models import UserRole
from admin_console.schemas.token import CallerIdentity


def _identity(role: UserRole, account_id=None) -> CallerIdentity:
    return CallerIdentity(user_id=uuid.uuid4(), role=role, account_id=account_id)


def test_get_capabilities_for_role():
    """Test capability retrieval for all roles"""
    assert get_capabilities_for_role(UserRole.SUPERADMIN) == set(Capability)

    orgadmin_caps = get_capabilities_for_role(UserRole.ORGADMIN)
    assert Capability.USERS_MANAGE in orgadmin_caps
    assert Capability.FRANCHISE_MANAGE in orgadmin_caps
    assert Capability.VIEW_AS not in orgadmin_caps
    assert Capability.PLATFORM_ADMIN not in orgadmin_caps

    assert get_capabilities_for_role("clientuser") == set()


def test_anonymous_caller_is_denied():
    result = check_capability(None, Capability.USERS_MANAGE)
    assert isinstance(result, CapabilityDenied)
    assert result.reason == "Not authenticated"


def test_superadmin_is_granted_everywhere():
    identity = _identity(UserRole.SUPERADMIN)
    result = check_capability(identity, Capability.USERS_MANAGE, account_id=uuid.uuid4())

    assert isinstance(result, CapabilityGranted)
    assert result.identity == identity


def test_orgadmin_is_scoped_to_own_account():
    account_id = uuid.uuid4()
    identity = _identity(UserRole.ORGADMIN, account_id)

    assert isinstance(check_capability(identity, Capability.USERS_MANAGE, account_id=account_id), CapabilityGranted)

    denied = check_capability(identity, Capability.USERS_MANAGE, account_id=uuid.uuid4())
    assert isinstance(denied, CapabilityDenied)
    assert denied.reason == "Insufficient permissions for this account"


def test_require_superadmin_message():
    with pytest.raises(UnauthorizedError, match="Unauthorized: SuperAdmin access required"):
        require_superadmin(_identity(UserRole.ORGADMIN, uuid.uuid4()))


def test_require_capability_returns_identity():
    identity = _identity(UserRole.SUPERADMIN)
    assert require_capability(identity, Capability.VIEW_AS) is identity


def test_clientuser_holds_nothing():
    identity = _identity(UserRole.CLIENTUSER, uuid.uuid4())
    for capability in Capability:
        assert isinstance(check_capability(identity, capability, identity.account_id), CapabilityDenied)
