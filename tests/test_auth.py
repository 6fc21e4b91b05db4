"""
Unit test for JWT authentication and caller identity resolution
"""

import pytest
from datetime import timedelta
import uuid
from pydantic import ValidationError as PydanticValidationError

from admin_console.core.auth import create_access_token, verify_token, decode_access_token
from admin_console.core.dependencies import resolve_identity
from admin_console.models import UserRole, UserStatus
from admin_console.schemas.token import TokenPayload


def test_create_access_token():
    """Test JWT token creation"""
    user_id = uuid.uuid4()
    account_id = uuid.uuid4()

    token = create_access_token(
        user_id=user_id,
        role="orgadmin",
        account_id=account_id,
        expires_delta=timedelta(hours=24)
    )

    assert isinstance(token, str)

    payload = decode_access_token(token)
    assert payload["sub"] == str(user_id)
    assert payload["account_id"] == str(account_id)
    assert payload["role"] == "orgadmin"
    assert "exp" in payload

    assert TokenPayload(**payload).sub == str(user_id)


def test_platform_token_has_no_account():
    token = create_access_token(user_id=uuid.uuid4(), role="superadmin")
    assert decode_access_token(token)["account_id"] is None


def test_verify_token_returns_user_id():
    user_id = uuid.uuid4()
    assert verify_token(create_access_token(user_id=user_id, role="clientuser")) == user_id


def test_verify_invalid_token():
    """Test token verification with invalid token"""
    assert verify_token("invalid.token.string.here") is None


def test_expired_token_is_rejected():
    token = create_access_token(user_id=uuid.uuid4(), role="superadmin", expires_delta=timedelta(hours=-1))

    assert decode_access_token(token) is None
    assert verify_token(token) is None


def test_resolve_identity_loads_user(db, superadmin):
    token = create_access_token(user_id=superadmin.id, role="superadmin")

    identity = resolve_identity(db, token)

    assert identity.user_id == superadmin.id
    assert identity.role == UserRole.SUPERADMIN
    assert identity.is_superadmin
    assert identity.account_id is None


def test_resolve_identity_rejects_unknown_and_suspended_users(db, superadmin):
    assert resolve_identity(db, None) is None
    assert resolve_identity(db, create_access_token(user_id=uuid.uuid4(), role="superadmin")) is None

    superadmin.status = UserStatus.SUSPENDED
    db.add(superadmin)
    db.commit()

    assert resolve_identity(db, create_access_token(user_id=superadmin.id, role="superadmin")) is None


def test_identity_is_immutable(db, superadmin):
    identity = resolve_identity(db, create_access_token(user_id=superadmin.id, role="superadmin"))

    with pytest.raises(PydanticValidationError):
        identity.role = UserRole.CLIENTUSER
