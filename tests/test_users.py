"""
Tests for account user administration and the minimum-user guard
"""

import pytest
from sqlalchemy.dialects import postgresql

from admin_console.core.errors import InvariantViolation, UnauthorizedError, ValidationError
from admin_console.models import AppUser, UserRole, UserStatus
from admin_console.schemas.user import AccountRole, UserCreate, UserUpdate
from admin_console.services import users

from conftest import first_user_of, identity_for


def _new_user(email: str, role: AccountRole = AccountRole.CLIENTUSER) -> UserCreate:
    return UserCreate(first_name="Jo", last_name="Staff", email=email, role=role)


def test_last_user_cannot_be_deleted(db, superadmin_identity, provisioned_account):
    only_user = first_user_of(db, provisioned_account)

    with pytest.raises(InvariantViolation, match="last user"):
        users.delete_user(db, superadmin_identity, only_user.id)

    assert db.get(AppUser, only_user.id) is not None


def test_user_can_be_deleted_when_another_remains(db, superadmin_identity, provisioned_account):
    extra = users.create_user(db, superadmin_identity, provisioned_account.id, _new_user("jo@ace.io"))

    users.delete_user(db, superadmin_identity, extra.id)

    assert db.get(AppUser, extra.id) is None
    with pytest.raises(InvariantViolation):
        users.delete_user(db, superadmin_identity, first_user_of(db, provisioned_account).id)


def test_created_users_start_invited(db, superadmin_identity, provisioned_account):
    user = users.create_user(
        db, superadmin_identity, provisioned_account.id, _new_user("Jo@Ace.io", AccountRole.ORGADMIN)
    )
    assert user.status == UserStatus.INVITED
    assert user.role == UserRole.ORGADMIN
    assert user.email == "jo@ace.io"


def test_duplicate_email_is_rejected(db, superadmin_identity, provisioned_account):
    with pytest.raises(ValidationError, match="already exists"):
        users.create_user(db, superadmin_identity, provisioned_account.id, _new_user("owner@ace.io"))


def test_user_quota_is_enforced(db, superadmin_identity, provisioned_account):
    # Starter plan allows three users; the owner is the first
    users.create_user(db, superadmin_identity, provisioned_account.id, _new_user("a@ace.io"))
    users.create_user(db, superadmin_identity, provisioned_account.id, _new_user("b@ace.io"))

    with pytest.raises(InvariantViolation, match="maximum number of users"):
        users.create_user(db, superadmin_identity, provisioned_account.id, _new_user("c@ace.io"))


def test_orgadmin_manages_own_account_only(db, provisioned_account, franchise_account):
    owner = identity_for(first_user_of(db, provisioned_account))

    created = users.create_user(db, owner, provisioned_account.id, _new_user("jo@ace.io"))
    assert created.account_id == provisioned_account.id

    with pytest.raises(UnauthorizedError, match="Insufficient permissions"):
        users.list_account_users(db, owner, franchise_account.id)


def test_clientuser_cannot_manage_users(db, superadmin_identity, provisioned_account):
    member = users.create_user(db, superadmin_identity, provisioned_account.id, _new_user("jo@ace.io"))

    with pytest.raises(UnauthorizedError):
        users.list_account_users(db, identity_for(member), provisioned_account.id)


def test_update_user_role_and_status(db, superadmin_identity, provisioned_account):
    member = users.create_user(db, superadmin_identity, provisioned_account.id, _new_user("jo@ace.io"))

    updated = users.update_user(
        db,
        superadmin_identity,
        member.id,
        UserUpdate(role=AccountRole.ORGADMIN, status=UserStatus.ACTIVE, phone="555-0100"),
    )

    assert updated.role == UserRole.ORGADMIN
    assert updated.status == UserStatus.ACTIVE
    assert updated.phone == "555-0100"
    assert updated.first_name == "Jo"


def test_user_stats(db, superadmin_identity, provisioned_account):
    member = users.create_user(db, superadmin_identity, provisioned_account.id, _new_user("jo@ace.io"))
    users.update_user(db, superadmin_identity, member.id, UserUpdate(status=UserStatus.ACTIVE))

    stats = users.get_user_stats(db, superadmin_identity, provisioned_account.id)

    assert stats.total == 2
    assert stats.active == 1
    assert stats.invited == 1
    assert stats.org_admins == 1
    assert stats.client_users == 1
    assert stats.email_verified == 0


def test_account_lock_renders_for_update(provisioned_account):
    statement = users.account_row_lock(provisioned_account.id)
    assert "FOR UPDATE" in str(statement.compile(dialect=postgresql.dialect()))


def test_delete_takes_account_lock_before_counting(db, superadmin_identity, provisioned_account, monkeypatch):
    extra = users.create_user(db, superadmin_identity, provisioned_account.id, _new_user("jo@ace.io"))
    locked = []
    original_lock = users.account_row_lock

    def recording_lock(account_id):
        locked.append(account_id)
        return original_lock(account_id)

    monkeypatch.setattr(users, "account_row_lock", recording_lock)

    users.delete_user(db, superadmin_identity, extra.id)

    assert locked == [provisioned_account.id]
