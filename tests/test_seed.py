"""
Tests for the catalogue seed and super-admin bootstrap
"""

import pytest

from admin_console.models import AccountType, UserRole
from admin_console.scripts.seed import bootstrap_superadmin, seed_plans

from conftest import first_user_of


def test_seed_plans_is_idempotent(db):
    plans = seed_plans(db)

    assert [plan.name for plan in plans] == ["Starter", "Growth", "Franchise"]
    franchise = plans[2]
    assert franchise.type == AccountType.FRANCHISE
    assert franchise.max_sub_accounts() == 25

    assert seed_plans(db) == []


def test_bootstrap_superadmin_creates_once(db):
    admin = bootstrap_superadmin(db, "Root@Example.com")

    assert admin.role == UserRole.SUPERADMIN
    assert admin.account_id is None
    assert bootstrap_superadmin(db, "root@example.com").id == admin.id


def test_bootstrap_refuses_existing_account_user(db, provisioned_account):
    owner = first_user_of(db, provisioned_account)

    with pytest.raises(ValueError, match="already exists"):
        bootstrap_superadmin(db, owner.email)
