"""
Tests for account administration: plans, status, trial and billing updates
"""

import pytest
from datetime import timedelta

from admin_console.core.errors import InvariantViolation, UnauthorizedError, ValidationError
from admin_console.models import Account, AccountStatus, AccountType, PlanStatus
from admin_console.schemas.account import TrialAction, TrialSettingsUpdate
from admin_console.services import accounts
from admin_console.services.provisioning import provision_account

from conftest import NOW, account_request, first_user_of, identity_for, make_plan


def test_get_account_includes_plan_and_user_count(db, superadmin_identity, provisioned_account, individual_plan):
    detail = accounts.get_account(db, superadmin_identity, provisioned_account.id, now=NOW)

    assert detail.plan.id == individual_plan.id
    assert detail.plan.features.max_users == 3
    assert detail.user_count == 1
    assert detail.trial_status.days_remaining == 14
    assert detail.trial_status.is_expired is False


def test_list_accounts_trial_summary(db, superadmin_identity, provisioned_account):
    later = NOW + timedelta(days=13, hours=1)
    [detail] = accounts.list_accounts(db, superadmin_identity, now=later)
    assert detail.trial_status.days_remaining == 1

    [detail] = accounts.list_accounts(db, superadmin_identity, now=NOW + timedelta(days=20))
    assert detail.trial_status.days_remaining == 0
    assert detail.trial_status.is_expired is True


def test_admin_operations_require_superadmin(db, provisioned_account):
    owner = identity_for(first_user_of(db, provisioned_account))

    with pytest.raises(UnauthorizedError, match="SuperAdmin access required"):
        accounts.list_accounts(db, owner)
    with pytest.raises(UnauthorizedError):
        accounts.update_billing_status(db, owner, provisioned_account.id, PlanStatus.ACTIVE)


def test_assign_plan_resnapshots_limits(db, superadmin_identity, provisioned_account):
    bigger = make_plan(db, AccountType.INDIVIDUAL, "Growth", max_users=25)

    message = accounts.assign_plan(db, superadmin_identity, provisioned_account.id, bigger.id)

    account = db.get(Account, provisioned_account.id)
    assert account.plan_id == bigger.id
    assert account.limits == {"users": 25, "subAccounts": 0}
    assert message == 'Plan "Growth" assigned to account "Ace Cafe" successfully'


def test_assign_incompatible_plan_is_rejected(db, superadmin_identity, provisioned_account, franchise_plan, individual_plan):
    with pytest.raises(ValidationError):
        accounts.assign_plan(db, superadmin_identity, provisioned_account.id, franchise_plan.id)

    db.expire_all()
    assert db.get(Account, provisioned_account.id).plan_id == individual_plan.id


def test_update_account_renames(db, superadmin_identity, provisioned_account, individual_plan):
    account = accounts.update_account(db, superadmin_identity, provisioned_account.id, "Ace Bistro", individual_plan.id)
    assert account.name == "Ace Bistro"
    # The slug is stable across renames
    assert account.slug == "ace-cafe"


def test_suspend_leaves_billing_untouched(db, superadmin_identity, provisioned_account):
    account = accounts.update_account_status(db, superadmin_identity, provisioned_account.id, AccountStatus.SUSPENDED)
    assert account.status == AccountStatus.SUSPENDED
    assert account.plan_status == PlanStatus.TRIAL


def test_trial_extend_persists_both_fields(db, superadmin_identity, provisioned_account):
    result = accounts.update_trial_settings(
        db,
        superadmin_identity,
        provisioned_account.id,
        TrialSettingsUpdate(action=TrialAction.EXTEND, extension_days=7),
        now=NOW,
    )

    account = db.get(Account, provisioned_account.id)
    assert result.message == "Trial settings updated successfully"
    assert result.new_plan_status == PlanStatus.TRIAL
    assert account.trial_ends_at == NOW + timedelta(days=21)
    assert account.plan_status == PlanStatus.TRIAL


def test_trial_end_activates(db, superadmin_identity, provisioned_account):
    accounts.update_trial_settings(
        db, superadmin_identity, provisioned_account.id, TrialSettingsUpdate(action=TrialAction.END), now=NOW
    )
    account = db.get(Account, provisioned_account.id)
    assert account.plan_status == PlanStatus.ACTIVE
    assert account.trial_ends_at == NOW


def test_invalid_trial_request_changes_nothing(db, superadmin_identity, provisioned_account):
    before = db.get(Account, provisioned_account.id).trial_ends_at

    with pytest.raises(ValidationError):
        accounts.update_trial_settings(
            db, superadmin_identity, provisioned_account.id, TrialSettingsUpdate(action=TrialAction.EXTEND), now=NOW
        )

    account = db.get(Account, provisioned_account.id)
    assert account.trial_ends_at == before
    assert account.plan_status == PlanStatus.TRIAL


def test_billing_override_keeps_trial_end(db, superadmin_identity, provisioned_account):
    ends = provisioned_account.trial_ends_at

    message = accounts.update_billing_status(db, superadmin_identity, provisioned_account.id, PlanStatus.PAST_DUE)

    account = db.get(Account, provisioned_account.id)
    assert message == "Billing status updated to past_due"
    assert account.plan_status == PlanStatus.PAST_DUE
    assert account.trial_ends_at == ends


def test_platform_stats(db, superadmin_identity, provisioned_account, franchise_account):
    accounts.update_billing_status(db, superadmin_identity, franchise_account.id, PlanStatus.ACTIVE)

    stats = accounts.get_platform_stats(db, superadmin_identity, now=NOW + timedelta(days=1))

    assert stats.total_accounts == 2
    assert stats.franchise_accounts == 1
    assert stats.individual_accounts == 1
    assert stats.trial_accounts == 1
    assert stats.active_trials == 1
    assert stats.expired_trials == 0
    assert stats.paid_accounts == 1
    assert stats.total_users == 3
    assert stats.total_plans == 2


def _attach_sub_accounts(db, identity, franchise, plan, count):
    for n in range(count):
        provision_account(
            db,
            identity,
            account_request(f"Branch {n}", plan, f"branch{n}@burger.io", parent_id=franchise.id),
            now=NOW,
        )


def test_downgrade_below_existing_sub_accounts_is_refused(
    db, superadmin_identity, franchise_account, franchise_plan, individual_plan
):
    _attach_sub_accounts(db, superadmin_identity, franchise_account, individual_plan, 2)
    smaller = make_plan(db, AccountType.FRANCHISE, "Franchise Lite", max_users=10, max_sub_accounts=1)

    with pytest.raises(InvariantViolation, match="allows 1 sub-account"):
        accounts.assign_plan(db, superadmin_identity, franchise_account.id, smaller.id)

    db.expire_all()
    account = db.get(Account, franchise_account.id)
    assert account.plan_id == franchise_plan.id
    assert account.limits["subAccounts"] == 5


def test_downgrade_to_exact_sub_account_count_is_allowed(db, superadmin_identity, franchise_account, individual_plan):
    _attach_sub_accounts(db, superadmin_identity, franchise_account, individual_plan, 2)
    snug = make_plan(db, AccountType.FRANCHISE, "Franchise Duo", max_users=10, max_sub_accounts=2)

    accounts.assign_plan(db, superadmin_identity, franchise_account.id, snug.id)

    assert db.get(Account, franchise_account.id).limits == {"users": 10, "subAccounts": 2}


def test_convert_trial_to_paid_clears_trial_end(db, superadmin_identity, provisioned_account, individual_plan):
    message = accounts.convert_trial_to_paid(db, superadmin_identity, provisioned_account.id)

    account = db.get(Account, provisioned_account.id)
    assert message == "Trial converted to paid subscription"
    assert account.plan_status == PlanStatus.ACTIVE
    assert account.trial_ends_at is None
    assert account.plan_id == individual_plan.id


def test_convert_trial_to_paid_can_switch_plan(db, superadmin_identity, provisioned_account):
    growth = make_plan(db, AccountType.INDIVIDUAL, "Growth", max_users=25)

    accounts.convert_trial_to_paid(db, superadmin_identity, provisioned_account.id, growth.id)

    account = db.get(Account, provisioned_account.id)
    assert account.plan_id == growth.id
    assert account.limits == {"users": 25, "subAccounts": 0}
    assert account.plan_status == PlanStatus.ACTIVE


def test_convert_trial_to_paid_rejects_incompatible_plan(
    db, superadmin_identity, provisioned_account, franchise_plan, individual_plan
):
    with pytest.raises(ValidationError):
        accounts.convert_trial_to_paid(db, superadmin_identity, provisioned_account.id, franchise_plan.id)

    db.expire_all()
    account = db.get(Account, provisioned_account.id)
    assert account.plan_status == PlanStatus.TRIAL
    assert account.plan_id == individual_plan.id
