"""
Test configuration for pytest
"""

import pytest
import os
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, select
from typing import Generator
import uuid

# Test environment variables
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["AUTO_CREATE_TABLES"] = "false"

from fastapi.testclient import TestClient  # noqa: E402

from admin_console.core.auth import create_access_token  # noqa: E402
from admin_console.core.database import get_session  # noqa: E402
from admin_console.models import (  # noqa: E402
    Account,
    AccountType,
    AppUser,
    MembershipType,
    Plan,
    UserRole,
    UserStatus,
)
from admin_console.schemas.account import AccountCreate, AdminUserProfile  # noqa: E402
from admin_console.schemas.token import CallerIdentity  # noqa: E402
from admin_console.services.provisioning import provision_account  # noqa: E402

# Fixed clock for time-dependent tests
NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


# In-memory SQLite shared by every connection of the test engine
test_engine = create_engine(
    "sqlite:///:memory:",
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a clean database session for each test"""
    # Create all tables
    SQLModel.metadata.create_all(test_engine)

    # Create session
    with Session(test_engine) as session:
        yield session

    # Cleanup
    SQLModel.metadata.drop_all(test_engine)


def make_plan(session: Session, account_type: AccountType, name: str, max_users: int, max_sub_accounts: int = 0) -> Plan:
    plan = Plan(
        name=name,
        type=account_type,
        price=Decimal("29.00"),
        features={"maxUsers": max_users, "maxSubAccounts": max_sub_accounts},
        feature_list=["Loyalty cards"],
    )
    session.add(plan)
    session.commit()
    session.refresh(plan)
    return plan


@pytest.fixture
def individual_plan(db: Session) -> Plan:
    return make_plan(db, AccountType.INDIVIDUAL, "Starter", max_users=3)


@pytest.fixture
def franchise_plan(db: Session) -> Plan:
    return make_plan(db, AccountType.FRANCHISE, "Franchise Pro", max_users=10, max_sub_accounts=5)


@pytest.fixture
def superadmin(db: Session) -> AppUser:
    user = AppUser(
        account_id=None,
        account_type=MembershipType.PLATFORM,
        email="root@platform.io",
        first_name="Root",
        last_name="Admin",
        role=UserRole.SUPERADMIN,
        status=UserStatus.ACTIVE,
        email_verified=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def identity_for(user: AppUser) -> CallerIdentity:
    return CallerIdentity(user_id=user.id, role=user.role, account_id=user.account_id, email=user.email)


@pytest.fixture
def superadmin_identity(superadmin: AppUser) -> CallerIdentity:
    return identity_for(superadmin)


def account_request(
    name: str,
    plan: Plan,
    email: str,
    account_type: AccountType = AccountType.INDIVIDUAL,
    parent_id: uuid.UUID = None,
    trial_days: int = None,
) -> AccountCreate:
    return AccountCreate(
        type=account_type,
        name=name,
        plan_id=plan.id,
        admin_user=AdminUserProfile(first_name="Ada", last_name="Owner", email=email),
        parent_id=parent_id,
        trial_days=trial_days,
    )


@pytest.fixture
def provisioned_account(db: Session, superadmin_identity: CallerIdentity, individual_plan: Plan) -> Account:
    """Individual account on trial with its first orgadmin"""
    result = provision_account(
        db, superadmin_identity, account_request("Ace Cafe", individual_plan, "owner@ace.io"), now=NOW
    )
    return db.get(Account, result.account_id)


@pytest.fixture
def franchise_account(db: Session, superadmin_identity: CallerIdentity, franchise_plan: Plan) -> Account:
    result = provision_account(
        db,
        superadmin_identity,
        account_request("Burger Group", franchise_plan, "owner@burger.io", AccountType.FRANCHISE),
        now=NOW,
    )
    return db.get(Account, result.account_id)


def first_user_of(session: Session, account: Account) -> AppUser:
    return session.exec(select(AppUser).where(AppUser.account_id == account.id)).first()


def auth_headers(user: AppUser) -> dict:
    token = create_access_token(user_id=user.id, role=UserRole(user.role).value, account_id=user.account_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(db: Session) -> Generator[TestClient, None, None]:
    """HTTP client bound to the test session"""
    from admin_console.main import app

    def override_get_session():
        yield db

    app.dependency_overrides[get_session] = override_get_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
