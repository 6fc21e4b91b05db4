"""
Seed the plan catalogue and bootstrap the platform super-admin

Run once against a fresh database:

    python -m admin_console.scripts.seed --email root@example.com

Prints a bearer token for the super-admin so the API can be used before any
login flow exists in front of it.
"""

import argparse
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional

from sqlmodel import Session, select
import structlog

from admin_console.core.auth import create_access_token
from admin_console.core.database import engine
from admin_console.models import (
    AccountType,
    AppUser,
    MembershipType,
    Plan,
    UserRole,
    UserStatus,
)

logger = structlog.get_logger(__name__)

DEFAULT_PLANS = [
    {
        "name": "Starter",
        "type": AccountType.INDIVIDUAL,
        "price": Decimal("29"),
        "features": {"maxUsers": 3, "maxSubAccounts": 0, "dataRetention": 365, "apiCalls": 1000},
        "feature_list": ["Up to 3 users", "Basic reports"],
    },
    {
        "name": "Growth",
        "type": AccountType.INDIVIDUAL,
        "price": Decimal("79"),
        "features": {
            "maxUsers": 10,
            "maxSubAccounts": 0,
            "dataRetention": 730,
            "apiCalls": 5000,
            "customDomain": True,
        },
        "feature_list": ["Up to 10 users", "Custom domain", "Advanced reports"],
    },
    {
        "name": "Franchise",
        "type": AccountType.FRANCHISE,
        "price": Decimal("199"),
        "features": {
            "maxUsers": 50,
            "maxSubAccounts": 25,
            "dataRetention": 1095,
            "apiCalls": 25000,
            "customDomain": True,
            "multiLocation": True,
        },
        "feature_list": ["Up to 25 locations", "Central reporting", "Priority support"],
    },
]


def seed_plans(session: Session) -> List[Plan]:
    """Insert the default catalogue unless plans already exist"""
    if session.exec(select(Plan)).first() is not None:
        logger.info("Plans already seeded")
        return []

    plans = [Plan(**data) for data in DEFAULT_PLANS]
    session.add_all(plans)
    session.commit()

    logger.info(f"Seeded {len(plans)} plans")
    return plans


def bootstrap_superadmin(
    session: Session,
    email: str,
    first_name: str = "Platform",
    last_name: str = "Admin",
) -> AppUser:
    """Return the super-admin with this email, creating it if needed"""
    email = email.lower()
    user = session.exec(select(AppUser).where(AppUser.email == email)).first()
    if user:
        if user.role != UserRole.SUPERADMIN:
            raise ValueError(f"{email} already exists with role {UserRole(user.role).value}")
        return user

    user = AppUser(
        account_id=None,
        account_type=MembershipType.PLATFORM,
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=UserRole.SUPERADMIN,
        status=UserStatus.ACTIVE,
        email_verified=True,
    )
    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info(f"Super-admin created: {user.id}")
    return user


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Seed plans and the platform super-admin")
    parser.add_argument("--email", required=True)
    parser.add_argument("--first-name", default="Platform")
    parser.add_argument("--last-name", default="Admin")
    parser.add_argument("--token-hours", type=int, default=24)
    args = parser.parse_args(argv)

    with Session(engine) as session:
        seed_plans(session)
        admin = bootstrap_superadmin(session, args.email, args.first_name, args.last_name)
        token = create_access_token(
            user_id=admin.id,
            role=UserRole.SUPERADMIN.value,
            expires_delta=timedelta(hours=args.token_hours),
        )

    print(token)


if __name__ == "__main__":
    main()
