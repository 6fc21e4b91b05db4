"""
Slug allocation for account URLs

Slugs are derived from the display name and checked against the store.
The check is not a reservation: the ``accounts.slug`` column is UNIQUE, and
provisioning treats an insert conflict as "taken" and moves on to the next
candidate from the same iterator.
"""

import itertools
import re
from typing import Iterator, Optional

from sqlmodel import Session, select

from admin_console.models.account import Account

_UNSAFE = re.compile(r"[^a-z0-9]")


def base_slug(name: str) -> str:
    """Lower-case the name and replace every character outside [a-z0-9] with '-'"""
    return _UNSAFE.sub("-", name.lower())


def slug_candidates(name: str) -> Iterator[str]:
    """Yield ``base``, ``base-1``, ``base-2``, ..."""
    base = base_slug(name)
    yield base
    for counter in itertools.count(1):
        yield f"{base}-{counter}"


def slug_exists(session: Session, slug: str) -> bool:
    return session.exec(select(Account.id).where(Account.slug == slug)).first() is not None


def allocate_slug(
    session: Session,
    name: Optional[str] = None,
    candidates: Optional[Iterator[str]] = None,
) -> str:
    """Return the first candidate slug not present in the store

    Pass ``candidates`` to resume probing where an earlier allocation left off.
    """
    if candidates is None:
        if name is None:
            raise ValueError("allocate_slug needs a name or a candidate iterator")
        candidates = slug_candidates(name)

    for slug in candidates:
        if not slug_exists(session, slug):
            return slug

    # slug_candidates is infinite; a finite iterator ran dry
    raise ValueError("Slug candidates exhausted")
