"""Lookups shared by repositories that join on user identity."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from lessondb.db.models import User
from lessondb.users.search_keys import email_key

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


def find_user_by_email(session: Session, email: str) -> User | None:
    """Resolve an email to its user row. Case-insensitive; ignores the active flag."""
    return session.scalars(select(User).where(User.email_lower == email_key(email))).first()
