"""User collection: accounts, search, and administrative role/activation changes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import exists, func, or_, select

from lessondb.db.models import User
from lessondb.db.queries import find_user_by_email
from lessondb.enums import ADMIN_ROLES, UserRole
from lessondb.errors import require
from lessondb.users.access import (
    AccessDecision,
    evaluate_activation,
    evaluate_role_change,
    needs_admin_headcount,
)
from lessondb.users.schemas import UserRecord, UserSummary
from lessondb.users.search_keys import email_key, lower_name, phonetic_key

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from lessondb.database import StorageGateway

logger = structlog.get_logger()

_ADMIN_ROLES = sorted(ADMIN_ROLES)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _get_user(session: Session, user_id: str | None) -> User | None:
    if _blank(user_id):
        return None
    return session.get(User, user_id)


def _with_search_keys(user: UserRecord) -> dict:
    fields = user.model_dump()
    fields["email_lower"] = email_key(user.email)
    fields["lower_name"] = lower_name(user.name)
    fields["name_phonetic"] = phonetic_key(user.name)
    return fields


class UserRepository:
    """Owns the ``users`` collection."""

    def __init__(self, gateway: StorageGateway) -> None:
        require(gateway, "gateway")
        self._gateway = gateway

    # ------------------------------------------------------------------
    # Basic account data
    # ------------------------------------------------------------------

    def exists_email(self, email: str | None) -> bool:
        if _blank(email):
            return False
        return self._gateway.run(lambda s: find_user_by_email(s, email) is not None)

    def has_super_admin(self) -> bool:
        return self._gateway.run(
            lambda s: bool(s.scalar(select(exists().where(User.role == UserRole.SUPERADMIN))))
        )

    def find_active_user_by_email(self, email: str | None) -> UserRecord | None:
        if _blank(email):
            return None

        def work(session: Session) -> UserRecord | None:
            row = find_user_by_email(session, email)
            if row is None or not row.is_active:
                return None
            return UserRecord.model_validate(row)

        return self._gateway.run(work)

    def find_user_by_id(self, user_id: str | None) -> UserRecord | None:
        if _blank(user_id):
            return None

        def work(session: Session) -> UserRecord | None:
            row = session.get(User, user_id)
            return UserRecord.model_validate(row) if row is not None else None

        return self._gateway.run(work)

    def insert_user(self, user: UserRecord) -> UserRecord:
        """
        Insert a new user.

        Duplicate ids or emails (case-insensitive), and a second SUPERADMIN,
        are rejected by the store's unique indices with ``IntegrityError``.
        """
        require(user, "user")

        def work(session: Session) -> UserRecord:
            row = User(**_with_search_keys(user))
            session.add(row)
            session.flush()
            return UserRecord.model_validate(row)

        stored = self._gateway.run(work)
        logger.info("user_inserted", user_id=stored.id, role=stored.role.name)
        return stored

    def update_user(self, user: UserRecord) -> bool:
        """Replace the stored record with the same id. Returns False if there is none."""
        require(user, "user")

        def work(session: Session) -> bool:
            row = session.get(User, user.id)
            if row is None:
                return False
            for key, value in _with_search_keys(user).items():
                setattr(row, key, value)
            return True

        return self._gateway.run(work)

    # ------------------------------------------------------------------
    # Summaries / search
    # ------------------------------------------------------------------

    def search_users_friendly(self, query: str | None) -> list[UserSummary]:
        """
        Search by email, name, lower-cased name or initial-consonant key.

        A blank query lists every user. Matching is substring based and any
        one field is enough.
        """
        query = (query or "").strip()

        def work(session: Session) -> list[UserSummary]:
            stmt = select(User)
            if query:
                lowered = query.lower()
                stmt = stmt.where(
                    or_(
                        func.instr(User.email_lower, lowered) > 0,
                        func.instr(User.name, query) > 0,
                        func.instr(User.lower_name, lowered) > 0,
                        func.instr(User.name_phonetic, query) > 0,
                    )
                )
            return [UserSummary.model_validate(row) for row in session.scalars(stmt)]

        return self._gateway.run(work)

    def list_all_users(self, limit: int = 0) -> list[UserSummary]:
        def work(session: Session) -> list[UserSummary]:
            stmt = select(User)
            if limit > 0:
                stmt = stmt.limit(limit)
            return [UserSummary.model_validate(row) for row in session.scalars(stmt)]

        return self._gateway.run(work)

    def search_users_raw(self, acting_user_id: str | None, contains: str | None = "") -> list[UserRecord]:
        """Full records for administrators, newest first. Anyone else gets an empty list."""
        needle = (contains or "").strip().lower()

        def work(session: Session) -> list[UserRecord]:
            acting = _get_user(session, acting_user_id)
            if acting is None or acting.role < UserRole.ADMIN:
                return []

            stmt = select(User).order_by(User.created_at.desc())
            if needle:
                stmt = stmt.where(
                    or_(
                        func.instr(User.email_lower, needle) > 0,
                        func.instr(User.lower_name, needle) > 0,
                    )
                )
            return [UserRecord.model_validate(row) for row in session.scalars(stmt)]

        return self._gateway.run(work)

    # ------------------------------------------------------------------
    # Administrative changes
    # ------------------------------------------------------------------

    def change_user_role(
        self, acting_user_id: str | None, target_user_id: str | None, role: UserRole
    ) -> AccessDecision:
        """Apply a role change and report which rule, if any, rejected it."""

        def work(session: Session) -> AccessDecision:
            acting = _get_user(session, acting_user_id)
            target = _get_user(session, target_user_id)
            admin_exists = bool(session.scalar(select(exists().where(User.role == UserRole.ADMIN))))

            decision = evaluate_role_change(
                acting.role if acting is not None else None,
                target.role if target is not None else None,
                role,
                admin_exists,
            )
            if decision is AccessDecision.OK:
                target.role = role
            return decision

        decision = self._gateway.run(work)
        if decision is AccessDecision.OK:
            logger.info("role_changed", acting_user_id=acting_user_id, target_user_id=target_user_id, role=role.name)
        else:
            logger.info(
                "role_change_rejected",
                acting_user_id=acting_user_id,
                target_user_id=target_user_id,
                role=role.name,
                reason=decision.value,
            )
        return decision

    def try_set_user_role(self, acting_user_id: str | None, target_user_id: str | None, role: UserRole) -> bool:
        return self.change_user_role(acting_user_id, target_user_id, role) is AccessDecision.OK

    def change_user_active(
        self, acting_user_id: str | None, target_user_id: str | None, active: bool
    ) -> AccessDecision:
        """Flip a user's active flag and report which rule, if any, rejected it."""

        def work(session: Session) -> AccessDecision:
            acting = _get_user(session, acting_user_id)
            target = _get_user(session, target_user_id)

            other_admin_active = True
            if target is not None and needs_admin_headcount(target.role, active):
                other_admin_active = bool(
                    session.scalar(
                        select(
                            exists().where(
                                User.id != target.id,
                                User.is_active.is_(True),
                                User.role.in_(_ADMIN_ROLES),
                            )
                        )
                    )
                )

            decision = evaluate_activation(
                acting_user_id or "",
                acting.role if acting is not None else None,
                target.id if target is not None else None,
                target.role if target is not None else None,
                active,
                other_admin_active,
            )
            if decision is AccessDecision.OK:
                target.is_active = active
            return decision

        decision = self._gateway.run(work)
        if decision is AccessDecision.OK:
            logger.info("active_changed", acting_user_id=acting_user_id, target_user_id=target_user_id, active=active)
        else:
            logger.info(
                "active_change_rejected",
                acting_user_id=acting_user_id,
                target_user_id=target_user_id,
                active=active,
                reason=decision.value,
            )
        return decision

    def try_set_user_active(self, acting_user_id: str | None, target_user_id: str | None, active: bool) -> bool:
        return self.change_user_active(acting_user_id, target_user_id, active) is AccessDecision.OK
