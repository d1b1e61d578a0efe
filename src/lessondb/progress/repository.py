"""Attempts, sessions and the per-user progress aggregate.

Progress reads the users, sessions and results collections directly rather
than going through the other repositories.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select

from lessondb.db.models import Attempt, LearningSession, Result
from lessondb.db.queries import find_user_by_email
from lessondb.enums import ProblemTheme
from lessondb.errors import require
from lessondb.progress.schemas import AttemptRecord, SessionRecord, UserProgress

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from lessondb.database import StorageGateway

logger = structlog.get_logger()


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


class ProgressRepository:
    """Owns the ``attempts`` and ``sessions`` collections; reads ``users`` and ``results``."""

    def __init__(self, gateway: StorageGateway) -> None:
        require(gateway, "gateway")
        self._gateway = gateway

    def insert_attempt(self, attempt: AttemptRecord) -> None:
        require(attempt, "attempt")
        self._gateway.run(lambda s: s.add(Attempt(**attempt.model_dump())))
        logger.debug(
            "attempt_inserted", attempt_id=attempt.id, theme=attempt.theme, problem_index=attempt.problem_index
        )

    def insert_session(self, record: SessionRecord) -> None:
        require(record, "session")
        self._gateway.run(lambda s: s.add(LearningSession(**record.model_dump())))
        logger.debug("session_inserted", session_id=record.id, user_email=record.user_email)

    def get_attempts_by_user(self, user_email: str | None) -> list[AttemptRecord]:
        if _blank(user_email):
            return []

        def work(session: Session) -> list[AttemptRecord]:
            rows = session.scalars(
                select(Attempt).where(Attempt.user_email == user_email).order_by(Attempt.created_at)
            )
            return [AttemptRecord.model_validate(row) for row in rows]

        return self._gateway.run(work)

    def get_user_progress(self, user_email: str | None) -> UserProgress:
        """
        Summarize a user's activity.

        Sessions are counted by email; solved problems are the user's result
        rows and count as zero when the email does not resolve to a user.
        """
        if _blank(user_email):
            return UserProgress(user_email=user_email)

        def work(session: Session) -> UserProgress:
            by_email = LearningSession.user_email == user_email
            total_sessions = session.scalar(select(func.count()).select_from(LearningSession).where(by_email)) or 0
            last_session_at = session.scalar(select(func.max(LearningSession.created_at)).where(by_email))

            total_solved = 0
            user = find_user_by_email(session, user_email)
            if user is not None:
                total_solved = (
                    session.scalar(select(func.count()).select_from(Result).where(Result.user_id == user.id)) or 0
                )

            return UserProgress(
                user_email=user_email,
                total_sessions=total_sessions,
                total_solved=total_solved,
                last_session_at=last_session_at,
            )

        return self._gateway.run(work)

    def get_solved_problem_indexes(self, user_email: str | None, theme: str | ProblemTheme | None = None) -> list[int]:
        """Sorted, duplicate-free problem indexes the user has results for, optionally within one theme."""
        if _blank(user_email):
            return []
        theme_key = theme.value if isinstance(theme, ProblemTheme) else theme

        def work(session: Session) -> list[int]:
            user = find_user_by_email(session, user_email)
            if user is None:
                return []
            stmt = select(Result.problem_index).distinct().where(Result.user_id == user.id)
            if theme_key:
                stmt = stmt.where(Result.theme == theme_key)
            return sorted(session.scalars(stmt))

        return self._gateway.run(work)
