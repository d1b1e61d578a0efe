"""Progress bookkeeping for the learning steps.

Callers pass the logged-in user explicitly; this layer never tracks who the
current user is.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog

from lessondb.enums import ProblemTheme
from lessondb.errors import UserNotFoundError, require
from lessondb.progress.schemas import AttemptRecord, SessionRecord, UserProgress
from lessondb.results.schemas import ResultRecord

if TYPE_CHECKING:
    from lessondb.progress.repository import ProgressRepository
    from lessondb.results.repository import ResultRepository
    from lessondb.users.repository import UserRepository
    from lessondb.users.schemas import UserRecord

logger = structlog.get_logger()


class ProgressService:
    def __init__(self, progress: ProgressRepository, users: UserRepository, results: ResultRepository) -> None:
        require(progress, "progress")
        require(users, "users")
        require(results, "results")
        self._progress = progress
        self._users = users
        self._results = results

    def fetch_progress(self, user_email: str | None) -> UserProgress:
        return self._progress.get_user_progress(user_email)

    def fetch_solved_problem_indexes(self, user_email: str | None, theme: ProblemTheme) -> list[int]:
        return self._progress.get_solved_problem_indexes(user_email, ProblemTheme(theme).value)

    def start_session(
        self, user: UserRecord, theme: ProblemTheme | None = None, current_step: str | None = None
    ) -> SessionRecord:
        require(user, "user")
        record = SessionRecord(
            user_id=user.id,
            user_email=user.email,
            theme=ProblemTheme(theme).value if theme is not None else None,
            current_step=current_step,
        )
        self._progress.insert_session(record)
        return record

    def record_step_attempt(
        self,
        user: UserRecord,
        theme: ProblemTheme,
        problem_index: int,
        problem_id: str | None = None,
        payload: Any = None,
        session_id: str | None = None,
    ) -> AttemptRecord:
        """Log one step interaction. ``payload`` is stored JSON-encoded."""
        require(user, "user")
        attempt = AttemptRecord(
            session_id=session_id,
            user_id=user.id,
            user_email=user.email,
            problem_id=problem_id,
            theme=ProblemTheme(theme).value,
            problem_index=problem_index,
            content=json.dumps(payload, default=str, ensure_ascii=False) if payload is not None else None,
        )
        self._progress.insert_attempt(attempt)
        return attempt

    def mark_problem_solved(self, user_email: str | None, theme: ProblemTheme, problem_index: int) -> ResultRecord:
        """
        Record that the user solved a problem.

        Returns the existing result when the user already has one for this
        (theme, index), so there is at most one result per problem.

        Raises:
            UserNotFoundError: If no active user has this email.
        """
        user = self._users.find_active_user_by_email(user_email)
        if user is None:
            msg = f"No active user for {user_email!r}"
            raise UserNotFoundError(msg)

        theme_key = ProblemTheme(theme).value
        for existing in self._results.get_results_by_user(user.email):
            if existing.theme == theme_key and existing.problem_index == problem_index:
                return existing

        result = ResultRecord(user_id=user.id, theme=theme_key, problem_index=problem_index, score=0)
        self._results.insert_result(result)
        logger.info("problem_solved", user_id=user.id, theme=theme_key, problem_index=problem_index)
        return result
