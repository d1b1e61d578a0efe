"""Admin screens: user search, result review and feedback."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from lessondb.errors import MissingArgumentError, require

if TYPE_CHECKING:
    from lessondb.feedback.repository import FeedbackRepository
    from lessondb.feedback.schemas import FeedbackRecord
    from lessondb.results.repository import ResultRepository
    from lessondb.results.schemas import ResultRecord
    from lessondb.users.repository import UserRepository
    from lessondb.users.schemas import UserSummary

logger = structlog.get_logger()


class AdminService:
    def __init__(self, users: UserRepository, results: ResultRepository, feedback: FeedbackRepository) -> None:
        require(users, "users")
        require(results, "results")
        require(feedback, "feedback")
        self._users = users
        self._results = results
        self._feedback = feedback

    def search_users(self, query: str | None) -> list[UserSummary]:
        return self._users.search_users_friendly(query or "")

    def fetch_results_by_user(self, user_email: str | None) -> list[ResultRecord]:
        return self._results.get_results_by_user(user_email)

    def submit_feedback(self, result_id: str | None, feedback: FeedbackRecord) -> FeedbackRecord:
        """Attach ``feedback`` to a result and store it."""
        require(feedback, "feedback")
        if result_id is None or not result_id.strip():
            msg = "result_id is required"
            raise MissingArgumentError(msg)

        stored = feedback.model_copy(update={"result_id": result_id})
        self._feedback.insert_feedback(stored)
        logger.info("feedback_submitted", result_id=result_id, feedback_id=stored.id)
        return stored
