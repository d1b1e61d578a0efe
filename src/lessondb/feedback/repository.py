"""Feedback collection: append-only annotations on results."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from lessondb.db.models import Feedback
from lessondb.errors import require
from lessondb.feedback.schemas import FeedbackRecord

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from lessondb.database import StorageGateway

logger = structlog.get_logger()


class FeedbackRepository:
    """Owns the ``feedback`` collection."""

    def __init__(self, gateway: StorageGateway) -> None:
        require(gateway, "gateway")
        self._gateway = gateway

    def insert_feedback(self, feedback: FeedbackRecord) -> None:
        require(feedback, "feedback")
        self._gateway.run(lambda s: s.add(Feedback(**feedback.model_dump())))
        logger.debug("feedback_inserted", feedback_id=feedback.id, result_id=feedback.result_id)

    def get_feedbacks_by_result(self, result_id: str | None) -> list[FeedbackRecord]:
        if result_id is None or not result_id.strip():
            return []

        def work(session: Session) -> list[FeedbackRecord]:
            rows = session.scalars(
                select(Feedback).where(Feedback.result_id == result_id).order_by(Feedback.created_at)
            )
            return [FeedbackRecord.model_validate(row) for row in rows]

        return self._gateway.run(work)
