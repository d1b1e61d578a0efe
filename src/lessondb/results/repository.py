"""Result collection: per-user problem outcomes, updated in place."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from lessondb.db.models import Result
from lessondb.db.queries import find_user_by_email
from lessondb.errors import require
from lessondb.results.schemas import ResultRecord

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from lessondb.database import StorageGateway

logger = structlog.get_logger()


class ResultRepository:
    """Owns the ``results`` collection."""

    def __init__(self, gateway: StorageGateway) -> None:
        require(gateway, "gateway")
        self._gateway = gateway

    def insert_result(self, result: ResultRecord) -> None:
        require(result, "result")
        self._gateway.run(lambda s: s.add(Result(**result.model_dump())))
        logger.debug("result_inserted", result_id=result.id, user_id=result.user_id)

    def update_result(self, result: ResultRecord) -> bool:
        """Replace the stored result with the same id. Returns False if there is none."""
        require(result, "result")

        def work(session: Session) -> bool:
            row = session.get(Result, result.id)
            if row is None:
                return False
            for key, value in result.model_dump(exclude={"id"}).items():
                setattr(row, key, value)
            return True

        return self._gateway.run(work)

    def get_results_by_user(self, user_email: str | None) -> list[ResultRecord]:
        """All results of the user with this email (active or not), oldest first."""
        if user_email is None or not user_email.strip():
            return []

        def work(session: Session) -> list[ResultRecord]:
            user = find_user_by_email(session, user_email)
            if user is None:
                return []
            rows = session.scalars(
                select(Result).where(Result.user_id == user.id).order_by(Result.created_at)
            )
            return [ResultRecord.model_validate(row) for row in rows]

        return self._gateway.run(work)

    def get_result_by_id(self, result_id: str | None) -> ResultRecord | None:
        if result_id is None or not result_id.strip():
            return None

        def work(session: Session) -> ResultRecord | None:
            row = session.get(Result, result_id)
            return ResultRecord.model_validate(row) if row is not None else None

        return self._gateway.run(work)
