"""Problem collection: static content, read-mostly."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from lessondb.db.models import Problem
from lessondb.enums import ProblemTheme
from lessondb.errors import require
from lessondb.problems.schemas import ProblemRecord

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from lessondb.database import StorageGateway

logger = structlog.get_logger()


def _to_record(row: Problem | None) -> ProblemRecord | None:
    return ProblemRecord.model_validate(row) if row is not None else None


class ProblemRepository:
    """Owns the ``problems`` collection."""

    def __init__(self, gateway: StorageGateway) -> None:
        require(gateway, "gateway")
        self._gateway = gateway

    def get_problem_by_id(self, problem_id: str | None) -> ProblemRecord | None:
        if problem_id is None or not problem_id.strip():
            return None
        return self._gateway.run(lambda s: _to_record(s.get(Problem, problem_id)))

    def get_problem_by_theme_and_index(self, theme: ProblemTheme, index: int) -> ProblemRecord | None:
        """Look up the problem at ``index`` (1-based) within ``theme``."""
        if index <= 0:
            return None
        theme_key = ProblemTheme(theme).value

        def work(session: Session) -> ProblemRecord | None:
            row = session.scalars(
                select(Problem).where(Problem.theme == theme_key, Problem.index == index)
            ).first()
            return _to_record(row)

        return self._gateway.run(work)

    def list_problems(self, theme: ProblemTheme | None = None) -> list[ProblemRecord]:
        def work(session: Session) -> list[ProblemRecord]:
            stmt = select(Problem).order_by(Problem.theme, Problem.index)
            if theme is not None:
                stmt = stmt.where(Problem.theme == ProblemTheme(theme).value)
            return [ProblemRecord.model_validate(row) for row in session.scalars(stmt)]

        return self._gateway.run(work)

    def insert_problem(self, problem: ProblemRecord) -> None:
        """Insert a problem. A second problem at the same (theme, index) raises ``IntegrityError``."""
        require(problem, "problem")

        def work(session: Session) -> None:
            fields = problem.model_dump()
            fields["theme"] = problem.theme.value
            session.add(Problem(**fields))

        self._gateway.run(work)
        logger.debug("problem_inserted", problem_id=problem.id, theme=problem.theme.value, index=problem.index)
