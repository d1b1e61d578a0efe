"""Problem slot seeding: every theme has problems numbered 1..10."""

from __future__ import annotations

import structlog

from lessondb.enums import ProblemTheme
from lessondb.problems.repository import ProblemRepository
from lessondb.problems.schemas import ProblemRecord

logger = structlog.get_logger()

PROBLEMS_PER_THEME = 10


def seed_problems(repo: ProblemRepository, per_theme: int = PROBLEMS_PER_THEME) -> int:
    """Insert any missing (theme, index) slot. Idempotent; returns how many were created."""
    existing = {(p.theme, p.index) for p in repo.list_problems()}
    created = 0
    for theme in ProblemTheme:
        for index in range(1, per_theme + 1):
            if (theme, index) in existing:
                continue
            repo.insert_problem(ProblemRecord(theme=theme, index=index, title=f"{theme.value} {index}"))
            created += 1

    if created:
        logger.info("problems_seeded", created=created)
    return created
