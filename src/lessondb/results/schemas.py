"""Result records."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ResultRecord(BaseModel):
    """Outcome of one problem for one user.

    By convention callers keep at most one result per (user_id, theme,
    problem_index); the store does not enforce it.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    theme: str
    problem_index: int
    score: float | None = None
    correct_rate: float | None = None
    duration_sec: float | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
