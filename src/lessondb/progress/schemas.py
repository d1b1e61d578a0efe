"""Attempt, session and progress records."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class AttemptRecord(BaseModel):
    """Append-only log entry of a single step interaction."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    session_id: str | None = None
    user_id: str | None = None
    user_email: str | None = None
    problem_id: str | None = None
    theme: str
    problem_index: int | None = None
    content: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SessionRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str | None = None
    user_email: str
    theme: str | None = None
    current_step: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UserProgress(BaseModel):
    """Aggregate computed on demand; never persisted."""

    user_email: str | None = None
    total_sessions: int = 0
    total_solved: int = 0
    last_session_at: datetime | None = None
