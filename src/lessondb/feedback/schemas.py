"""Feedback records."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class FeedbackRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    result_id: str
    admin_email: str | None = None
    comment: str | None = None
    score: float | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
