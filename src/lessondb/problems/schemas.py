"""Problem records."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from lessondb.enums import ProblemTheme


class ProblemRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    theme: ProblemTheme
    index: int = Field(..., ge=1)
    owner_email: str | None = None
    title: str = ""
    content: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
