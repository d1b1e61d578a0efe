"""Inventory records."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from lessondb.enums import ProblemTheme


class InventoryItem(BaseModel):
    """Ownership of one item by one user."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str | None = None
    user_email: str
    item_id: str
    item_name: str | None = None
    theme: ProblemTheme | None = None
    acquired_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
