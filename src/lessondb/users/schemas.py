"""User records crossing the repository boundary."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from lessondb.enums import UserRole


class UserRecord(BaseModel):
    """Full user record. ``lower_name`` and ``name_phonetic`` are derived from ``name`` on write."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: str
    name: str = ""
    lower_name: str = ""
    name_phonetic: str = ""
    password_hash: str | None = None
    role: UserRole = UserRole.USER
    is_active: bool = True
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class UserSummary(BaseModel):
    """Read-only projection used by listing and search screens."""

    model_config = ConfigDict(from_attributes=True)

    email: str
    name: str
    role: UserRole
    is_active: bool
