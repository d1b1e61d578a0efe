"""ORM models, one per collection of the embedded store.

Indices declared here are created once when the gateway opens the store.
Enumerated values the app may rename over time (themes) are stored as plain
strings and validated when rows are turned into records.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Enum,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from lessondb.db.base import Base
from lessondb.db.types import UTCDateTime, utcnow
from lessondb.enums import UserRole


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' collection."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    email_lower: Mapped[str] = mapped_column(String(320), nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False, default="", index=True)
    lower_name: Mapped[str] = mapped_column(String(128), nullable=False, default="", index=True)
    name_phonetic: Mapped[str] = mapped_column(String(128), nullable=False, default="", index=True)
    password_hash: Mapped[str | None] = mapped_column(String(256), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=16), nullable=False, default=UserRole.USER, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


Index("uq_users_email_lower", User.email_lower, unique=True)
# At most one SUPERADMIN row
Index("uq_users_single_superadmin", User.role, unique=True, sqlite_where=text("role = 'SUPERADMIN'"))


# ---------------------------------------------------------------------------
# Problems
# ---------------------------------------------------------------------------


class Problem(Base):
    """Static problem definitions, one per (theme, index)."""

    __tablename__ = "problems"
    __table_args__ = (UniqueConstraint("theme", "index", name="uq_problems_theme_index"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    theme: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    index: Mapped[int] = mapped_column("index", Integer, nullable=False)
    owner_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class Result(Base):
    """Outcome of a problem for a user. Updated in place as the learner progresses."""

    __tablename__ = "results"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    theme: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    problem_index: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    correct_rate: Mapped[float | None] = mapped_column(Float, nullable=True)
    duration_sec: Mapped[float | None] = mapped_column(Float, nullable=True)
    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Attempts (append-only)
# ---------------------------------------------------------------------------


class Attempt(Base):
    """A single step interaction. Never updated or deleted."""

    __tablename__ = "attempts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    session_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    user_email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    problem_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    theme: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    problem_index: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


class InventoryEntry(Base):
    """A user owns an item. Rows are inserted once and never removed."""

    __tablename__ = "inventory"
    __table_args__ = (Index("ix_inventory_owner_item", "user_email", "item_id"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    user_email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    item_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    item_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    theme: Mapped[str | None] = mapped_column(String(32), nullable=True)
    acquired_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Feedback (append-only)
# ---------------------------------------------------------------------------


class Feedback(Base):
    """Admin annotation on a result."""

    __tablename__ = "feedback"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    result_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    admin_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class LearningSession(Base):
    """Marks that a user started a learning session."""

    __tablename__ = "sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    user_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    user_email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    theme: Mapped[str | None] = mapped_column(String(32), nullable=True)
    current_step: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
