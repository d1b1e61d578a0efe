"""Enumerations shared by records and ORM models."""

from __future__ import annotations

from enum import Enum, IntEnum


class UserRole(IntEnum):
    """Account roles, ordered by privilege."""

    USER = 0
    ADMIN = 1
    SUPERADMIN = 2


ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPERADMIN})


class ProblemTheme(str, Enum):
    """Problem categories."""

    DIRECTOR = "Director"
    GARDENER = "Gardener"
