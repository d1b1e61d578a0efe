"""Role and activation rules for account administration.

Rules (checked in this order):
- The acting user must exist and hold ADMIN or SUPERADMIN
- The target must exist
- SUPERADMIN is never demoted and never granted through a role change
- The first ADMIN can only be created by a SUPERADMIN
- Only USER -> ADMIN and ADMIN -> USER are supported role changes
- Nobody deactivates themselves, and a SUPERADMIN is never deactivated
- The last active administrator cannot be deactivated
"""

from __future__ import annotations

from enum import Enum

from lessondb.enums import ADMIN_ROLES, UserRole

SUPPORTED_ROLE_CHANGES: dict[UserRole, UserRole] = {
    UserRole.USER: UserRole.ADMIN,
    UserRole.ADMIN: UserRole.USER,
}


class AccessDecision(str, Enum):
    """Outcome of an administrative change. Anything but OK leaves the store untouched."""

    OK = "ok"
    ACTOR_NOT_FOUND = "actor_not_found"
    TARGET_NOT_FOUND = "target_not_found"
    INSUFFICIENT_ROLE = "insufficient_role"
    TARGET_IS_SUPERADMIN = "target_is_superadmin"
    SUPERADMIN_NOT_GRANTABLE = "superadmin_not_grantable"
    FIRST_ADMIN_REQUIRES_SUPERADMIN = "first_admin_requires_superadmin"
    UNSUPPORTED_TRANSITION = "unsupported_transition"
    SELF_DEACTIVATION = "self_deactivation"
    LAST_ADMIN = "last_admin"


def evaluate_role_change(
    acting_role: UserRole | None,
    target_role: UserRole | None,
    requested_role: UserRole,
    admin_exists: bool,
) -> AccessDecision:
    """Decide whether ``acting_role`` may move a ``target_role`` user to ``requested_role``.

    ``None`` for either role means the user was not found.
    """
    if acting_role is None:
        return AccessDecision.ACTOR_NOT_FOUND
    if acting_role < UserRole.ADMIN:
        return AccessDecision.INSUFFICIENT_ROLE
    if target_role is None:
        return AccessDecision.TARGET_NOT_FOUND
    if target_role == UserRole.SUPERADMIN:
        return AccessDecision.TARGET_IS_SUPERADMIN
    if requested_role == UserRole.SUPERADMIN:
        return AccessDecision.SUPERADMIN_NOT_GRANTABLE
    if not admin_exists and requested_role == UserRole.ADMIN and acting_role != UserRole.SUPERADMIN:
        return AccessDecision.FIRST_ADMIN_REQUIRES_SUPERADMIN
    if SUPPORTED_ROLE_CHANGES.get(target_role) != requested_role:
        return AccessDecision.UNSUPPORTED_TRANSITION
    return AccessDecision.OK


def evaluate_activation(
    acting_id: str,
    acting_role: UserRole | None,
    target_id: str | None,
    target_role: UserRole | None,
    active: bool,
    other_admin_active: bool = True,
) -> AccessDecision:
    """Decide whether the acting user may set the target's active flag.

    ``other_admin_active`` only matters when deactivating an administrator:
    it must report whether another active ADMIN/SUPERADMIN exists besides
    the target.
    """
    if acting_role is None:
        return AccessDecision.ACTOR_NOT_FOUND
    if acting_role < UserRole.ADMIN:
        return AccessDecision.INSUFFICIENT_ROLE
    if target_role is None:
        return AccessDecision.TARGET_NOT_FOUND
    if active:
        return AccessDecision.OK
    if target_id == acting_id:
        return AccessDecision.SELF_DEACTIVATION
    if target_role == UserRole.SUPERADMIN:
        return AccessDecision.TARGET_IS_SUPERADMIN
    if target_role in ADMIN_ROLES and not other_admin_active:
        return AccessDecision.LAST_ADMIN
    return AccessDecision.OK


def needs_admin_headcount(target_role: UserRole | None, active: bool) -> bool:
    """True when deactivating ``target_role`` requires the other-admin check."""
    return not active and target_role in ADMIN_ROLES
