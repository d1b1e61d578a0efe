"""Unit tests for the role/activation decision rules."""

from __future__ import annotations

import pytest

from lessondb.enums import UserRole
from lessondb.users.access import (
    SUPPORTED_ROLE_CHANGES,
    AccessDecision,
    evaluate_activation,
    evaluate_role_change,
    needs_admin_headcount,
)

USER, ADMIN, SUPER = UserRole.USER, UserRole.ADMIN, UserRole.SUPERADMIN


class TestRoleChange:
    def test_supported_transitions_structure(self):
        assert SUPPORTED_ROLE_CHANGES == {USER: ADMIN, ADMIN: USER}

    def test_missing_actor(self):
        assert evaluate_role_change(None, USER, ADMIN, True) is AccessDecision.ACTOR_NOT_FOUND

    def test_plain_user_cannot_change_roles(self):
        assert evaluate_role_change(USER, USER, ADMIN, True) is AccessDecision.INSUFFICIENT_ROLE

    def test_missing_target(self):
        assert evaluate_role_change(ADMIN, None, ADMIN, True) is AccessDecision.TARGET_NOT_FOUND

    @pytest.mark.parametrize("acting", [ADMIN, SUPER])
    @pytest.mark.parametrize("requested", [USER, ADMIN, SUPER])
    def test_superadmin_target_is_never_changed(self, acting, requested):
        assert evaluate_role_change(acting, SUPER, requested, True) is AccessDecision.TARGET_IS_SUPERADMIN

    @pytest.mark.parametrize("acting", [ADMIN, SUPER])
    def test_superadmin_is_not_grantable(self, acting):
        assert evaluate_role_change(acting, USER, SUPER, True) is AccessDecision.SUPERADMIN_NOT_GRANTABLE

    def test_first_admin_requires_superadmin(self):
        assert evaluate_role_change(ADMIN, USER, ADMIN, False) is AccessDecision.FIRST_ADMIN_REQUIRES_SUPERADMIN
        assert evaluate_role_change(SUPER, USER, ADMIN, False) is AccessDecision.OK

    def test_promote_and_demote(self):
        assert evaluate_role_change(ADMIN, USER, ADMIN, True) is AccessDecision.OK
        assert evaluate_role_change(ADMIN, ADMIN, USER, True) is AccessDecision.OK

    def test_same_role_is_unsupported(self):
        assert evaluate_role_change(SUPER, USER, USER, True) is AccessDecision.UNSUPPORTED_TRANSITION
        assert evaluate_role_change(SUPER, ADMIN, ADMIN, True) is AccessDecision.UNSUPPORTED_TRANSITION


class TestActivation:
    def test_missing_actor(self):
        assert evaluate_activation("a", None, "t", USER, False) is AccessDecision.ACTOR_NOT_FOUND

    def test_plain_user_cannot_change_activation(self):
        assert evaluate_activation("a", USER, "t", USER, False) is AccessDecision.INSUFFICIENT_ROLE

    def test_missing_target(self):
        assert evaluate_activation("a", ADMIN, None, None, False) is AccessDecision.TARGET_NOT_FOUND

    def test_self_deactivation(self):
        assert evaluate_activation("a", ADMIN, "a", ADMIN, False) is AccessDecision.SELF_DEACTIVATION

    def test_self_activation_allowed(self):
        assert evaluate_activation("a", ADMIN, "a", ADMIN, True) is AccessDecision.OK

    def test_superadmin_never_deactivated(self):
        assert evaluate_activation("a", SUPER, "t", SUPER, False) is AccessDecision.TARGET_IS_SUPERADMIN

    def test_last_admin_protected(self):
        decision = evaluate_activation("a", SUPER, "t", ADMIN, False, other_admin_active=False)
        assert decision is AccessDecision.LAST_ADMIN

    def test_admin_deactivated_when_another_remains(self):
        assert evaluate_activation("a", SUPER, "t", ADMIN, False, other_admin_active=True) is AccessDecision.OK

    def test_plain_user_deactivation_ignores_headcount(self):
        assert evaluate_activation("a", ADMIN, "t", USER, False, other_admin_active=False) is AccessDecision.OK

    def test_needs_admin_headcount(self):
        assert needs_admin_headcount(ADMIN, False) is True
        assert needs_admin_headcount(SUPER, False) is True
        assert needs_admin_headcount(USER, False) is False
        assert needs_admin_headcount(ADMIN, True) is False
