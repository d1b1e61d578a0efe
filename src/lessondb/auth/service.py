"""
Account registration and login.

Handles the default SUPERADMIN seed, email normalization, and password
verification. Storage goes through the user repository only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from lessondb.auth.password import hash_password, validate_password_strength, verify_password
from lessondb.auth.schemas import EmailInput
from lessondb.enums import UserRole
from lessondb.errors import require
from lessondb.users.schemas import UserRecord

if TYPE_CHECKING:
    from lessondb.config import Settings
    from lessondb.users.repository import UserRepository

logger = structlog.get_logger()


class AuthError(ValueError):
    """Base class for registration and login failures."""


class NameEmptyError(AuthError):
    pass


class EmailInvalidError(AuthError):
    pass


class EmailTakenError(AuthError):
    pass


class AccountNotFoundError(AuthError):
    """No active account for the email."""


class InvalidCredentialsError(AuthError):
    pass


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def validate_email(email: str | None) -> str:
    """Normalize and validate an email address. Raises EmailInvalidError."""
    normalized = normalize_email(email)
    try:
        EmailInput(email=normalized)
    except ValidationError as e:
        msg = "Email address is not valid"
        raise EmailInvalidError(msg) from e
    return normalized


class AuthService:
    """Sign-up, login and the default SUPERADMIN account."""

    def __init__(self, users: UserRepository, settings: Settings) -> None:
        require(users, "users")
        require(settings, "settings")
        self._users = users
        self._settings = settings

    def ensure_super_admin(self) -> UserRecord | None:
        """Create the default SUPERADMIN from settings if none exists. Returns it when created."""
        if self._users.has_super_admin():
            return None

        user = self._users.insert_user(
            UserRecord(
                name=self._settings.default_admin_name,
                email=normalize_email(self._settings.default_admin_email),
                role=UserRole.SUPERADMIN,
                is_active=True,
                password_hash=hash_password(self._settings.default_admin_password),
            )
        )
        logger.info("default_superadmin_created", user_id=user.id, email=user.email)
        return user

    def exists(self, email: str | None) -> bool:
        return self._users.exists_email(validate_email(email))

    def sign_up(self, name: str | None, email: str | None, password: str | None) -> UserRecord:
        """
        Register a new USER account.

        Raises:
            NameEmptyError, EmailInvalidError, PasswordStrengthError, EmailTakenError
        """
        name = (name or "").strip()
        if not name:
            msg = "Name is required"
            raise NameEmptyError(msg)

        email = validate_email(email)
        validate_password_strength(
            password,
            min_length=self._settings.password_min_length,
            max_length=self._settings.password_max_length,
        )

        if self._users.exists_email(email):
            msg = "Email is already registered"
            raise EmailTakenError(msg)

        user = self._users.insert_user(
            UserRecord(name=name, email=email, role=UserRole.USER, password_hash=hash_password(password))
        )
        logger.info("user_signed_up", user_id=user.id)
        return user

    def login(self, email: str | None, password: str | None) -> UserRecord:
        """
        Authenticate an active account.

        Raises:
            EmailInvalidError, AccountNotFoundError, InvalidCredentialsError
        """
        email = validate_email(email)
        if not password:
            msg = "Password is required"
            raise InvalidCredentialsError(msg)

        user = self._users.find_active_user_by_email(email)
        if user is None:
            raise AccountNotFoundError(email)

        if not verify_password(password, user.password_hash):
            logger.info("login_failed", user_id=user.id)
            msg = "Incorrect email or password"
            raise InvalidCredentialsError(msg)

        logger.info("login_succeeded", user_id=user.id)
        return user
