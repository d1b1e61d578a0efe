"""Reward grants: items given to users for finishing problems."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from lessondb.enums import ProblemTheme
from lessondb.errors import UserNotFoundError, require
from lessondb.inventory.schemas import InventoryItem

if TYPE_CHECKING:
    from lessondb.inventory.repository import InventoryRepository
    from lessondb.users.repository import UserRepository

logger = structlog.get_logger()


class RewardService:
    def __init__(self, inventory: InventoryRepository, users: UserRepository) -> None:
        require(inventory, "inventory")
        require(users, "users")
        self._inventory = inventory
        self._users = users

    def grant_item(
        self,
        user_email: str | None,
        item_id: str,
        item_name: str | None = None,
        theme: ProblemTheme | None = None,
    ) -> bool:
        """Give an item to an active user. Returns False if they already own it.

        Raises:
            UserNotFoundError: If no active user has this email.
        """
        user = self._users.find_active_user_by_email(user_email)
        if user is None:
            msg = f"No active user for {user_email!r}"
            raise UserNotFoundError(msg)

        if self._inventory.has_item(user.email, item_id):
            return False

        self._inventory.add(
            InventoryItem(user_id=user.id, user_email=user.email, item_id=item_id, item_name=item_name, theme=theme)
        )
        logger.info("item_granted", user_id=user.id, item_id=item_id)
        return True

    def get_inventory(self, user_email: str | None) -> list[InventoryItem]:
        return self._inventory.get_by_user(user_email)
