"""Inventory collection: which items each user owns.

Older builds stored inventory rows in a different shape. When such rows are
found the configured ``DriftRecovery`` runs (by default the collection is
dropped). Writes then go ahead; reads report nothing found.

The shape is probed once; later calls skip the probe until a unit of work
against the collection fails.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

import structlog
from pydantic import ValidationError
from sqlalchemy import exists, select

from lessondb.db.models import InventoryEntry
from lessondb.errors import require
from lessondb.inventory.drift import DriftRecovery, DropCollection, ShapeMismatch, probe_collection_shape
from lessondb.inventory.schemas import InventoryItem

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from lessondb.database import StorageGateway

logger = structlog.get_logger()

_TABLE = InventoryEntry.__table__

T = TypeVar("T")


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


class InventoryRepository:
    """Owns the ``inventory`` collection."""

    def __init__(self, gateway: StorageGateway, recovery: DriftRecovery | None = None) -> None:
        require(gateway, "gateway")
        self._gateway = gateway
        self._recovery = recovery if recovery is not None else DropCollection()
        self._shape_verified = False

    def _recovered(self, session: Session) -> bool:
        """Probe the collection and run recovery on drift. True when recovery ran."""
        if self._shape_verified:
            return False
        mismatch = probe_collection_shape(session, _TABLE)
        if mismatch is not None:
            self._recovery.recover(session, _TABLE, mismatch)
        self._shape_verified = True
        return mismatch is not None

    def _run(self, work: Callable[[Session], T]) -> T:
        try:
            return self._gateway.run(work)
        except Exception:
            # rolled back, possibly along with a recovery; probe again next time
            self._shape_verified = False
            raise

    def add(self, item: InventoryItem) -> None:
        require(item, "item")

        def work(session: Session) -> None:
            self._recovered(session)
            fields = item.model_dump()
            fields["theme"] = item.theme.value if item.theme is not None else None
            session.add(InventoryEntry(**fields))

        self._run(work)
        logger.info("inventory_item_added", user_email=item.user_email, item_id=item.item_id)

    def has_item(self, user_email: str | None, item_id: str | None) -> bool:
        if _blank(user_email) or _blank(item_id):
            return False

        def work(session: Session) -> bool:
            if self._recovered(session):
                return False
            return bool(
                session.scalar(
                    select(
                        exists().where(InventoryEntry.user_email == user_email, InventoryEntry.item_id == item_id)
                    )
                )
            )

        return self._run(work)

    def get_by_user(self, user_email: str | None) -> list[InventoryItem]:
        if _blank(user_email):
            return []

        def work(session: Session) -> list[InventoryItem]:
            if self._recovered(session):
                return []
            rows = session.scalars(select(InventoryEntry).where(InventoryEntry.user_email == user_email)).all()
            try:
                return [InventoryItem.model_validate(row) for row in rows]
            except ValidationError as e:
                mismatch = ShapeMismatch(_TABLE.name, f"unreadable row: {e.errors()[0]['msg']}")
                self._recovery.recover(session, _TABLE, mismatch)
                return []

        return self._run(work)
