"""Composition root: one gateway, every repository and service built on it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lessondb.admin.service import AdminService
from lessondb.auth.service import AuthService
from lessondb.config import Settings, get_settings
from lessondb.database import StorageGateway
from lessondb.feedback.repository import FeedbackRepository
from lessondb.inventory.repository import InventoryRepository
from lessondb.logging import setup_logging
from lessondb.problems.repository import ProblemRepository
from lessondb.progress.repository import ProgressRepository
from lessondb.progress.service import ProgressService
from lessondb.results.repository import ResultRepository
from lessondb.rewards.service import RewardService
from lessondb.users.repository import UserRepository

if TYPE_CHECKING:
    from types import TracebackType

    from lessondb.inventory.drift import DriftRecovery


@dataclass
class DataStore:
    """Everything the app needs from the store, wired to a single gateway."""

    gateway: StorageGateway
    users: UserRepository
    problems: ProblemRepository
    results: ResultRepository
    progress: ProgressRepository
    inventory: InventoryRepository
    feedback: FeedbackRepository
    auth: AuthService
    progress_service: ProgressService
    rewards: RewardService
    admin: AdminService

    @classmethod
    def build(cls, gateway: StorageGateway, settings: Settings, recovery: DriftRecovery | None = None) -> DataStore:
        users = UserRepository(gateway)
        problems = ProblemRepository(gateway)
        results = ResultRepository(gateway)
        progress = ProgressRepository(gateway)
        inventory = InventoryRepository(gateway, recovery)
        feedback = FeedbackRepository(gateway)
        return cls(
            gateway=gateway,
            users=users,
            problems=problems,
            results=results,
            progress=progress,
            inventory=inventory,
            feedback=feedback,
            auth=AuthService(users, settings),
            progress_service=ProgressService(progress, users, results),
            rewards=RewardService(inventory, users),
            admin=AdminService(users, results, feedback),
        )

    @classmethod
    def open(cls, settings: Settings | None = None, recovery: DriftRecovery | None = None) -> DataStore:
        """Configure logging, open the store file, wire everything, and seed the default SUPERADMIN."""
        settings = settings or get_settings()
        setup_logging(settings)
        gateway = StorageGateway.from_settings(settings)
        gateway.open()
        store = cls.build(gateway, settings, recovery)
        try:
            store.auth.ensure_super_admin()
        except Exception:
            gateway.close()
            raise
        return store

    def close(self) -> None:
        self.gateway.close()

    def __enter__(self) -> DataStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
