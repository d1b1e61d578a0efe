"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone

import pytest

from lessondb.config import Settings
from lessondb.database import StorageGateway
from lessondb.enums import UserRole
from lessondb.feedback.repository import FeedbackRepository
from lessondb.inventory.repository import InventoryRepository
from lessondb.problems.repository import ProblemRepository
from lessondb.progress.repository import ProgressRepository
from lessondb.results.repository import ResultRepository
from lessondb.users.repository import UserRepository
from lessondb.users.schemas import UserRecord

BASE_TIME = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def base_time() -> datetime:
    return BASE_TIME


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a fresh store file under the test's tmp dir."""
    return Settings(
        _env_file=None,
        database_path=str(tmp_path / "store" / "lesson.db"),
        log_format="console",
        default_admin_email="root@example.com",
        default_admin_password="rootpass123",
    )


@pytest.fixture
def gateway(settings: Settings) -> Generator[StorageGateway, None, None]:
    gw = StorageGateway.from_settings(settings)
    gw.open()
    yield gw
    gw.close()


@pytest.fixture
def users(gateway: StorageGateway) -> UserRepository:
    return UserRepository(gateway)


@pytest.fixture
def problems(gateway: StorageGateway) -> ProblemRepository:
    return ProblemRepository(gateway)


@pytest.fixture
def results(gateway: StorageGateway) -> ResultRepository:
    return ResultRepository(gateway)


@pytest.fixture
def progress(gateway: StorageGateway) -> ProgressRepository:
    return ProgressRepository(gateway)


@pytest.fixture
def inventory(gateway: StorageGateway) -> InventoryRepository:
    return InventoryRepository(gateway)


@pytest.fixture
def feedback(gateway: StorageGateway) -> FeedbackRepository:
    return FeedbackRepository(gateway)


@pytest.fixture
def make_user(users: UserRepository) -> Callable[..., UserRecord]:
    """Insert a user. Each call gets a creation time one minute after the previous one."""
    counter = {"n": 0}

    def _make(
        email: str,
        name: str = "",
        role: UserRole = UserRole.USER,
        is_active: bool = True,
    ) -> UserRecord:
        counter["n"] += 1
        return users.insert_user(
            UserRecord(
                email=email,
                name=name or email.split("@")[0],
                role=role,
                is_active=is_active,
                created_at=BASE_TIME + timedelta(minutes=counter["n"]),
            )
        )

    return _make
