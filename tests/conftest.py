"""Pytest fixtures and configuration for planlog tests."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from planlog.database.database import Base
from planlog.database import models  # noqa: F401  (registers tables)
from planlog.database.state_repository import PlannerStateRepository
from planlog.engine.block_store import BlockStore
from planlog.interaction.events import PointerEvent
from planlog.interaction.session import PlannerSession
from planlog.models.activity import Activity


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# A Wednesday; its week starts on Sunday 2023-12-31
TEST_DATE = "2024-01-03"


class FakeTimerHandle:
    def __init__(self, due: float, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock standing in for the event loop's call_later."""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def call_later(self, delay_seconds, callback):
        handle = FakeTimerHandle(self.now + delay_seconds, callback)
        self.handles.append(handle)
        return handle

    def advance(self, ms: float) -> None:
        target = self.now + ms / 1000.0
        while True:
            due = [h for h in self.handles if not h.cancelled and h.due <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.due)
            handle.cancelled = True
            self.now = handle.due
            handle.callback()
        self.now = target

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]


@pytest.fixture
def date_iso():
    return TEST_DATE


@pytest.fixture
def activities():
    return [
        Activity(id="a", name="Work", color="#3B82F6"),
        Activity(id="b", name="Reading", color="#22C55E"),
        Activity(id="c", name="Exercise", color="#F97316"),
    ]


@pytest.fixture
def store(activities):
    """BlockStore with three activities and the grid starting at 06:00."""
    return BlockStore(activities=activities, start_hour=6)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def opened_checklists():
    """Collects (checklist, created) pairs reported by long-press."""
    return []


@pytest.fixture
def indicator_requests():
    return []


@pytest.fixture
def opened_memos():
    """Collects (memo, created) pairs reported by the memo tool."""
    return []


@pytest.fixture
def session(store, scheduler, date_iso, opened_checklists, indicator_requests, opened_memos):
    """PlannerSession on TEST_DATE driven by the fake scheduler."""
    return PlannerSession(
        store=store,
        date_iso=date_iso,
        scheduler=scheduler,
        on_checklist=lambda checklist, created: opened_checklists.append((checklist, created)),
        on_indicator_request=lambda cell_id, minute: indicator_requests.append((cell_id, minute)),
        on_memo=lambda memo, created: opened_memos.append((memo, created)),
    )


@pytest.fixture
def pointer():
    """Factory for pointer events."""
    def _make(cell_id=None, pointer_id=1, x=0.0, y=0.0, **kwargs):
        return PointerEvent(pointer_id=pointer_id, x=x, y=y, cell_id=cell_id, **kwargs)
    return _make


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def state_repository(db_session: Session):
    """Create a PlannerStateRepository instance for testing."""
    return PlannerStateRepository(db_session)
