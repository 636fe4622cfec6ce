"""Pytest fixtures for testing"""

import pytest
from datetime import datetime
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from carteira_gateway.api.dependencies import get_dispatcher
from carteira_gateway.api.main import create_app
from carteira_gateway.domain.confirmation import ConfirmationGate
from carteira_gateway.domain.dedup import MessageDeduplicator
from carteira_gateway.infrastructure.database.models import Base
from carteira_gateway.infrastructure.database.seed import seed_default_categories
from carteira_gateway.infrastructure.database.session import get_db
from carteira_gateway.services.dispatcher import MessageDispatcher


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Wall-clock "now" used by the dispatcher in tests
FIXED_NOW = datetime(2024, 3, 10, 12, 0)


class FakeClock:
    """Monotonic clock that only moves when told to"""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database with default categories"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    seed_default_categories(db)
    db.commit()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def dispatcher(clock: FakeClock) -> MessageDispatcher:
    """Dispatcher with fake clocks for TTLs and a fixed wall-clock date"""
    return MessageDispatcher(
        gate=ConfirmationGate(ttl_seconds=120, clock=clock),
        deduplicator=MessageDeduplicator(ttl_seconds=30, clock=clock),
        now=lambda: FIXED_NOW,
    )


@pytest.fixture
def client(db: Session, dispatcher: MessageDispatcher) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app(init_db=False)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    return TestClient(app)
