import random
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from ticket_desk.core.db import Base
from ticket_desk.core.storage import MemoryKeyValueStorage, SqlKeyValueStorage
from ticket_desk.core.store import TicketStore
from ticket_desk.core.views import ViewCoordinator
from ticket_desk.models.storage import StorageEntry  # noqa: F401

STORAGE_KEY = "tickets.test"


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int = 1) -> int:
        self.now += ms
        return self.now


@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def storage():
    return MemoryKeyValueStorage()

@pytest.fixture
def store(storage, clock):
    return TicketStore(storage, key=STORAGE_KEY, clock=clock, rng=random.Random(7))

@pytest.fixture
def coordinator(store):
    return ViewCoordinator(store)

# In-memory SQLite shared across sessions for the SQL-backed storage
@pytest.fixture(scope="function")
def session_factory():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()

@pytest.fixture
def sql_storage(session_factory):
    return SqlKeyValueStorage(session_factory)
