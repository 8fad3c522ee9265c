from functools import lru_cache
from ticket_desk.core.config import settings
from ticket_desk.core.db import SessionLocal
from ticket_desk.core.storage import KeyValueStorage, MemoryKeyValueStorage, SqlKeyValueStorage
from ticket_desk.core.store import TicketStore
from ticket_desk.core.views import ViewCoordinator

def build_storage() -> KeyValueStorage:
    if settings.STORAGE_BACKEND == "memory":
        return MemoryKeyValueStorage()
    return SqlKeyValueStorage(SessionLocal)

@lru_cache
def get_store() -> TicketStore:
    return TicketStore(build_storage(), key=settings.STORAGE_KEY)

@lru_cache
def get_coordinator() -> ViewCoordinator:
    # single-user service: one coordinator holds the panel and detail focus state
    return ViewCoordinator(get_store())
