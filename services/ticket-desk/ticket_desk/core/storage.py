import logging
from typing import Dict, Optional, Protocol
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from ticket_desk.models.storage import StorageEntry

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryKeyValueStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class SqlKeyValueStorage:
    """
    Key-value storage on the storage_entries table.
    Every call opens its own session; set() is a single upsert committed at once.
    """

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        session: Session = self._session_factory()
        try:
            entry = session.get(StorageEntry, key)
            return entry.value if entry is not None else None
        finally:
            session.close()

    def set(self, key: str, value: str) -> None:
        session: Session = self._session_factory()
        try:
            entry = session.get(StorageEntry, key)
            if entry is None:
                session.add(StorageEntry(key=key, value=value))
            else:
                entry.value = value
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Failed to write storage key %s", key)
            raise
        finally:
            session.close()
