from sqlalchemy import Column, String, Text
from ticket_desk.core.db import Base

class StorageEntry(Base):
    """
    One serialized value per key, the server-side stand-in for browser local storage.
    """
    __tablename__ = "storage_entries"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
