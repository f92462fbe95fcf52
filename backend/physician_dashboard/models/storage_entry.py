from sqlalchemy import Column, String, Text
from .base import Base, TimestampMixin


class StorageEntry(Base, TimestampMixin):
    """One namespaced key of the dashboard's key-value storage."""
    __tablename__ = "storage_entries"

    key = Column(String(200), primary_key=True)
    value = Column(Text, nullable=False)  # UTF-8 JSON document
