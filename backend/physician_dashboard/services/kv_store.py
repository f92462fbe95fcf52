"""
Key-value byte storage backends for dashboard state.

The dashboard keeps each collection under its own namespaced key. Backends are
pluggable: an in-memory map for tests and throwaway sessions, a directory of
JSON files, or a SQL table through SQLAlchemy.
"""
import logging
import os
import tempfile
from typing import Dict, List, Optional
from urllib.parse import quote, unquote

from ..core.config import Settings, settings as default_settings
from ..models.base import make_session_factory
from ..models.storage_entry import StorageEntry

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Interface every storage backend implements."""

    def get(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def set(self, key: str, value: bytes) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def keys(self) -> List[str]:
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)


class FileKeyValueStore(KeyValueStore):
    """One file per key under ``base_dir``. Writes go through a temp file and an atomic rename."""

    SUFFIX = ".json"

    def __init__(self, base_dir: str):
        self.base_dir = base_dir
        os.makedirs(self.base_dir, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.base_dir, quote(key, safe="") + self.SUFFIX)

    def get(self, key: str) -> Optional[bytes]:
        try:
            with open(self._path(key), "rb") as fh:
                return fh.read()
        except FileNotFoundError:
            return None

    def set(self, key: str, value: bytes) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.base_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(value)
            os.replace(tmp_path, self._path(key))
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def delete(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass

    def keys(self) -> List[str]:
        return sorted(
            unquote(name[: -len(self.SUFFIX)])
            for name in os.listdir(self.base_dir)
            if name.endswith(self.SUFFIX)
        )


class SqlKeyValueStore(KeyValueStore):
    """Keys stored as rows of the ``storage_entries`` table."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        self._session_factory = make_session_factory(database_url)

    def get(self, key: str) -> Optional[bytes]:
        db = self._session_factory()
        try:
            entry = db.query(StorageEntry).filter(StorageEntry.key == key).first()
            return entry.value.encode("utf-8") if entry else None
        finally:
            db.close()

    def set(self, key: str, value: bytes) -> None:
        db = self._session_factory()
        try:
            entry = db.query(StorageEntry).filter(StorageEntry.key == key).first()
            if entry is None:
                db.add(StorageEntry(key=key, value=value.decode("utf-8")))
            else:
                entry.value = value.decode("utf-8")
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def delete(self, key: str) -> None:
        db = self._session_factory()
        try:
            db.query(StorageEntry).filter(StorageEntry.key == key).delete()
            db.commit()
        finally:
            db.close()

    def keys(self) -> List[str]:
        db = self._session_factory()
        try:
            return [row.key for row in db.query(StorageEntry.key).order_by(StorageEntry.key)]
        finally:
            db.close()


def build_kv_store(settings: Optional[Settings] = None) -> KeyValueStore:
    """Pick the backend named by ``STORAGE_BACKEND``."""
    settings = settings or default_settings
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "memory":
        store: KeyValueStore = MemoryKeyValueStore()
    elif backend == "file":
        store = FileKeyValueStore(settings.STORAGE_DIR)
    elif backend == "sql":
        store = SqlKeyValueStore(settings.DATABASE_URL)
    else:
        raise ValueError(f"Unknown storage backend: {settings.STORAGE_BACKEND}")
    logger.info("Using %s storage backend", backend)
    return store
