"""
Persistence gateway between the in-memory collections and key-value storage.

Every collection lives under its own namespaced key as a JSON array. Loading is
per-key: a key that is missing or does not parse is replaced by the demo seed
for that collection, which is written back immediately. Writes never raise;
failures come back as a ``StorageError`` value so the caller can warn the user
while keeping its in-memory state.
"""
import json
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..core.config import Settings, settings as default_settings
from ..core.errors import StorageError
from ..core.time_utils import utcnow
from ..models.examination import Examination
from ..models.file import FileRecord
from ..models.patient import Patient
from ..seed_demo import seed_examinations, seed_files, seed_patients
from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class StorageStats:
    total_size_bytes: int
    total_size_kb: int
    patients_count: int
    examinations_count: int
    files_count: int
    last_saved: Optional[str]


def serialize(records: Iterable[BaseModel]) -> bytes:
    return json.dumps([r.model_dump(mode="json", by_alias=True) for r in records]).encode("utf-8")


def deserialize(raw: bytes, model: Type[BaseModel]) -> list:
    """Parse a stored JSON array into models. Raises ValueError on any malformed content."""
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError(f"not valid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise ValueError("expected a JSON array")
    try:
        return [model.model_validate(item) for item in data]
    except PydanticValidationError as exc:
        raise ValueError(f"record does not match {model.__name__}: {exc.error_count()} error(s)") from exc


class PersistenceGateway:

    def __init__(self, kv_store: KeyValueStore, settings: Optional[Settings] = None):
        self.kv_store = kv_store
        self.settings = settings or default_settings

    @property
    def collection_keys(self) -> Tuple[str, str, str]:
        return (
            self.settings.STORAGE_KEY_PATIENTS,
            self.settings.STORAGE_KEY_EXAMINATIONS,
            self.settings.STORAGE_KEY_FILES,
        )

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_or_seed(self) -> Tuple[List[Patient], List[Examination], List[FileRecord]]:
        patients_key, examinations_key, files_key = self.collection_keys
        patients = self._load_key(patients_key, Patient, seed_patients)
        examinations = self._load_key(examinations_key, Examination, seed_examinations)
        files = self._load_key(files_key, FileRecord, seed_files)
        return patients, examinations, files

    def _load_key(self, key: str, model: Type[BaseModel], seed: Callable[[], List[dict]]) -> list:
        try:
            raw = self.kv_store.get(key)
        except Exception as exc:
            logger.warning("Reading %s failed, falling back to seed data: %s", key, exc)
            raw = None

        if raw is not None:
            try:
                records = deserialize(raw, model)
                logger.info("Loaded %d records from %s", len(records), key)
                return records
            except ValueError as exc:
                logger.warning("Stored value for %s is unusable (%s), reseeding", key, exc)

        records = [model.model_validate(item) for item in seed()]
        error = self._write(key, serialize(records))
        if error is None:
            logger.info("Seeded %s with %d demo records", key, len(records))
        return records

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def persist_all(
        self,
        patients: Iterable[Patient],
        examinations: Iterable[Examination],
        files: Iterable[FileRecord],
    ) -> Optional[StorageError]:
        """Write all three collections. Returns the first failure, or None when everything was saved."""
        first_error: Optional[StorageError] = None
        for key, records in zip(self.collection_keys, (patients, examinations, files)):
            error = self._write(key, serialize(records))
            if error is not None and first_error is None:
                first_error = error

        if first_error is None:
            stamp = utcnow().isoformat().encode("utf-8")
            first_error = self._write(self.settings.STORAGE_KEY_LAST_SAVE, stamp)
        return first_error

    def _write(self, key: str, payload: bytes) -> Optional[StorageError]:
        try:
            self.kv_store.set(key, payload)
        except Exception as exc:
            logger.warning("Write to %s failed, changes are in memory only: %s", key, exc)
            return StorageError(f"Failed to save {key}: {exc}", key=key)
        return None

    def clear(self) -> None:
        for key in self.collection_keys:
            self.kv_store.delete(key)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def _read(self, key: str) -> Optional[bytes]:
        try:
            return self.kv_store.get(key)
        except Exception as exc:
            logger.warning("Reading %s failed: %s", key, exc)
            return None

    def storage_stats(self) -> StorageStats:
        counts = []
        total = 0
        for key in self.collection_keys:
            raw = self._read(key)
            if raw is None:
                counts.append(0)
                continue
            total += len(raw)
            try:
                counts.append(len(json.loads(raw.decode("utf-8"))))
            except (UnicodeDecodeError, json.JSONDecodeError, TypeError):
                counts.append(0)

        last_saved = self._read(self.settings.STORAGE_KEY_LAST_SAVE)
        return StorageStats(
            total_size_bytes=total,
            total_size_kb=round(total / 1024),
            patients_count=counts[0],
            examinations_count=counts[1],
            files_count=counts[2],
            last_saved=last_saved.decode("utf-8") if last_saved else None,
        )
