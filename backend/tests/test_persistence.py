"""Tests for the persistence gateway: per-key loading, write-through results and stats."""
import json

import pytest

from physician_dashboard.core.config import Settings, settings
from physician_dashboard.core.errors import StorageError
from physician_dashboard.models.patient import Patient
from physician_dashboard.services.entity_store import EntityStore
from physician_dashboard.services.kv_store import MemoryKeyValueStore
from physician_dashboard.services.persistence import PersistenceGateway, deserialize, serialize


class ReadOnlyKeyValueStore(MemoryKeyValueStore):
    def set(self, key, value):
        raise PermissionError("storage is read-only")


class UnreadableKeyValueStore(MemoryKeyValueStore):
    def get(self, key):
        raise OSError("backend offline")


@pytest.fixture()
def kv():
    return MemoryKeyValueStore()


@pytest.fixture()
def gateway(kv):
    return PersistenceGateway(kv)


class TestLoading:
    def test_round_trip_through_fresh_gateway(self, kv, gateway):
        store = EntityStore.load(gateway)
        store.add_patient({
            "firstName": "Maria",
            "lastName": "Garcia",
            "dateOfBirth": "1980-12-01",
            "gender": "female",
            "phoneNumber": "+1 555 010 2000",
        })
        patients, examinations, files = PersistenceGateway(kv).load_or_seed()
        assert patients == store.list_patients()
        assert examinations == store.list_examinations()
        assert files == store.list_files()

    def test_partial_presence_seeds_only_missing_keys(self, kv, gateway):
        kv.set(settings.STORAGE_KEY_PATIENTS, b"[]")
        patients, examinations, files = gateway.load_or_seed()
        assert patients == []
        # Seeded children are kept as-is even though their patients are absent
        assert len(examinations) == 3
        assert len(files) == 4

    def test_unparsable_key_is_reseeded(self, kv, gateway):
        kv.set(settings.STORAGE_KEY_EXAMINATIONS, b"{not json")
        kv.set(settings.STORAGE_KEY_FILES, b'{"id": 1}')
        _, examinations, files = gateway.load_or_seed()
        assert len(examinations) == 3
        assert len(files) == 4
        assert json.loads(kv.get(settings.STORAGE_KEY_EXAMINATIONS))[0]["id"] == 1

    def test_record_with_wrong_shape_is_reseeded(self, kv, gateway):
        kv.set(settings.STORAGE_KEY_PATIENTS, b'[{"id": "abc"}]')
        patients, _, _ = gateway.load_or_seed()
        assert [p.id for p in patients] == [1, 2, 3]

    def test_unwritable_store_still_loads_seed(self):
        patients, _, _ = PersistenceGateway(ReadOnlyKeyValueStore()).load_or_seed()
        assert len(patients) == 3

    def test_custom_keys_are_honoured(self, kv):
        custom = Settings(STORAGE_KEY_PATIENTS="clinic_b_patients")
        PersistenceGateway(kv, settings=custom).load_or_seed()
        assert "clinic_b_patients" in kv.keys()
        assert settings.STORAGE_KEY_PATIENTS not in kv.keys()


class TestWriting:
    def test_persist_all_records_save_time(self, kv, gateway):
        assert gateway.persist_all([], [], []) is None
        assert kv.get(settings.STORAGE_KEY_LAST_SAVE) is not None
        assert kv.get(settings.STORAGE_KEY_PATIENTS) == b"[]"

    def test_persist_all_reports_failure_as_value(self):
        gateway = PersistenceGateway(ReadOnlyKeyValueStore())
        error = gateway.persist_all([], [], [])
        assert isinstance(error, StorageError)
        assert error.key == settings.STORAGE_KEY_PATIENTS
        assert "read-only" in error.message

    def test_clear_removes_collections(self, kv, gateway):
        gateway.load_or_seed()
        gateway.clear()
        for key in gateway.collection_keys:
            assert kv.get(key) is None
        patients, _, _ = gateway.load_or_seed()
        assert len(patients) == 3


class TestSerialization:
    def test_serialize_uses_camel_case(self):
        patient = Patient.model_validate(
            {"id": 5, "firstName": "Li", "lastName": "Wu", "dateOfBirth": "2000-01-01",
             "gender": "other", "phoneNumber": "555", "dateAdded": "2024-05-05T05:05:05Z"}
        )
        data = json.loads(serialize([patient]))
        assert data[0]["firstName"] == "Li"
        assert data[0]["dateOfBirth"] == "2000-01-01"
        assert "first_name" not in data[0]

    def test_deserialize_rejects_non_array(self):
        with pytest.raises(ValueError):
            deserialize(b'{"a": 1}', Patient)


class TestStorageStats:
    def test_counts_and_size(self, gateway):
        store = EntityStore.load(gateway)
        store.delete_file(4)
        stats = gateway.storage_stats()
        assert (stats.patients_count, stats.examinations_count, stats.files_count) == (3, 3, 3)
        assert stats.total_size_bytes > 0
        assert stats.last_saved is not None

    def test_empty_store(self, gateway):
        stats = gateway.storage_stats()
        assert stats.total_size_bytes == 0
        assert stats.last_saved is None

    def test_unreadable_backend_reports_nothing_stored(self):
        stats = PersistenceGateway(UnreadableKeyValueStore()).storage_stats()
        assert (stats.patients_count, stats.examinations_count, stats.files_count) == (0, 0, 0)
        assert stats.total_size_bytes == 0
        assert stats.last_saved is None
