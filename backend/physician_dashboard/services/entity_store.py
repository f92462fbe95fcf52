"""
Entity store: the single owner of the patient, examination and file collections.

Every read hands out deep copies; the lists held here are the only mutable
source of truth. Every mutation is checked before it is applied, then written
through to the persistence gateway, then announced to subscribers, all before
the call returns.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ValidationError as PydanticValidationError
from pydantic.alias_generators import to_snake

from ..core.config import Settings, settings as default_settings
from ..core.errors import ReferentialIntegrityError, StorageError, ValidationError
from ..core.time_utils import utcnow
from ..models.examination import Examination, flatten_vitals
from ..models.file import FileRecord
from ..models.patient import Patient, PatientStatus
from .file_classifier import categorize_file, generate_file_description, generate_file_tags
from .id_generator import IdGenerator
from .persistence import PersistenceGateway
from .validation import field_value, is_empty, validate_examination, validate_patient

logger = logging.getLogger(__name__)


class Collection:
    PATIENTS = "patients"
    EXAMINATIONS = "examinations"
    FILES = "files"

    ALL = frozenset([PATIENTS, EXAMINATIONS, FILES])


@dataclass(frozen=True)
class StoreEvent:
    """Emitted after every committed mutation."""
    collections: FrozenSet[str]
    deleted_patient_id: Optional[int] = None
    storage_error: Optional[StorageError] = None


StoreListener = Callable[[StoreEvent], None]


def _model_errors(exc: PydanticValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "__root__"
        errors.setdefault(field, err["msg"])
    return errors


def _without(data: Dict, *names: str) -> Dict:
    """Drop ``names`` from ``data`` in both their camelCase and snake_case spellings."""
    blocked = set(names) | {to_snake(n) for n in names}
    return {k: v for k, v in data.items() if k not in blocked}


def _build(model, data: Dict):
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(_model_errors(exc)) from exc


def _as_patient_id(value) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class EntityStore:

    def __init__(
        self,
        gateway: PersistenceGateway,
        patients: Iterable[Patient] = (),
        examinations: Iterable[Examination] = (),
        files: Iterable[FileRecord] = (),
        actor_name: Optional[Callable[[], str]] = None,
        id_generator: Optional[IdGenerator] = None,
        settings: Optional[Settings] = None,
    ):
        self.gateway = gateway
        self.settings = settings or default_settings
        self._patients: List[Patient] = [p.model_copy(deep=True) for p in patients]
        self._examinations: List[Examination] = [e.model_copy(deep=True) for e in examinations]
        self._files: List[FileRecord] = [f.model_copy(deep=True) for f in files]
        self._actor_name = actor_name or (lambda: self.settings.DEFAULT_ACTOR_NAME)
        self._ids = id_generator or IdGenerator()
        self._observe_ids()
        self._listeners: List[StoreListener] = []
        self.last_storage_error: Optional[StorageError] = None

    @classmethod
    def load(cls, gateway: PersistenceGateway, **kwargs) -> "EntityStore":
        """Load (or seed) persisted state and build a store over it."""
        patients, examinations, files = gateway.load_or_seed()
        logger.info(
            "Entity store loaded: %d patients, %d examinations, %d files",
            len(patients), len(examinations), len(files),
        )
        return cls(gateway, patients, examinations, files, **kwargs)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: StoreListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------

    def list_patients(self) -> List[Patient]:
        return [p.model_copy(deep=True) for p in self._patients]

    def get_patient(self, patient_id) -> Optional[Patient]:
        patient = self._find_patient(patient_id)
        return patient.model_copy(deep=True) if patient else None

    def patient_exists(self, patient_id) -> bool:
        return self._find_patient(patient_id) is not None

    def add_patient(self, fields: Dict) -> Patient:
        data = _without(dict(fields), "id", "dateAdded", "status")
        errors = validate_patient(data)
        if errors:
            raise ValidationError(errors)

        data.update(id=self._ids.next_id(), dateAdded=utcnow(), status=PatientStatus.ACTIVE)
        patient = _build(Patient, data)
        self._patients.append(patient)
        logger.info("Added patient %s", patient.id)
        self._commit({Collection.PATIENTS})
        return patient.model_copy(deep=True)

    def update_patient(self, patient_id, partial_fields: Dict) -> Optional[Patient]:
        index = self._patient_index(patient_id)
        if index is None:
            return None

        updated = self._merged_patient(self._patients[index], partial_fields)
        errors = validate_patient(updated.model_dump())
        if errors:
            raise ValidationError(errors)

        self._patients[index] = updated
        self._commit({Collection.PATIENTS})
        return updated.model_copy(deep=True)

    def delete_patient(self, patient_id) -> Optional[Patient]:
        index = self._patient_index(patient_id)
        if index is None:
            return None

        deleted = self._patients.pop(index)
        exams_before, files_before = len(self._examinations), len(self._files)
        self._examinations = [e for e in self._examinations if e.patient_id != deleted.id]
        self._files = [f for f in self._files if f.patient_id != deleted.id]
        logger.info(
            "Deleted patient %s with %d examinations and %d files",
            deleted.id,
            exams_before - len(self._examinations),
            files_before - len(self._files),
        )
        self._commit(Collection.ALL, deleted_patient_id=deleted.id)
        return deleted

    # ------------------------------------------------------------------
    # Examinations
    # ------------------------------------------------------------------

    def list_examinations(self) -> List[Examination]:
        return [e.model_copy(deep=True) for e in self._examinations]

    def list_examinations_for_patient(self, patient_id) -> List[Examination]:
        patient_id = _as_patient_id(patient_id)
        return [e.model_copy(deep=True) for e in self._examinations if e.patient_id == patient_id]

    def get_examination(self, examination_id) -> Optional[Examination]:
        for exam in self._examinations:
            if exam.id == examination_id:
                return exam.model_copy(deep=True)
        return None

    def add_examination(self, fields: Dict) -> Examination:
        data = _without(flatten_vitals(dict(fields)), "id")
        patient_index = self._require_patient(data, "examination")

        errors = validate_examination(data)
        if errors:
            raise ValidationError(errors)

        data = _without(data, "patientId")
        data.update(id=self._ids.next_id(), patientId=self._patients[patient_index].id)
        if is_empty(field_value(data, "status")):
            data = _without(data, "status")
        examination = _build(Examination, data)

        self._examinations.append(examination)
        # The patient's last visit follows the newest recorded examination
        self._patients[patient_index] = self._patients[patient_index].model_copy(
            update={"last_visit": examination.date}
        )
        logger.info("Recorded %s examination %s for patient %s", examination.type, examination.id, examination.patient_id)
        self._commit({Collection.EXAMINATIONS, Collection.PATIENTS})
        return examination.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def list_files(self) -> List[FileRecord]:
        return [f.model_copy(deep=True) for f in self._files]

    def list_files_for_patient(self, patient_id) -> List[FileRecord]:
        patient_id = _as_patient_id(patient_id)
        return [f.model_copy(deep=True) for f in self._files if f.patient_id == patient_id]

    def get_file(self, file_id) -> Optional[FileRecord]:
        for record in self._files:
            if record.id == file_id:
                return record.model_copy(deep=True)
        return None

    def add_file(self, fields: Dict) -> FileRecord:
        data = _without(dict(fields), "id", "dateUploaded", "uploadedBy")
        patient_index = self._require_patient(data, "file")

        name = field_value(data, "name") or ""
        mime_type = field_value(data, "type") or ""
        if is_empty(field_value(data, "category")):
            data = _without(data, "category")
            data["category"] = categorize_file(name, mime_type)
        if is_empty(field_value(data, "tags")):
            data = _without(data, "tags")
            data["tags"] = generate_file_tags(name, mime_type)
        if is_empty(field_value(data, "description")):
            data = _without(data, "description")
            data["description"] = generate_file_description(name, mime_type)

        data = _without(data, "patientId")
        data.update(
            id=self._ids.next_id(),
            patientId=self._patients[patient_index].id,
            dateUploaded=utcnow(),
            uploadedBy=self._actor_name(),
        )
        record = _build(FileRecord, data)
        self._files.append(record)
        logger.info("Attached file %s (%s) to patient %s", record.id, record.category, record.patient_id)
        self._commit({Collection.FILES})
        return record.model_copy(deep=True)

    def delete_file(self, file_id) -> Optional[FileRecord]:
        for index, record in enumerate(self._files):
            if record.id == file_id:
                deleted = self._files.pop(index)
                self._commit({Collection.FILES})
                return deleted
        return None

    # ------------------------------------------------------------------
    # Bulk operations
    # ------------------------------------------------------------------

    def snapshot(self) -> Tuple[List[Patient], List[Examination], List[FileRecord]]:
        return self.list_patients(), self.list_examinations(), self.list_files()

    def replace_all(self, patients: Iterable, examinations: Iterable, files: Iterable) -> None:
        """Swap in a complete dataset (backup restore). Rejected as a whole if any child is orphaned."""
        new_patients = [self._coerce(Patient, p) for p in patients]
        new_examinations = [self._coerce(Examination, e) for e in examinations]
        new_files = [self._coerce(FileRecord, f) for f in files]

        known = {p.id for p in new_patients}
        for exam in new_examinations:
            if exam.patient_id not in known:
                raise ReferentialIntegrityError("examination", exam.patient_id)
        for record in new_files:
            if record.patient_id not in known:
                raise ReferentialIntegrityError("file", record.patient_id)

        self._patients, self._examinations, self._files = new_patients, new_examinations, new_files
        self._observe_ids()
        logger.info(
            "Replaced dataset: %d patients, %d examinations, %d files",
            len(new_patients), len(new_examinations), len(new_files),
        )
        self._commit(Collection.ALL)

    def clear_all(self) -> None:
        self._patients, self._examinations, self._files = [], [], []
        logger.info("All dashboard data cleared")
        self._commit(Collection.ALL)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _coerce(self, model, value):
        if isinstance(value, model):
            return value.model_copy(deep=True)
        if isinstance(value, BaseModel):
            value = value.model_dump()
        return _build(model, value)

    def _observe_ids(self) -> None:
        self._ids.observe(p.id for p in self._patients)
        self._ids.observe(e.id for e in self._examinations)
        self._ids.observe(f.id for f in self._files)

    def _patient_index(self, patient_id) -> Optional[int]:
        patient_id = _as_patient_id(patient_id)
        if patient_id is None:
            return None
        for index, patient in enumerate(self._patients):
            if patient.id == patient_id:
                return index
        return None

    def _find_patient(self, patient_id) -> Optional[Patient]:
        index = self._patient_index(patient_id)
        return self._patients[index] if index is not None else None

    def _require_patient(self, data: Dict, entity: str) -> int:
        patient_id = field_value(data, "patientId")
        index = self._patient_index(patient_id)
        if index is None:
            raise ReferentialIntegrityError(entity, patient_id)
        return index

    def _merged_patient(self, existing: Patient, partial_fields: Dict) -> Patient:
        merged = existing.model_dump()
        for key, value in _without(dict(partial_fields), "id", "dateAdded").items():
            merged[to_snake(key)] = value
        return _build(Patient, merged)

    def _commit(self, collections: Iterable[str], deleted_patient_id: Optional[int] = None) -> None:
        error = self.gateway.persist_all(self._patients, self._examinations, self._files)
        self.last_storage_error = error
        event = StoreEvent(frozenset(collections), deleted_patient_id, error)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Store listener %r failed", listener)
