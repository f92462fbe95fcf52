from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from ..core.time_utils import ensure_utc


class FileCategory:
    IMAGING = "imaging"
    LAB_RESULTS = "lab-results"
    REPORTS = "reports"
    PRESCRIPTIONS = "prescriptions"
    INSURANCE = "insurance"
    DOCUMENTS = "documents"
    PHOTOS = "photos"
    GENERAL = "general"

    ALL = [IMAGING, LAB_RESULTS, REPORTS, PRESCRIPTIONS, INSURANCE, DOCUMENTS, PHOTOS, GENERAL]


class FileRecord(BaseModel):
    """Metadata for an attached file. No binary payload is kept."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    patient_id: int
    name: str
    type: str  # MIME type
    size: int = 0  # bytes
    # Free string: persisted records may carry categories outside FileCategory.ALL
    category: str = FileCategory.GENERAL
    description: str = ""
    tags: List[str] = []
    date_uploaded: datetime
    uploaded_by: str = ""

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: List[str]) -> List[str]:
        return list(dict.fromkeys(value))

    @field_validator("date_uploaded")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
