from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from ..core.time_utils import ensure_utc


class Gender:
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"

    ALL = [MALE, FEMALE, OTHER]


class PatientStatus:
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"

    ALL = [ACTIVE, INACTIVE, ARCHIVED]


class EmergencyContact(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = ""
    relationship: str = ""
    phone: str = ""


class Patient(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    first_name: str
    last_name: str
    date_of_birth: date
    gender: str
    phone_number: str
    email: Optional[str] = None
    address: str = ""
    medical_history: str = ""
    insurance_info: str = ""
    emergency_contact: Optional[EmergencyContact] = None
    status: str = PatientStatus.ACTIVE
    date_added: datetime
    last_visit: Optional[datetime] = None

    @field_validator("date_added", "last_visit")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
