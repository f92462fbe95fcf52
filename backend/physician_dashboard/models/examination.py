from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..core.time_utils import ensure_utc

VITAL_FIELDS = ("bloodPressure", "heartRate", "temperature", "weight", "height")


class ExaminationType:
    ROUTINE = "routine"
    FOLLOW_UP = "follow-up"
    CONSULTATION = "consultation"
    EMERGENCY = "emergency"

    ALL = [ROUTINE, FOLLOW_UP, CONSULTATION, EMERGENCY]

    LABELS = {
        ROUTINE: "Routine Checkup",
        FOLLOW_UP: "Follow-up",
        CONSULTATION: "Consultation",
        EMERGENCY: "Emergency",
    }

    # Narrative / vital fields each type cannot be recorded without
    REQUIRED_FIELDS = {
        ROUTINE: ["bloodPressure", "heartRate", "temperature"],
        FOLLOW_UP: ["chiefComplaint"],
        CONSULTATION: ["chiefComplaint", "diagnosis"],
        EMERGENCY: ["chiefComplaint", "physicalFindings", "diagnosis"],
    }


def flatten_vitals(data: Dict) -> Dict:
    """Lift a nested ``vitals`` mapping onto the top level, where records keep them."""
    if not isinstance(data, dict) or not isinstance(data.get("vitals"), dict):
        return data
    flat = {k: v for k, v in data.items() if k != "vitals"}
    for key, value in data["vitals"].items():
        flat.setdefault(key, value)
    return flat


class Examination(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    patient_id: int
    date: datetime
    type: str

    # Vitals
    blood_pressure: Optional[str] = None  # "SYS/DIA"
    heart_rate: Optional[int] = None      # bpm
    temperature: Optional[float] = None   # °F
    weight: Optional[float] = None        # lbs
    height: Optional[str] = None

    chief_complaint: str = ""
    physical_findings: str = ""
    diagnosis: str = ""
    treatment_plan: str = ""
    follow_up_instructions: str = ""
    doctor_notes: str = ""
    duration: Optional[int] = None  # minutes
    status: str = "completed"

    @model_validator(mode="before")
    @classmethod
    def _flatten_vitals(cls, data):
        return flatten_vitals(data)

    @field_validator("date")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def vitals(self) -> Dict:
        return {
            "bloodPressure": self.blood_pressure,
            "heartRate": self.heart_rate,
            "temperature": self.temperature,
            "weight": self.weight,
            "height": self.height,
        }

    @property
    def has_vitals(self) -> bool:
        return bool(self.blood_pressure or self.heart_rate or self.temperature)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
