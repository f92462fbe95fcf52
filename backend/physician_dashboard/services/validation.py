"""
Field-level validation rules for patient and examination records.

Each validator returns a mapping of camelCase field name to message; an empty
mapping means the record is valid. Inputs may use camelCase or snake_case keys.
"""
import re
from datetime import date, datetime
from typing import Dict, Mapping, Optional

from pydantic.alias_generators import to_snake

from ..core.time_utils import utcnow
from ..models.examination import ExaminationType, flatten_vitals
from ..models.patient import Gender, PatientStatus

PHONE_PATTERN = re.compile(r"^[()\s\-+\d]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
BLOOD_PRESSURE_PATTERN = re.compile(r"^\d{2,3}/\d{2,3}$")

MSG_REQUIRED = "This field is required"
MSG_EMAIL = "Please enter a valid email address"
MSG_PHONE = "Please enter a valid phone number"
MSG_MIN_LENGTH = "This field must be at least {min} characters long"
MSG_MAX_LENGTH = "This field cannot exceed {max} characters"
MSG_INVALID_DATE = "Please enter a valid date"
MSG_FUTURE_DATE = "Date cannot be in the future"

PATIENT_RULES = {
    "firstName": {"required": True, "min_length": 2, "max_length": 50},
    "lastName": {"required": True, "min_length": 2, "max_length": 50},
    "phoneNumber": {"required": True, "pattern": PHONE_PATTERN, "message": MSG_PHONE},
    "email": {"required": False, "pattern": EMAIL_PATTERN, "message": MSG_EMAIL},
    "dateOfBirth": {"required": True},
    "gender": {"required": True, "options": Gender.ALL},
    "status": {"required": False, "options": PatientStatus.ALL},
}

# field -> (min, max, message)
VITAL_RANGES = {
    "heartRate": (30, 200, "Heart rate must be between 30 and 200 BPM"),
    "temperature": (90, 110, "Temperature must be between 90 and 110°F"),
    "weight": (50, 500, "Weight must be between 50 and 500 lbs"),
}

FIELD_DISPLAY_NAMES = {
    "chiefComplaint": "Chief Complaint",
    "physicalFindings": "Physical Findings",
    "diagnosis": "Diagnosis",
    "treatmentPlan": "Treatment Plan",
    "followUpInstructions": "Follow-up Instructions",
    "bloodPressure": "Blood Pressure",
    "heartRate": "Heart Rate",
    "temperature": "Temperature",
    "weight": "Weight",
}


def field_value(data: Mapping, name: str):
    """Look ``name`` up by its camelCase key, falling back to snake_case."""
    if name in data:
        return data[name]
    return data.get(to_snake(name))


def is_empty(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def _parse_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _as_number(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def validate_patient(data: Mapping) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for field, rule in PATIENT_RULES.items():
        value = field_value(data, field)
        if is_empty(value):
            if rule["required"]:
                errors[field] = MSG_REQUIRED
            continue

        if "min_length" in rule or "max_length" in rule:
            text = str(value).strip()
            if len(text) < rule.get("min_length", 0):
                errors[field] = MSG_MIN_LENGTH.format(min=rule["min_length"])
                continue
            if "max_length" in rule and len(text) > rule["max_length"]:
                errors[field] = MSG_MAX_LENGTH.format(max=rule["max_length"])
                continue

        if "pattern" in rule and not rule["pattern"].match(str(value)):
            errors[field] = rule["message"]
            continue

        if "options" in rule and value not in rule["options"]:
            errors[field] = f"Must be one of: {', '.join(rule['options'])}"

    dob = field_value(data, "dateOfBirth")
    if not is_empty(dob) and "dateOfBirth" not in errors:
        parsed = _parse_date(dob)
        if parsed is None:
            errors["dateOfBirth"] = MSG_INVALID_DATE
        elif parsed > utcnow().astimezone().date():
            errors["dateOfBirth"] = MSG_FUTURE_DATE

    return errors


def validate_examination(data: Mapping) -> Dict[str, str]:
    data = flatten_vitals(dict(data))
    errors: Dict[str, str] = {}

    if is_empty(field_value(data, "date")):
        errors["date"] = "Examination date is required"

    exam_type = field_value(data, "type")
    if is_empty(exam_type):
        errors["type"] = "Examination type is required"
    elif exam_type not in ExaminationType.ALL:
        errors["type"] = f"Examination type must be one of: {', '.join(ExaminationType.ALL)}"

    for field, (low, high, message) in VITAL_RANGES.items():
        value = field_value(data, field)
        if is_empty(value):
            continue
        number = _as_number(value)
        if number is None or number < low or number > high:
            errors[field] = message

    blood_pressure = field_value(data, "bloodPressure")
    if not is_empty(blood_pressure) and not BLOOD_PRESSURE_PATTERN.match(str(blood_pressure)):
        errors["bloodPressure"] = "Blood pressure must be in format XXX/XX (e.g., 120/80)"

    required = ExaminationType.REQUIRED_FIELDS.get(exam_type, []) if isinstance(exam_type, str) else []
    for field in required:
        if is_empty(field_value(data, field)) and field not in errors:
            label = ExaminationType.LABELS[exam_type]
            errors[field] = f"{FIELD_DISPLAY_NAMES.get(field, field)} is required for {label}"

    return errors
