"""Patient search. Results keep the order of the input list."""
from typing import List, Sequence

from ..models.patient import Patient


def _searchable_fields(patient: Patient) -> List[str]:
    return [
        patient.first_name.lower(),
        patient.last_name.lower(),
        patient.phone_number or "",
        (patient.email or "").lower(),
        f"{patient.first_name} {patient.last_name}".lower(),
    ]


def search_patients(all_patients: Sequence[Patient], query: str) -> List[Patient]:
    """Case-insensitive substring filter over name, phone and email."""
    if not query or not query.strip():
        return list(all_patients)

    term = query.lower()
    return [
        patient for patient in all_patients
        if any(term in field for field in _searchable_fields(patient))
    ]
