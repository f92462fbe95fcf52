"""
Derived classification for attached files.

Category, tags and a default description are inferred from the file name and
MIME type when the uploader does not provide them.
"""
import re
from typing import List

from ..models.file import FileCategory

_DATE_IN_NAME = re.compile(r"(\d{4}[-_]\d{2}[-_]\d{2})")

# (keywords in file name, tags added)
_TAG_RULES = [
    (("xray", "x-ray"), ["x-ray", "imaging"]),
    (("mri",), ["mri", "imaging"]),
    (("ct",), ["ct-scan", "imaging"]),
    (("blood",), ["blood-work", "lab"]),
    (("urine",), ["urinalysis", "lab"]),
    (("ekg", "ecg"), ["ekg", "cardiac"]),
    (("echo",), ["echocardiogram", "cardiac"]),
    (("prescription",), ["prescription", "medication"]),
]

# (keywords in file name, description), first match wins
_DESCRIPTION_RULES = [
    (("xray", "x-ray"), "X-ray imaging study"),
    (("mri",), "MRI scan"),
    (("ct", "cat"), "CT scan"),
    (("ultrasound", "echo"), "Ultrasound study"),
    (("lab", "blood"), "Laboratory test results"),
    (("prescription", "rx"), "Prescription document"),
    (("discharge", "summary"), "Discharge summary"),
    (("consent",), "Consent form"),
    (("insurance",), "Insurance documentation"),
]


def _contains_any(text: str, keywords) -> bool:
    return any(k in text for k in keywords)


def categorize_file(name: str, mime_type: str) -> str:
    file_name = (name or "").lower()
    file_type = (mime_type or "").lower()

    if file_type.startswith("image/"):
        if _contains_any(file_name, ("xray", "x-ray", "scan", "mri", "ct")):
            return FileCategory.IMAGING
        return FileCategory.PHOTOS

    if file_type == "application/pdf":
        if _contains_any(file_name, ("lab", "blood", "test")):
            return FileCategory.LAB_RESULTS
        if _contains_any(file_name, ("report", "summary")):
            return FileCategory.REPORTS
        if _contains_any(file_name, ("prescription", "rx")):
            return FileCategory.PRESCRIPTIONS
        if _contains_any(file_name, ("insurance", "billing")):
            return FileCategory.INSURANCE
        return FileCategory.DOCUMENTS

    if "word" in file_type or "document" in file_type or file_type == "text/plain":
        return FileCategory.DOCUMENTS

    return FileCategory.GENERAL


def generate_file_tags(name: str, mime_type: str) -> List[str]:
    file_name = (name or "").lower()
    tags = [categorize_file(name, mime_type)]
    for keywords, rule_tags in _TAG_RULES:
        if _contains_any(file_name, keywords):
            tags.extend(rule_tags)

    match = _DATE_IN_NAME.search(file_name)
    if match:
        tags.append(match.group(1).replace("_", "-"))

    return list(dict.fromkeys(tags))


def generate_file_description(name: str, mime_type: str) -> str:
    file_name = (name or "").lower()
    for keywords, description in _DESCRIPTION_RULES:
        if _contains_any(file_name, keywords):
            return description
    category = categorize_file(name, mime_type)
    return f"{category.replace('-', ' ').title()} file"
