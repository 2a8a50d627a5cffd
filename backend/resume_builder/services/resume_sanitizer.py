"""
Validation and defaulting for the structured resume record.

Everything here works on the camelCase wire format and is pure: no I/O, no
exceptions, and sanitize_resume(sanitize_resume(x)) == sanitize_resume(x).
"""
import copy
from typing import Any, Dict, List

from pydantic import BaseModel


# Field layout of the record. Entry lists map to (string fields, string-list fields, bool fields).
_PERSONAL_FIELDS = ("fullName", "jobTitle", "email", "phone", "address", "photo")
_SOCIAL_FIELDS = ("linkedin", "github", "portfolio")
SKILL_CATEGORIES = ("technical", "soft", "languages", "tools")

_ENTRY_LAYOUTS = {
    "experience": (
        ("jobTitle", "company", "location", "startDate", "endDate", "description"),
        ("achievements",),
        ("current",),
    ),
    "education": (
        ("degree", "institution", "location", "startDate", "endDate", "gpa", "description"),
        (),
        (),
    ),
    "projects": (
        ("title", "description", "link", "github", "startDate", "endDate"),
        ("technologies",),
        (),
    ),
    "certifications": (
        ("name", "issuer", "date", "credentialId", "link"),
        (),
        (),
    ),
}

_EMPTY_RESUME = {
    "personalInfo": {
        **{field: "" for field in _PERSONAL_FIELDS},
        "socialLinks": {field: "" for field in _SOCIAL_FIELDS},
    },
    "professionalSummary": "",
    "experience": [],
    "education": [],
    "skills": {category: [] for category in SKILL_CATEGORIES},
    "projects": [],
    "certifications": [],
}


def default_resume() -> Dict[str, Any]:
    """A fresh empty record; callers may mutate it."""
    return copy.deepcopy(_EMPTY_RESUME)


# ============================================================================
# Coercion helpers
# ============================================================================

def _as_dict(value: Any) -> Dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    return value if isinstance(value, dict) else {}


def coerce_str(value: Any) -> str:
    """Strings are stripped, numbers stringified, anything else is dropped."""
    if isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)):
        try:
            return str(value)
        except ValueError:
            # int above the interpreter's digit limit for str()
            return ""
    return ""


def coerce_str_list(value: Any) -> List[str]:
    """List of non-empty strings, de-duplicated case-insensitively (first spelling wins)."""
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []

    seen = set()
    result = []
    for item in value:
        text = coerce_str(item)
        if not text or text.lower() in seen:
            continue
        seen.add(text.lower())
        result.append(text)
    return result


def _sanitize_entry(entry: Dict[str, Any], layout) -> Dict[str, Any]:
    str_fields, list_fields, bool_fields = layout
    clean = {}
    for field in str_fields:
        clean[field] = coerce_str(entry.get(field))
    for field in list_fields:
        clean[field] = coerce_str_list(entry.get(field))
    for field in bool_fields:
        clean[field] = entry.get(field) is True
    return clean


def _entry_is_empty(entry: Dict[str, Any]) -> bool:
    return not any(value for value in entry.values() if not isinstance(value, bool))


def _sanitize_entries(value: Any, layout) -> List[Dict[str, Any]]:
    if not isinstance(value, (list, tuple)):
        return []
    entries = []
    for item in value:
        if not isinstance(item, dict):
            continue
        entry = _sanitize_entry(item, layout)
        if not _entry_is_empty(entry):
            entries.append(entry)
    return entries


# ============================================================================
# Public API
# ============================================================================

def sanitize_resume(data: Any) -> Dict[str, Any]:
    """
    Coerce an arbitrary object into the fixed resume shape.

    Missing lists become [], missing strings become "", values of the wrong
    type are dropped. Accepts dicts, StructuredResume models or anything else
    (which yields the empty record).
    """
    data = _as_dict(data)
    result = default_resume()

    personal = _as_dict(data.get("personalInfo"))
    for field in _PERSONAL_FIELDS:
        result["personalInfo"][field] = coerce_str(personal.get(field))
    social = _as_dict(personal.get("socialLinks"))
    for field in _SOCIAL_FIELDS:
        result["personalInfo"]["socialLinks"][field] = coerce_str(social.get(field))

    result["professionalSummary"] = coerce_str(data.get("professionalSummary"))

    skills = _as_dict(data.get("skills"))
    for category in SKILL_CATEGORIES:
        result["skills"][category] = coerce_str_list(skills.get(category))

    for section, layout in _ENTRY_LAYOUTS.items():
        result[section] = _sanitize_entries(data.get(section), layout)

    return result


def has_identity(record: Dict[str, Any]) -> bool:
    personal = record.get("personalInfo", {})
    return bool(personal.get("fullName") or personal.get("email"))


def has_content(record: Dict[str, Any]) -> bool:
    skills = record.get("skills", {})
    return bool(
        record.get("professionalSummary")
        or any(skills.get(category) for category in SKILL_CATEGORIES)
        or record.get("experience")
        or record.get("education")
    )


def is_plausible(record: Dict[str, Any]) -> bool:
    """Validity rule for an extraction: a name or email, or any real content."""
    return has_identity(record) or has_content(record)


def merge_resume_records(base: Any, incoming: Any) -> Dict[str, Any]:
    """
    Merge a freshly parsed record into a saved one.

    Non-empty incoming values replace the saved ones, empty incoming values
    keep what was saved, skill categories are unioned.
    """
    merged = sanitize_resume(base)
    new = sanitize_resume(incoming)

    for field in _PERSONAL_FIELDS:
        if new["personalInfo"][field]:
            merged["personalInfo"][field] = new["personalInfo"][field]
    for field in _SOCIAL_FIELDS:
        if new["personalInfo"]["socialLinks"][field]:
            merged["personalInfo"]["socialLinks"][field] = new["personalInfo"]["socialLinks"][field]

    if new["professionalSummary"]:
        merged["professionalSummary"] = new["professionalSummary"]

    for category in SKILL_CATEGORIES:
        merged["skills"][category] = coerce_str_list(merged["skills"][category] + new["skills"][category])

    for section in _ENTRY_LAYOUTS:
        if new[section]:
            merged[section] = new[section]

    return merged
