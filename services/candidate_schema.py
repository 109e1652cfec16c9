"""Shared helpers for constructing normalized candidate records."""

from __future__ import annotations

import re
import uuid
from typing import Any, Dict, Iterable, List, Optional

NAME_NOT_FOUND = "Name Not Found"
EXPERIENCE_NOT_SPECIFIED = "Not specified"

PRIMARY_SKILL_LIMIT = 8
SECONDARY_SKILL_LIMIT = 6

MIN_EXPERIENCE_YEARS = 0.0
MAX_EXPERIENCE_YEARS = 50.0

ADDITIONAL_TEXT_FIELDS = ("education", "location", "current_role", "summary", "projects", "companies")
ADDITIONAL_LIST_FIELDS = ("certifications", "languages")

_PHONE_JUNK_RE = re.compile(r"[^\d+\-()\s]")
_YEARS_NUMBER_RE = re.compile(r"(\d+(?:\.\d+)?)")


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def _optional_text(value: Any) -> Optional[str]:
    text = _coerce_text(value)
    return text or None


def unique_list(values: Optional[Iterable[Any]], limit: Optional[int] = None) -> List[str]:
    """Exact-string dedup that keeps first-seen order, optionally capped."""
    unique: List[str] = []
    seen = set()
    if not values:
        return unique
    for value in values:
        text = _coerce_text(value)
        if not text or text in seen:
            continue
        seen.add(text)
        unique.append(text)
        if limit is not None and len(unique) >= limit:
            break
    return unique


def clean_phone(value: Any) -> Optional[str]:
    text = _PHONE_JUNK_RE.sub("", _coerce_text(value)).strip()
    return text or None


def format_years(years: float) -> str:
    return f"{float(years):g} years"


def parse_experience_years(value: Any) -> Optional[float]:
    """Return the numeric years in ``value`` when it lies in the open range (0, 50)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        years = float(value)
    else:
        match = _YEARS_NUMBER_RE.search(_coerce_text(value))
        if not match:
            return None
        years = float(match.group(1))
    if years != years or not MIN_EXPERIENCE_YEARS < years < MAX_EXPERIENCE_YEARS:
        return None
    return years


def normalize_experience(value: Any) -> str:
    years = parse_experience_years(value)
    if years is None:
        return EXPERIENCE_NOT_SPECIFIED
    return format_years(years)


def build_additional_fields(fields: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    fields = fields or {}
    result: Dict[str, Any] = {}
    for key in ADDITIONAL_TEXT_FIELDS:
        result[key] = _optional_text(fields.get(key))
    for key in ADDITIONAL_LIST_FIELDS:
        raw = fields.get(key)
        if isinstance(raw, str):
            raw = [part for part in re.split(r"[;,]", raw)]
        result[key] = unique_list(raw if isinstance(raw, (list, tuple)) else None)
    return result


def build_candidate_record(
    *,
    name: Any = None,
    email: Any = None,
    phone: Any = None,
    experience: Any = None,
    linkedin_url: Any = None,
    primary_skills: Optional[Iterable[Any]] = None,
    secondary_skills: Optional[Iterable[Any]] = None,
    additional_fields: Optional[Dict[str, Any]] = None,
    record_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Return a normalized candidate dictionary consumed across the application.

    ``additional_fields`` is only included when it is passed (an empty dict
    counts as passed). ``record_id`` lets a merge keep the identity of the
    record it started from; otherwise a fresh id is assigned.
    """

    linkedin = _optional_text(linkedin_url)
    if linkedin and "linkedin.com/in/" not in linkedin.lower():
        linkedin = None

    email_text = _optional_text(email)
    record: Dict[str, Any] = {
        "id": record_id or uuid.uuid4().hex,
        "name": _coerce_text(name) or NAME_NOT_FOUND,
        "email": email_text.lower() if email_text else None,
        "phone": clean_phone(phone),
        "experience": normalize_experience(experience),
        "linkedin_url": linkedin,
        "primary_skills": unique_list(primary_skills, PRIMARY_SKILL_LIMIT),
        "secondary_skills": unique_list(secondary_skills, SECONDARY_SKILL_LIMIT),
    }
    if additional_fields is not None:
        record["additional_fields"] = build_additional_fields(additional_fields)
    return record


def record_fields(record: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``record`` without its identity, for content comparisons."""
    return {key: value for key, value in record.items() if key != "id"}


__all__ = [
    "NAME_NOT_FOUND",
    "EXPERIENCE_NOT_SPECIFIED",
    "PRIMARY_SKILL_LIMIT",
    "SECONDARY_SKILL_LIMIT",
    "build_candidate_record",
    "build_additional_fields",
    "clean_phone",
    "format_years",
    "normalize_experience",
    "parse_experience_years",
    "record_fields",
    "unique_list",
]
