"""Field-by-field arbitration between rule-based and model-assisted records."""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

from services.candidate_schema import (
    ADDITIONAL_LIST_FIELDS,
    ADDITIONAL_TEXT_FIELDS,
    NAME_NOT_FOUND,
    build_candidate_record,
    parse_experience_years,
)

_STRICT_EMAIL_RE = re.compile(r"^[a-z0-9._%+-]+@[a-z0-9.-]+\.[a-z]{2,}$", re.IGNORECASE)
_PHONE_SHAPE_RE = re.compile(r"^[\d+\-() ]{10,20}$")


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(_STRICT_EMAIL_RE.match(value))


def is_valid_phone(value: Any) -> bool:
    return isinstance(value, str) and bool(_PHONE_SHAPE_RE.match(value))


def is_valid_experience(value: Any) -> bool:
    return parse_experience_years(value) is not None


def is_valid_linkedin(value: Any) -> bool:
    return isinstance(value, str) and "linkedin.com/in/" in value.lower()


def is_valid_name(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip()) and value != NAME_NOT_FOUND


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (list, tuple, str)):
        return len(value) > 0
    return True


def merge_additional_fields(rule: Optional[Dict[str, Any]], model: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Shallow merge; a present rule-based value wins over the model value."""
    rule = rule or {}
    model = model or {}
    merged: Dict[str, Any] = {}
    for key in ADDITIONAL_TEXT_FIELDS + ADDITIONAL_LIST_FIELDS:
        rule_value = rule.get(key)
        merged[key] = rule_value if _present(rule_value) else model.get(key)
    return merged


def merge_records(rule_record: Dict[str, Any], model_record: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Combine both extraction paths into one record that keeps the rule-based id."""
    if model_record is None:
        return rule_record

    rule_email = rule_record.get("email")
    rule_phone = rule_record.get("phone")
    model_experience = model_record.get("experience")
    rule_linkedin = rule_record.get("linkedin_url")
    model_name = model_record.get("name")

    additional = None
    if "additional_fields" in rule_record or "additional_fields" in model_record:
        additional = merge_additional_fields(
            rule_record.get("additional_fields"), model_record.get("additional_fields")
        )

    return build_candidate_record(
        record_id=rule_record.get("id"),
        name=model_name if is_valid_name(model_name) else rule_record.get("name"),
        email=rule_email if is_valid_email(rule_email) else model_record.get("email"),
        phone=rule_phone if is_valid_phone(rule_phone) else model_record.get("phone"),
        experience=model_experience if is_valid_experience(model_experience) else rule_record.get("experience"),
        linkedin_url=rule_linkedin if is_valid_linkedin(rule_linkedin) else model_record.get("linkedin_url"),
        # model first, then rule-based; build_candidate_record dedups and caps
        primary_skills=list(model_record.get("primary_skills") or []) + list(rule_record.get("primary_skills") or []),
        secondary_skills=list(model_record.get("secondary_skills") or []) + list(rule_record.get("secondary_skills") or []),
        additional_fields=additional,
    )


__all__ = [
    "is_valid_email",
    "is_valid_experience",
    "is_valid_linkedin",
    "is_valid_name",
    "is_valid_phone",
    "merge_additional_fields",
    "merge_records",
]
