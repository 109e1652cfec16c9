"""In-memory candidate repository shared by the processor and the UI."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional

from rapidfuzz import fuzz

from services.candidate_schema import parse_experience_years

logger = logging.getLogger(__name__)

EXPERIENCE_BUCKETS = (("0-1", 1), ("1-3", 3), ("3-5", 5), ("5-10", 10))
TOP_SKILL_COUNT = 20


def _years(record: Dict[str, Any]) -> float:
    return parse_experience_years(record.get("experience")) or 0.0


def _skills(record: Dict[str, Any]) -> List[str]:
    return list(record.get("primary_skills") or []) + list(record.get("secondary_skills") or [])


class CandidateStore:
    """Candidate records keyed by id, insertion ordered, guarded by a lock."""

    def __init__(self) -> None:
        self._records: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    # -- repository API -------------------------------------------------
    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        record_id = record.get("id")
        if not record_id:
            raise ValueError("candidate record has no id")
        with self._lock:
            if record_id in self._records:
                raise ValueError(f"candidate {record_id} already stored")
            self._records[record_id] = record
        return record

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self._records.get(record_id)

    def list(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._records.values())

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def delete_all(self) -> int:
        """Drop every record and delete the stored upload copies they point at."""
        with self._lock:
            records = list(self._records.values())
            self._records.clear()
        for record in records:
            file_path = record.get("file_path")
            if not file_path:
                continue
            try:
                Path(file_path).unlink(missing_ok=True)
            except OSError as err:
                logger.warning("Could not remove %s: %s", file_path, err)
        logger.info("Cleared %d candidate records and associated files", len(records))
        return len(records)

    # -- queries --------------------------------------------------------
    def find_by_skill(self, skill: str, threshold: Optional[int] = None) -> List[Dict[str, Any]]:
        """Exact skill match, or fuzzy (case-insensitive ratio >= threshold) when given."""
        matches = []
        for record in self.list():
            skills = _skills(record)
            if threshold is None:
                hit = skill in skills
            else:
                hit = any(fuzz.ratio(skill.lower(), s.lower()) >= threshold for s in skills)
            if hit:
                matches.append(record)
        return matches

    def find_by_experience(self, min_years: float, max_years: float) -> List[Dict[str, Any]]:
        return [r for r in self.list() if min_years <= _years(r) <= max_years]

    def statistics(self) -> Dict[str, Any]:
        candidates = self.list()
        if not candidates:
            return {
                "total_candidates": 0,
                "avg_experience": 0,
                "linkedin_profiles": 0,
                "top_skills": {},
                "experience_distribution": {},
            }

        experiences = [y for y in (_years(c) for c in candidates) if y > 0]
        avg = round(sum(experiences) / len(experiences), 1) if experiences else 0

        skill_counts = Counter(skill for c in candidates for skill in _skills(c))

        distribution = {label: 0 for label, _ in EXPERIENCE_BUCKETS}
        distribution["10+"] = 0
        for candidate in candidates:
            years = _years(candidate)
            label = next((name for name, upper in EXPERIENCE_BUCKETS if years <= upper), "10+")
            distribution[label] += 1

        return {
            "total_candidates": len(candidates),
            "avg_experience": avg,
            "linkedin_profiles": sum(1 for c in candidates if c.get("linkedin_url")),
            "top_skills": dict(skill_counts.most_common(TOP_SKILL_COUNT)),
            "experience_distribution": distribution,
        }


__all__ = ["CandidateStore"]
