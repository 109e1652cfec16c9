# parser.py
# --- Rule-based candidate record extraction from raw resume text ---

import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from rapidfuzz import fuzz, process

from nlp import sections
from nlp.skills import extract_primary_skills, extract_secondary_skills
from nlp.strategies import compile_strategy, run_cascade
from services.candidate_schema import (
    EXPERIENCE_NOT_SPECIFIED,
    NAME_NOT_FOUND,
    build_candidate_record,
    clean_phone,
    format_years,
    parse_experience_years,
)


# ---- Debug utilities ----

_DEBUG = False


def set_debug(enabled: bool) -> None:
    """Toggle step-by-step debug output for this module."""
    global _DEBUG
    _DEBUG = enabled


def _debug(step: str, detail: Optional[str] = None) -> None:
    """Emit a debug line when debugging is enabled."""
    if not _DEBUG:
        return
    if detail:
        print(f"[parser] {step}: {detail}")
    else:
        print(f"[parser] {step}")


# ---- Utilities ----

_WS_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Unify line endings, collapse whitespace inside each line, drop blank lines."""
    if not text:
        return ""
    unified = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = [_WS_RE.sub(" ", ln).strip() for ln in unified.split("\n")]
    normalized = "\n".join(ln for ln in lines if ln)
    _debug("normalize", f"input chars={len(text)}, output chars={len(normalized)}")
    return normalized


def _lines(text: str) -> List[str]:
    return [ln.strip() for ln in text.splitlines() if ln.strip()]


# ---- Primitive extractors ----

_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")


def extract_email(text: str) -> Optional[str]:
    match = _EMAIL_RE.search(text)
    email = match.group(0).lower() if match else None
    _debug("extract_email", email or "none")
    return email


def _has_enough_digits(value: str) -> bool:
    return len(re.sub(r"\D", "", value)) >= 7


PHONE_STRATEGIES = [
    compile_strategy("india_mobile", r"(?<![\d+])(?:\+91[\s-]?)?[6-9]\d{9}(?!\d)", transform=clean_phone),
    compile_strategy(
        "nanp",
        r"(?<![\d+])(?:\+1[\s.-]?)?\(?\d{3}\)?[ .-]?\d{3}[ .-]?\d{4}(?!\d)",
        transform=clean_phone,
    ),
    compile_strategy("international", r"\+[1-9]\d{0,3}[ -]?\d{4,14}(?!\d)", transform=clean_phone),
    compile_strategy(
        "labeled",
        r"\b(?:phone|mobile|cell|tel)\b\.?[ \t]*(?:no\.?|number)?[ \t]*:?[ \t]*([\d \t\-()+]{7,})",
        re.IGNORECASE,
        group=1,
        transform=clean_phone,
        validate=_has_enough_digits,
    ),
]


def extract_phone(text: str) -> Optional[str]:
    phone = run_cascade(PHONE_STRATEGIES, text)
    _debug("extract_phone", phone or "none")
    return phone


_LINKEDIN_HANDLE_RE = re.compile(r"[A-Za-z0-9_-]{3,100}")
_NOT_A_HANDLE = {"linkedin", "profile", "in", "com", "www"}


def _linkedin_from_url(raw: str) -> Optional[str]:
    url = raw.strip().rstrip("/")
    if url.lower().startswith("http"):
        return url
    handle = url.split("/")[-1]
    return f"https://linkedin.com/in/{handle}" if handle else None


def _linkedin_from_handle(raw: str) -> Optional[str]:
    handle = raw.strip().rstrip("/").split("/")[-1]
    if "@" in handle or not _LINKEDIN_HANDLE_RE.fullmatch(handle):
        return None
    if handle.lower() in _NOT_A_HANDLE:
        return None
    return f"https://linkedin.com/in/{handle}"


LINKEDIN_STRATEGIES = [
    compile_strategy(
        "profile_url",
        r"(?:https?://)?(?:[a-z]{2,3}\.)?linkedin\.com/in/[A-Za-z0-9_%-]+/?",
        re.IGNORECASE,
        transform=_linkedin_from_url,
    ),
    # The label needs an explicit colon and a handle on the same line; the bare
    # word "linkedin" (e.g. "GitHub | LinkedIn") is not a profile.
    compile_strategy(
        "labeled_handle",
        r"\blinkedin\b[ \t]*:[ \t]*([^\s|,;]+)",
        re.IGNORECASE,
        group=1,
        transform=_linkedin_from_handle,
    ),
]


def extract_linkedin(text: str) -> Optional[str]:
    url = run_cascade(LINKEDIN_STRATEGIES, text)
    _debug("extract_linkedin", url or "none")
    return url


# ---- Experience extraction ----

MONTH_PATTERN = (
    r"Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|Jul(?:y)?|"
    r"Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?"
)
_NUMBER = r"(?<![\d.])(\d+(?:\.\d+)?)"


def _valid_years(value: str) -> bool:
    return parse_experience_years(value) is not None


def _years_strategy(name: str, regex: str):
    return compile_strategy(name, regex, re.IGNORECASE, group=1, validate=_valid_years)


EXPERIENCE_STATEMENT_STRATEGIES = [
    _years_strategy("with_years", rf"\b(?:with|having)\s+{_NUMBER}\s*\+?\s*years?\s+(?:of\s+)?(?:work\s+)?experience"),
    _years_strategy("years_of_experience", rf"{_NUMBER}\s*\+?\s*years?\s*(?:of\s+)?(?:[a-z]+\s+)?experience"),
    _years_strategy("experience_label", rf"experience\s*:?\s*{_NUMBER}\s*\+?\s*years?"),
    _years_strategy("yrs_exp", rf"{_NUMBER}\s*\+?\s*yrs?\.?\s*(?:of\s+)?exp"),
    _years_strategy("total_experience", rf"total\s+experience\s*:?\s*{_NUMBER}"),
    _years_strategy("over_years", rf"\b(?:over|more than)\s+{_NUMBER}\s*\+?\s*years?"),
]

DATE_SPAN_RE = re.compile(
    rf"(?:(?:{MONTH_PATTERN})\.?,?\s+|\d{{1,2}}[/.])?((?:19|20)\d{{2}})\s*(?:-|–|—|to)\s*"
    rf"(?:(?:{MONTH_PATTERN})\.?,?\s+|\d{{1,2}}[/.])?((?:19|20)\d{{2}}|present|current|now)\b",
    re.IGNORECASE,
)
OPEN_ENDED = {"present", "current", "now"}
EARLIEST_SPAN_START = 1980


def _years_from_date_spans(text: str, current_year: int) -> int:
    """Sum whole-year spans; open-ended spans run to ``current_year``."""
    seen = set()
    total = 0
    for match in DATE_SPAN_RE.finditer(text):
        start = int(match.group(1))
        end_raw = match.group(2).lower()
        end = current_year if end_raw in OPEN_ENDED else int(end_raw)
        if start < EARLIEST_SPAN_START or end < start or (start, end) in seen:
            continue
        seen.add((start, end))
        total += end - start
    _debug("date_spans", f"spans={sorted(seen)}, total={total}")
    return total


def extract_experience(text: str, current_year: Optional[int] = None) -> str:
    stated = run_cascade(EXPERIENCE_STATEMENT_STRATEGIES, text)
    if stated is not None:
        years = parse_experience_years(stated)
        _debug("extract_experience", f"stated={years}")
        return format_years(years)

    year = current_year or datetime.now().year
    total = _years_from_date_spans(text, year)
    if parse_experience_years(total) is None:
        _debug("extract_experience", "not specified")
        return EXPERIENCE_NOT_SPECIFIED
    return format_years(total)


# ---- Name extraction ----

NAME_SCAN_LINES = 8

SECTION_HEADER_WORDS = {
    "profile", "summary", "objective", "education", "experience", "skills", "skill", "contact",
    "projects", "project", "certifications", "certification", "tools", "competencies", "resume",
    "cv", "curriculum", "vitae", "qualification", "qualifications", "languages", "language",
    "achievements", "awards", "references", "declaration", "hobbies", "interests", "employment",
    "history", "technical", "personal", "details", "information", "career", "internship",
    "internships", "publications", "strengths", "responsibilities", "address", "phone", "email",
    "mobile", "location", "overview", "expertise", "academic", "academics", "training",
}
SECTION_HEADER_PHRASES = [
    "professional summary", "career objective", "work experience", "professional experience",
    "technical skills", "key skills", "core competencies", "educational qualifications",
    "personal details", "contact information", "curriculum vitae", "certifications",
    "achievements", "projects", "declaration",
]
INSTITUTION_WORDS = {
    "university", "college", "institute", "institution", "school", "academy", "ltd", "limited",
    "inc", "llc", "pvt", "technologies", "technology", "solutions", "systems", "services",
    "corporation", "corp", "labs", "consulting", "bachelor", "master", "degree", "phd",
}
JOB_TITLE_WORDS = {
    "engineer", "developer", "manager", "analyst", "consultant", "tester", "lead", "director",
    "intern", "architect", "designer", "administrator", "specialist", "scientist", "officer",
    "executive", "associate", "trainee", "programmer", "coordinator", "head", "founder",
    "senior", "junior",
}
LOCATION_WORDS = {
    "india", "usa", "canada", "australia", "kingdom", "states", "london", "delhi", "mumbai",
    "bangalore", "bengaluru", "hyderabad", "chennai", "pune", "kolkata", "texas", "california",
}
LOCATION_PHRASES = {"new york", "san francisco", "tamil nadu", "united kingdom", "united states"}

_PHONE_LIKE_RE = re.compile(r"\+?\d[\d\s\-().]{6,}\d")
_ALL_CAPS_NAME_RE = re.compile(r"^[A-Z][A-Z'\-]+(?:\s+[A-Z][A-Z'\-]+){1,4}$")
_TITLE_CASE_NAME_RE = re.compile(r"^[A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,2}$")
_INITIALS_NAME_RE = re.compile(r"^(?:[A-Z][A-Za-z]{2,}\.\s?[A-Z]|[A-Z]\.\s?[A-Z][A-Za-z]{2,})$")
_LABELED_NAME_RE = re.compile(
    r"^(?:full\s+name|candidate\s+name|name|candidate)\s*[:\-]\s*([A-Za-z][A-Za-z .']{2,49})$",
    re.IGNORECASE | re.MULTILINE,
)

CONFIDENCE_ALL_CAPS = 0.9
CONFIDENCE_INITIALS = 0.85
CONFIDENCE_TITLE_CASE = 0.8
CONFIDENCE_LABELED = 0.7


def format_name(raw: str) -> str:
    letters = re.sub(r"[^A-Za-z\s]", "", raw.replace(".", " "))
    return " ".join(word[:1].upper() + word[1:].lower() for word in letters.split())


def _looks_like_header(lower_line: str) -> bool:
    tokens = set(re.findall(r"[a-z]+", lower_line))
    if tokens & SECTION_HEADER_WORDS:
        return True
    # catches misspelled headers such as "PROFESIONAL SUMARY"
    return process.extractOne(lower_line, SECTION_HEADER_PHRASES, scorer=fuzz.ratio, score_cutoff=88) is not None


def _reject_name(line: str) -> Optional[str]:
    """Return why ``line`` cannot be a name, or None if it may be one."""
    if "@" in line:
        return "email"
    if line[:1].isdigit():
        return "leading digit"
    if _PHONE_LIKE_RE.search(line):
        return "phone"
    if len(line) < 3 or len(line) > 50:
        return "length"
    lower = line.lower()
    tokens = set(re.findall(r"[a-z]+", lower))
    if _looks_like_header(lower):
        return "section header"
    if tokens & INSTITUTION_WORDS:
        return "institution"
    if tokens & JOB_TITLE_WORDS:
        return "job title"
    if tokens & LOCATION_WORDS or any(phrase in lower for phrase in LOCATION_PHRASES):
        return "location"
    return None


def _collect_name_candidates(text: str) -> List[Dict[str, Any]]:
    lines = _lines(text)
    candidates: List[Dict[str, Any]] = []

    def register(raw: str, confidence: float, position: int, method: str) -> None:
        reason = _reject_name(raw.strip())
        if reason:
            _debug("name_rejected", f"{raw!r} via {method}: {reason}")
            return
        name = format_name(raw)
        if len(name.split()) < 2:
            return
        candidates.append({
            "name": name,
            "confidence": confidence,
            "position": position,
            "method": method,
        })
        _debug("name_candidate", f"{name} via {method} confidence={confidence} line={position}")

    for idx, line in enumerate(lines[:NAME_SCAN_LINES]):
        if _ALL_CAPS_NAME_RE.match(line):
            register(line, CONFIDENCE_ALL_CAPS, idx, "all_caps")
        elif _INITIALS_NAME_RE.match(line):
            register(line, CONFIDENCE_INITIALS, idx, "initials")
        elif _TITLE_CASE_NAME_RE.match(line) and 5 <= len(line) <= 40:
            register(line, CONFIDENCE_TITLE_CASE, idx, "title_case")

    for match in _LABELED_NAME_RE.finditer(text):
        position = text.count("\n", 0, match.start())
        register(match.group(1), CONFIDENCE_LABELED, position, "labeled")

    return candidates


def select_name(candidates: List[Dict[str, Any]]) -> str:
    if not candidates:
        return NAME_NOT_FOUND
    best = sorted(candidates, key=lambda c: (-c["confidence"], c["position"]))[0]
    return best["name"]


def extract_name(text: str) -> str:
    candidates = _collect_name_candidates(text)
    name = select_name(candidates)
    summary = ", ".join(f"{c['name']}:{c['confidence']}@{c['position']}" for c in candidates)
    _debug("extract_name", f"{name} | candidates=[{summary}]")
    return name


# ---- Master extraction ----

def extract_candidate_info(
    raw_text: str,
    extract_additional_fields: bool = False,
    current_year: Optional[int] = None,
) -> Dict[str, Any]:
    """Rule-based candidate record for ``raw_text``; deterministic apart from the new id."""
    _debug("extract", "start")
    text = normalize_text(raw_text)

    additional = sections.extract_additional_fields(text) if extract_additional_fields else None
    record = build_candidate_record(
        name=extract_name(text),
        email=extract_email(text),
        phone=extract_phone(text),
        experience=extract_experience(text, current_year=current_year),
        linkedin_url=extract_linkedin(text),
        primary_skills=extract_primary_skills(text),
        secondary_skills=extract_secondary_skills(text),
        additional_fields=additional,
    )
    _debug("extract", "complete")
    return record
