# sections.py
# --- Best-effort extraction of the extended candidate fields ---

import re
from typing import Any, Dict, List, Optional

from nlp.strategies import PatternStrategy, compile_strategy, run_cascade


def _clip(limit: int):
    def transform(value: str) -> Optional[str]:
        cleaned = re.sub(r"\s+", " ", value).strip(" :-,;\t")
        return cleaned[:limit].strip() or None
    return transform


def _collect(strategies: List[PatternStrategy], text: str, limit: int, min_len: int = 1, max_len: Optional[int] = None) -> List[str]:
    """Every distinct match of every strategy, in strategy order."""
    found: List[str] = []
    for strategy in strategies:
        for match in strategy.pattern.finditer(text):
            raw = match.group(strategy.group) if strategy.group and match.group(strategy.group) else match.group(0)
            value = re.sub(r"\s+", " ", raw).strip(" :-,;\t")
            if len(value) < min_len or (max_len is not None and len(value) > max_len):
                continue
            value = value[:limit].strip()
            if value and value not in found:
                found.append(value)
    return found


# ---- Education ----

DEGREE_STRATEGIES = [
    compile_strategy(
        "degree_line",
        r"\b(?:bachelor(?:'s|s)?|master(?:'s|s)?(?=\s+(?:of|in)\b)|ph\.?d|doctorate|b\.?tech|m\.?tech|mba|"
        r"b\.?sc|m\.?sc|b\.e|m\.e|bca|mca)(?![a-z])[^\n]*",
        re.IGNORECASE,
    ),
]
EDUCATION_HEADER_RE = re.compile(r"^(?:education|academics|academic qualifications?|qualifications?)\b[ \t]*:?[ \t]*(.*)$", re.IGNORECASE)
EDUCATION_SECTION_LINES = 3


def _education_section_lines(text: str) -> List[str]:
    lines = text.split("\n")
    for idx, line in enumerate(lines):
        match = EDUCATION_HEADER_RE.match(line.strip())
        if not match:
            continue
        picked = [match.group(1)] if match.group(1).strip() else []
        picked.extend(lines[idx + 1: idx + 1 + EDUCATION_SECTION_LINES - len(picked)])
        return [ln.strip()[:100].strip() for ln in picked if ln.strip()]
    return []


def extract_education(text: str) -> Optional[str]:
    entries: List[str] = []
    candidates = _collect(DEGREE_STRATEGIES, text, limit=100, min_len=5) + _education_section_lines(text)
    for value in candidates:
        if value not in entries:
            entries.append(value)
    return "; ".join(entries) if entries else None


# ---- Location ----

CITY_NAMES = (
    "Hyderabad", "Bangalore", "Bengaluru", "Mumbai", "Delhi", "Chennai", "Pune", "Kolkata",
    "Ahmedabad", "Noida", "Gurgaon", "New York", "London", "San Francisco", "Seattle",
    "Toronto", "Singapore", "Austin", "Boston", "Chicago",
)

LOCATION_STRATEGIES = [
    compile_strategy(
        "labeled",
        r"(?<!email )(?<!e-mail )\b(?:(?:current location|location|address)[ \t]*:|(?:based in|residing in|located in)\b)"
        r"[ \t]*([^\n]+)",
        re.IGNORECASE,
        group=1,
        transform=_clip(100),
    ),
    compile_strategy(
        "known_city",
        r"\b(" + "|".join(re.escape(city) for city in CITY_NAMES) + r")\b",
        re.IGNORECASE,
        group=1,
        transform=_clip(100),
    ),
    compile_strategy("city_state", r"\b([A-Z][a-z]+(?: [A-Z][a-z]+)?, [A-Z]{2})\b", group=1, transform=_clip(100)),
    compile_strategy("city_country", r"\b([A-Z][a-z]+, (?:India|USA|US|UK|Canada|Germany|Australia))\b", group=1, transform=_clip(100)),
]


def extract_location(text: str) -> Optional[str]:
    return run_cascade(LOCATION_STRATEGIES, text)


# ---- Current role ----

ROLE_WORDS = (
    "Engineer", "Developer", "Manager", "Analyst", "Designer", "Specialist", "Lead",
    "Director", "Consultant", "Architect", "Administrator", "Scientist", "Tester", "Trainee",
)

CURRENT_ROLE_STRATEGIES = [
    compile_strategy(
        "labeled",
        r"(?<!project )\b(?:current role|current position|designation|job title|position|title)[ \t]*:[ \t]*([^\n,]+)",
        re.IGNORECASE,
        group=1,
        transform=_clip(100),
    ),
    compile_strategy(
        "working_as",
        r"\b(?:currently working as|working as)[ \t]+(?:an?[ \t]+)?([^\n,.]+)",
        re.IGNORECASE,
        group=1,
        transform=_clip(100),
    ),
    compile_strategy(
        "role_line",
        r"^((?:[A-Z][a-z]+[ \t]+){0,3}(?:" + "|".join(ROLE_WORDS) + r"))\b",
        re.MULTILINE,
        group=1,
        transform=_clip(100),
    ),
]


def extract_current_role(text: str) -> Optional[str]:
    return run_cascade(CURRENT_ROLE_STRATEGIES, text)


# ---- Summary ----

SUMMARY_HEADERS = (
    "professional summary", "career objective", "summary", "objective", "profile", "about me", "overview",
)


def _summary_strategy(header: str) -> PatternStrategy:
    return compile_strategy(
        header,
        rf"\b{re.escape(header)}\b[ \t]*:?\s*([^\n]{{20,}})",
        re.IGNORECASE,
        group=1,
        transform=_clip(300),
    )


SUMMARY_STRATEGIES = [_summary_strategy(header) for header in SUMMARY_HEADERS]


def extract_summary(text: str) -> Optional[str]:
    return run_cascade(SUMMARY_STRATEGIES, text)


# ---- Vocabulary fields ----

CERTIFICATIONS = (
    "AWS Certified", "Google Cloud Certified", "Microsoft Certified", "Cisco Certified",
    "PMP", "CISSP", "CISM", "CEH", "OSCP", "CompTIA", "Oracle Certified",
    "Salesforce Certified", "Adobe Certified", "Red Hat Certified", "VMware Certified",
    "Certified Kubernetes", "Scrum Master",
)

LANGUAGES = (
    "English", "Spanish", "French", "German", "Chinese", "Japanese", "Korean", "Italian",
    "Portuguese", "Russian", "Arabic", "Hindi", "Telugu", "Tamil", "Bengali", "Marathi",
    "Gujarati", "Kannada", "Malayalam", "Urdu",
)


def _vocabulary_hits(text: str, vocabulary) -> List[str]:
    lowered = text.lower()
    return [
        term for term in vocabulary
        if re.search(rf"(?<![a-z0-9]){re.escape(term.lower())}(?![a-z0-9])", lowered)
    ]


def extract_certifications(text: str) -> List[str]:
    return _vocabulary_hits(text, CERTIFICATIONS)


def extract_languages(text: str) -> List[str]:
    return _vocabulary_hits(text, LANGUAGES)


# ---- Projects ----

PROJECT_STRATEGIES = [
    compile_strategy("project_title", r"\bproject title[ \t]*:[ \t]*([^\n]+)", re.IGNORECASE, group=1),
    compile_strategy(
        "project_label",
        r"\b(?:major project|capstone project|capstone|projects?)\b[ \t]*:?\s*([^\n]{20,})",
        re.IGNORECASE,
        group=1,
    ),
]


def extract_projects(text: str) -> Optional[str]:
    projects = _collect(PROJECT_STRATEGIES, text, limit=150, min_len=4)
    return "; ".join(projects[:3]) if projects else None


# ---- Companies ----

WELL_KNOWN_COMPANIES = (
    "Google", "Microsoft", "Amazon", "Apple", "Facebook", "Meta", "Netflix", "Tesla", "IBM",
    "Adobe", "Uber", "Airbnb", "Spotify", "Twitter", "TCS", "Infosys", "Wipro", "HCL",
    "Accenture", "Capgemini", "Cognizant", "Tech Mahindra", "Mindtree", "Mphasis",
)

COMPANY_STRATEGIES = [
    compile_strategy(
        "labeled",
        r"\b(?:company name|company|employer|organization|organisation|worked at)\b[ \t]*:[ \t]*([^\n,]+)",
        re.IGNORECASE,
        group=1,
    ),
    compile_strategy(
        "suffix",
        r"\b([A-Z][A-Za-z&]*(?:[ \t]+[A-Z&][A-Za-z&]*)*[ \t]+"
        r"(?:Ltd|Inc|Corporation|Corp|Company|Technologies|Solutions|Systems|Services|Pvt|Private|Limited|LLC))\b\.?",
        group=1,
    ),
    compile_strategy(
        "well_known",
        r"\b(" + "|".join(re.escape(name) for name in WELL_KNOWN_COMPANIES) + r")\b",
        group=1,
    ),
]


def extract_companies(text: str) -> Optional[str]:
    companies = _collect(COMPANY_STRATEGIES, text, limit=100, min_len=4, max_len=49)
    return "; ".join(companies[:5]) if companies else None


def extract_additional_fields(text: str) -> Dict[str, Any]:
    return {
        "education": extract_education(text),
        "location": extract_location(text),
        "current_role": extract_current_role(text),
        "summary": extract_summary(text),
        "certifications": extract_certifications(text),
        "languages": extract_languages(text),
        "projects": extract_projects(text),
        "companies": extract_companies(text),
    }
