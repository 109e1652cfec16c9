# skills.py
# --- Context-scored skill extraction over fixed category vocabularies ---

import re
from typing import Dict, List, Optional, Sequence, Tuple

from services.candidate_schema import PRIMARY_SKILL_LIMIT, SECONDARY_SKILL_LIMIT


# Category order matters: it is the tie-break order for equal scores.
SKILL_CATEGORIES: Dict[str, List[str]] = {
    "programming": [
        "JavaScript", "Python", "Java", "C++", "C#", "PHP", "Ruby", "Go", "Rust", "TypeScript",
        "Swift", "Kotlin", "Scala", "MATLAB", "Dart", "Objective-C", "Perl", "Haskell",
    ],
    "web": [
        "React", "Angular", "Vue.js", "Vue", "Node.js", "Express", "Django", "Flask", "Spring",
        "ASP.NET", "Laravel", "Rails", "HTML", "CSS", "Bootstrap", "Tailwind", "jQuery",
        "Next.js", "Nuxt.js", "Gatsby", "Svelte",
    ],
    "mobile": [
        "React Native", "Flutter", "Xamarin", "iOS", "Android", "Ionic", "Cordova",
    ],
    "database": [
        "MySQL", "PostgreSQL", "MongoDB", "Redis", "Cassandra", "Oracle", "SQL Server",
        "SQLite", "DynamoDB", "Firebase", "Elasticsearch",
    ],
    "cloud": [
        "AWS", "Azure", "GCP", "Google Cloud", "Heroku", "DigitalOcean", "Alibaba Cloud",
    ],
    "devops": [
        "Docker", "Kubernetes", "Jenkins", "Terraform", "Ansible", "Chef", "Puppet",
        "GitLab CI", "GitHub Actions", "CircleCI",
    ],
    "tools": [
        "Git", "GitHub", "GitLab", "Bitbucket", "JIRA", "Confluence", "Slack", "Trello",
        "Postman", "Swagger", "Insomnia", "VS Code", "IntelliJ", "Eclipse",
    ],
}

PRIMARY_CATEGORIES = ("programming", "web", "mobile", "database", "cloud")
SECONDARY_CATEGORIES = ("devops", "tools")

CONTEXT_RADIUS = 50

_EMAIL_SPAN_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_URL_SPAN_RE = re.compile(
    r"(?:https?://|www\.)[^\s]+"
    r"|(?<![\w@.-])[\w-]+(?:\.[\w-]+)*\.(?:com|org|io|dev|in|co|me|ai|app)/[^\s|,;]*",
    re.IGNORECASE,
)
_YEARS_RE = re.compile(r"\d+\s*years?")

_EXPERTISE_MARKERS = ("expert in", "specialist", "advanced")
_SECTION_MARKERS = ("skills", "technologies", "tech stack")
_PROJECT_MARKERS = ("project", "developed", "implemented")


def _skill_pattern(skill: str) -> re.Pattern:
    # Word characters may not touch either side; plain \b fails after "C++" or "C#".
    return re.compile(rf"(?<![A-Za-z0-9_]){re.escape(skill.lower())}(?![A-Za-z0-9_])")


_SKILL_PATTERNS: Dict[str, re.Pattern] = {
    skill: _skill_pattern(skill)
    for skills in SKILL_CATEGORIES.values()
    for skill in skills
}


def _protected_spans(text: str) -> List[Tuple[int, int]]:
    spans = [m.span() for m in _EMAIL_SPAN_RE.finditer(text)]
    spans.extend(m.span() for m in _URL_SPAN_RE.finditer(text))
    return spans


def _overlaps(start: int, end: int, spans: Sequence[Tuple[int, int]]) -> bool:
    return any(start < span_end and end > span_start for span_start, span_end in spans)


def _longer_term_spans(low_text: str, skill: str) -> List[Tuple[int, int]]:
    """Matches of vocabulary terms that contain ``skill`` (``Vue.js`` for ``Vue``)."""
    needle = skill.lower()
    spans: List[Tuple[int, int]] = []
    for other, pattern in _SKILL_PATTERNS.items():
        if len(other) > len(skill) and needle in other.lower():
            spans.extend(m.span() for m in pattern.finditer(low_text))
    return spans


def find_skill_contexts(text: str, skill: str, spans: Optional[Sequence[Tuple[int, int]]] = None) -> List[str]:
    """Return the lowercased context window of every accepted occurrence of ``skill``.

    An occurrence is dropped when its window, clipped to the line it sits
    on, overlaps an email address or URL, or when it is part of a longer
    vocabulary term.
    """
    low_text = text.lower()
    if spans is None:
        spans = _protected_spans(text)
    longer = _longer_term_spans(low_text, skill)
    pattern = _SKILL_PATTERNS.get(skill) or _skill_pattern(skill)
    contexts: List[str] = []
    for match in pattern.finditer(low_text):
        start, end = match.span()
        if any(s <= start and end <= e for s, e in longer):
            continue
        window_start = max(0, start - CONTEXT_RADIUS)
        window_end = min(len(low_text), end + CONTEXT_RADIUS)
        line_start = low_text.rfind("\n", 0, start) + 1
        line_end = low_text.find("\n", end)
        if line_end < 0:
            line_end = len(low_text)
        if _overlaps(max(window_start, line_start), min(window_end, line_end), spans):
            continue
        contexts.append(low_text[window_start:window_end])
    return contexts


def score_contexts(contexts: Sequence[str]) -> int:
    score = 0
    for context in contexts:
        score += 1
        if any(marker in context for marker in _EXPERTISE_MARKERS):
            score += 3
        if any(marker in context for marker in _SECTION_MARKERS):
            score += 2
        if _YEARS_RE.search(context) or "experience" in context:
            score += 2
        if any(marker in context for marker in _PROJECT_MARKERS):
            score += 1
    return score


def rank_skills(text: str, categories: Sequence[str]) -> List[Tuple[str, int]]:
    """Score every vocabulary skill found in ``text``; highest score first."""
    spans = _protected_spans(text)
    scored: List[Tuple[str, int]] = []
    for category in categories:
        for skill in SKILL_CATEGORIES[category]:
            contexts = find_skill_contexts(text, skill, spans)
            if contexts:
                scored.append((skill, score_contexts(contexts)))
    # sorted() is stable, so equal scores keep vocabulary order
    return sorted(scored, key=lambda item: -item[1])


def extract_skills(text: str, primary: bool = True) -> List[str]:
    categories = PRIMARY_CATEGORIES if primary else SECONDARY_CATEGORIES
    limit = PRIMARY_SKILL_LIMIT if primary else SECONDARY_SKILL_LIMIT
    ranked: List[str] = []
    for skill, _score in rank_skills(text, categories):
        if skill not in ranked:
            ranked.append(skill)
    return ranked[:limit]


def extract_primary_skills(text: str) -> List[str]:
    return extract_skills(text, primary=True)


def extract_secondary_skills(text: str) -> List[str]:
    return extract_skills(text, primary=False)
