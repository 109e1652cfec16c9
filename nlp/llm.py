"""Model-assisted candidate extraction.

Supports two providers:
  • Groq API (cloud, default: `llama-3.1-8b-instant`, retried once on
    `llama-3.3-70b-versatile` when the fast model fails)
  • Ollama (local models, default: `mistral`)

Every extractor exposes ``async extract(text, extract_additional_fields)``
and raises :class:`ModelExtractionError` when it cannot produce a record.
Callers are expected to fall back to the rule-based record in that case.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import requests
from groq import AsyncGroq

import config
from services.candidate_schema import (
    NAME_NOT_FOUND,
    build_candidate_record,
)

logger = logging.getLogger(__name__)
if not logging.getLogger().handlers:
    logging.basicConfig(level=logging.INFO)


class ModelExtractionError(RuntimeError):
    """The model path failed: no client, API/network error, or unusable output."""


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = (
    "You are an expert HR resume parser. Return ONLY one valid JSON object. "
    "No markdown formatting, no code blocks, no additional text."
)

_BASE_SCHEMA = """{
  "name": "Full Name" or null,
  "email": "email@example.com" or null,
  "phone": "+91-XXXXXXXXXX" or null,
  "experience": "X.X years" or "Not specified",
  "linkedinUrl": "https://linkedin.com/in/username" or null,
  "currentPosition": "Job Title" or null,
  "primarySkills": ["Skill1", "Skill2"],
  "secondarySkills": ["Tool1", "Tool2"]"""

_ADDITIONAL_SCHEMA = """,
  "additionalFields": {
    "education": "Education details" or null,
    "location": "City, Country" or null,
    "currentRole": "Job Title" or null,
    "summary": "Professional summary" or null,
    "certifications": ["Cert1", "Cert2"],
    "languages": ["Language1", "Language2"],
    "projects": "Project details" or null,
    "companies": "Previous companies" or null
  }"""

_EXAMPLES = """EXAMPLES OF CORRECT EXTRACTION:

Example 1 - Explicit experience statement:
Text: "Skilled Java developer with 3.9 years of work experience"
Extract: "experience": "3.9 years"

Example 2 - A date range is a span, not a number of years:
Text: "Software Engineer, Acme Corp, 2015 - 2022"
Extract: "experience": "7 years" (NOT "2015 years")

Example 3 - Work dates only, never education dates:
Text: "Education: Jun 2017 - May 2021 / Work: Dec 2023 - Present"
Extract: count only the work span

Example 4 - LinkedIn needs an actual profile URL or handle:
Text: "GitHub | linkedin | someone@gmail.com"
Extract: "linkedinUrl": null (word only, no URL)
Text: "linkedin.com/in/aravind-r-502b13197"
Extract: "linkedinUrl": "https://linkedin.com/in/aravind-r-502b13197"
"""


def build_prompt(text: str, extract_additional_fields: bool = False, today: Optional[date] = None) -> str:
    today = today or date.today()
    schema = _BASE_SCHEMA + (_ADDITIONAL_SCHEMA if extract_additional_fields else "") + "\n}"
    return (
        f"Extract the following information from this resume. Current date: {today.isoformat()}\n\n"
        f"Resume Text:\n{text[:config.MODEL_TEXT_LIMIT]}\n\n"
        "INSTRUCTIONS:\n"
        "1. Extract values exactly as they appear in the resume.\n"
        "2. Experience: use an explicit \"X years of experience\" statement when present; otherwise "
        f"add up work history date ranges, treating \"Present\" as {today.year}.\n"
        "3. LinkedIn: only return a value for an actual linkedin.com/in/ URL or handle.\n"
        "4. Skills: primary = programming languages, frameworks, databases, cloud; "
        "secondary = tools, devops, methodologies.\n\n"
        f"Return a JSON object with this EXACT structure:\n{schema}\n\n"
        f"{_EXAMPLES}\n\n"
        "NOW EXTRACT FROM THE RESUME ABOVE. Return ONLY the JSON object, nothing else."
    )


# ---------------------------------------------------------------------------
# Response handling
# ---------------------------------------------------------------------------


def find_json_object(raw: str) -> Dict[str, Any]:
    """Parse the first balanced ``{...}`` object in ``raw``."""
    start = (raw or "").find("{")
    if start < 0:
        raise ModelExtractionError("model response contains no JSON object")

    depth = 0
    in_string = False
    escaped = False
    for idx in range(start, len(raw)):
        char = raw[idx]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                try:
                    data = json.loads(raw[start: idx + 1])
                except json.JSONDecodeError as err:
                    raise ModelExtractionError(f"model JSON could not be parsed: {err}") from err
                if not isinstance(data, dict):
                    raise ModelExtractionError("model JSON is not an object")
                return data
    raise ModelExtractionError("model response has an unbalanced JSON object")


def _string_list(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [part for part in value.replace(";", ",").split(",")]
    if not isinstance(value, (list, tuple)):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _optional_string(value: Any) -> Optional[str]:
    if isinstance(value, (list, tuple)):
        value = "; ".join(_string_list(value))
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text or text.lower() in {"null", "none", "n/a", "not specified"}:
        return None
    return text


def _normalize_linkedin(value: Any) -> Optional[str]:
    url = _optional_string(value)
    if not url:
        return None
    if not url.lower().startswith("http"):
        url = f"https://{url}"
    return url if "linkedin.com/in/" in url.lower() else None


def normalize_model_record(data: Dict[str, Any], extract_additional_fields: bool = False) -> Dict[str, Any]:
    """Coerce a parsed model response into the candidate record shape."""
    name = _optional_string(data.get("name"))
    if name and name.lower() == NAME_NOT_FOUND.lower():
        name = None

    additional: Optional[Dict[str, Any]] = None
    if extract_additional_fields:
        raw_extra = data.get("additionalFields") or data.get("additional_fields") or {}
        if not isinstance(raw_extra, dict):
            raw_extra = {}
        additional = {
            "education": _optional_string(raw_extra.get("education")),
            "location": _optional_string(raw_extra.get("location")),
            "current_role": _optional_string(raw_extra.get("currentRole") or raw_extra.get("current_role"))
            or _optional_string(data.get("currentPosition")),
            "summary": _optional_string(raw_extra.get("summary")),
            "certifications": _string_list(raw_extra.get("certifications")),
            "languages": _string_list(raw_extra.get("languages")),
            "projects": _optional_string(raw_extra.get("projects")),
            "companies": _optional_string(raw_extra.get("companies")),
        }

    return build_candidate_record(
        name=name,
        email=_optional_string(data.get("email")),
        phone=_optional_string(data.get("phone")),
        experience=data.get("experience", data.get("experienceYears")),
        linkedin_url=_normalize_linkedin(data.get("linkedinUrl", data.get("linkedin_url"))),
        primary_skills=_string_list(data.get("primarySkills")),
        secondary_skills=_string_list(data.get("secondarySkills")),
        additional_fields=additional,
    )


# ---------------------------------------------------------------------------
# Groq
# ---------------------------------------------------------------------------


class GroqCandidateExtractor:
    """Chat-completion extraction through the Groq API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        fallback_model: Optional[str] = None,
        client: Optional[Any] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else config.GROQ_API_KEY
        self.model = model or config.GROQ_MODEL_NAME
        self.fallback_model = fallback_model if fallback_model is not None else config.GROQ_FALLBACK_MODEL_NAME
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.api_key:
                raise ModelExtractionError("GROQ_API_KEY not set; skip groq calls")
            self._client = AsyncGroq(api_key=self.api_key)
        return self._client

    async def _chat(self, messages: List[Dict[str, str]], model: str) -> str:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=0,
                max_tokens=config.MODEL_MAX_TOKENS,
                response_format={"type": "json_object"},
            )
        except Exception as err:
            raise ModelExtractionError(f"groq chat call failed for {model}: {err}") from err
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ModelExtractionError(f"groq returned an empty response for {model}")
        logger.debug("[llm] groq raw response (%s): %s", model, content)
        return content

    async def _chat_with_fallback(self, messages: List[Dict[str, str]]) -> str:
        try:
            return await self._chat(messages, self.model)
        except ModelExtractionError as err:
            if not self.fallback_model or self.fallback_model == self.model:
                raise
            logger.warning("[llm] %s; retrying once with %s", err, self.fallback_model)
            return await self._chat(messages, self.fallback_model)

    async def extract(self, text: str, extract_additional_fields: bool = False) -> Dict[str, Any]:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_prompt(text, extract_additional_fields)},
        ]
        content = await self._chat_with_fallback(messages)
        return normalize_model_record(find_json_object(content), extract_additional_fields)


# ---------------------------------------------------------------------------
# Ollama
# ---------------------------------------------------------------------------


class OllamaCandidateExtractor:
    """Extraction through a local Ollama server."""

    def __init__(self, base_url: Optional[str] = None, model: Optional[str] = None, timeout: float = 60.0) -> None:
        self.base_url = (base_url or config.OLLAMA_BASE_URL).rstrip("/")
        self.model = model or config.OLLAMA_MODEL
        self.timeout = timeout

    def _generate(self, prompt: str) -> str:
        payload = {
            "model": self.model,
            "system": SYSTEM_PROMPT,
            "prompt": prompt,
            "stream": False,
            "format": "json",
            "options": {"temperature": 0, "num_predict": config.MODEL_MAX_TOKENS},
        }
        try:
            response = requests.post(f"{self.base_url}/api/generate", json=payload, timeout=self.timeout)
            response.raise_for_status()
            raw = response.json().get("response", "")
        except (requests.RequestException, ValueError) as err:
            raise ModelExtractionError(f"ollama call failed: {err}") from err
        logger.debug("[llm] ollama raw response: %s", raw)
        return raw

    async def extract(self, text: str, extract_additional_fields: bool = False) -> Dict[str, Any]:
        prompt = build_prompt(text, extract_additional_fields)
        content = await asyncio.to_thread(self._generate, prompt)
        return normalize_model_record(find_json_object(content), extract_additional_fields)


class NullCandidateExtractor:
    """Stand-in used when no model provider is configured; always fails."""

    async def extract(self, text: str, extract_additional_fields: bool = False) -> Dict[str, Any]:
        raise ModelExtractionError("no model provider configured")


def get_default_extractor() -> Any:
    provider = config.LLM_PROVIDER
    if provider == "ollama":
        return OllamaCandidateExtractor(timeout=config.MODEL_TIMEOUT_SECONDS)
    if provider == "groq" and config.GROQ_API_KEY:
        return GroqCandidateExtractor()
    logger.info("[llm] model provider %r unavailable; rule-based extraction only", provider)
    return NullCandidateExtractor()
