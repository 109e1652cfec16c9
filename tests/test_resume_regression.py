import json
from pathlib import Path

import nlp.parser as parser_module


extract_candidate_info = parser_module.extract_candidate_info


FIXTURE_PATH = Path(__file__).resolve().parent / "fixtures" / "resume_samples.json"


def test_resume_regressions():
    samples = json.loads(FIXTURE_PATH.read_text(encoding="utf-8"))
    for sample in samples:
        expected = sample["expected"]

        result = extract_candidate_info(sample["text"], current_year=sample["current_year"])

        for key in ("name", "email", "phone", "experience", "linkedin_url"):
            assert result[key] == expected[key], f"{key} mismatch for {expected['name']}"

        for skill in expected["primary_skills"]:
            assert skill in result["primary_skills"]
        for skill in expected["secondary_skills"]:
            assert skill in result["secondary_skills"]
        for skill in expected["absent_skills"]:
            assert skill not in result["primary_skills"] + result["secondary_skills"]

        assert len(result["primary_skills"]) <= 8
        assert len(result["secondary_skills"]) <= 6
