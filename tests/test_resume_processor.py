import asyncio
from email.message import EmailMessage
from pathlib import Path

from services.candidate_schema import build_candidate_record
from services.candidate_store import CandidateStore
from services.resume_processor import METHOD_HYBRID, METHOD_RULE_BASED, ResumeProcessor


RESUME_TEXT = "JANE DOE\njane.doe@example.com\n3 years of experience\nSkills: Python, Django"


class _CountingExtractor:
    """Tracks how many model calls are in flight at once."""

    def __init__(self):
        self.active = 0
        self.peak = 0
        self.calls = 0

    async def extract(self, text, extract_additional_fields=False):
        self.calls += 1
        self.active += 1
        self.peak = max(self.peak, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        return build_candidate_record(name="Model Name", primary_skills=["Go"])


def _processor(tmp_path, **kwargs):
    kwargs.setdefault("batch_pause", 0)
    return ResumeProcessor(CandidateStore(), upload_dir=tmp_path / "uploads", **kwargs)


def test_process_file_adds_provenance_and_stores(tmp_path):
    path = tmp_path / "jane.txt"
    path.write_text(RESUME_TEXT, encoding="utf-8")
    processor = _processor(tmp_path)

    record = asyncio.run(processor.process_file(path))

    assert record["name"] == "Jane Doe"
    assert record["file_path"].startswith(str(tmp_path / "uploads"))
    assert record["file_path"] != str(path)
    assert record["original_file_name"] == "jane.txt"
    assert record["file_size"] == path.stat().st_size
    assert record["raw_text"] == RESUME_TEXT
    assert record["extraction_method"] == METHOD_RULE_BASED
    assert record["processed_at"]
    assert processor.store.get(record["id"]) is record


def test_clear_all_keeps_callers_source_file(tmp_path):
    path = tmp_path / "jane.txt"
    path.write_text(RESUME_TEXT, encoding="utf-8")
    processor = _processor(tmp_path)

    record = asyncio.run(processor.process_file(path))
    copy = Path(record["file_path"])
    assert copy.exists()

    assert processor.store.delete_all() == 1
    assert path.read_text(encoding="utf-8") == RESUME_TEXT
    assert not copy.exists()


def test_process_bytes_saves_upload(tmp_path):
    processor = _processor(tmp_path)
    data = RESUME_TEXT.encode("utf-8")

    record = asyncio.run(processor.process_bytes(data, "jane.txt"))

    saved = tmp_path / "uploads"
    assert record["file_path"].startswith(str(saved))
    assert record["file_size"] == len(data)
    assert record["original_file_name"] == "jane.txt"
    assert len(list(saved.iterdir())) == 1


def test_process_batch_reports_failures_without_aborting(tmp_path):
    good = tmp_path / "good.txt"
    good.write_text(RESUME_TEXT, encoding="utf-8")
    empty = tmp_path / "empty.txt"
    empty.write_text("   ", encoding="utf-8")
    processor = _processor(tmp_path)

    results = asyncio.run(
        processor.process_batch([good, ("photo.png", b"\x89PNG"), empty, tmp_path / "missing.txt"])
    )

    assert [r["file"] for r in results] == ["good.txt", "photo.png", "empty.txt", "missing.txt"]
    assert [r["status"] for r in results] == ["success", "failed", "failed", "failed"]
    assert results[0]["candidate"]["name"] == "Jane Doe"
    assert "Unsupported file type" in results[1]["error"]
    assert "No text content" in results[2]["error"]
    assert processor.store.count() == 1


def test_process_batch_bounds_model_concurrency(tmp_path):
    extractor = _CountingExtractor()
    processor = _processor(tmp_path, extractor=extractor, use_model=True)
    items = [(f"resume_{i}.txt", RESUME_TEXT.encode("utf-8")) for i in range(12)]

    results = asyncio.run(processor.process_batch(items))

    assert len(results) == 12
    assert all(r["status"] == "success" for r in results)
    assert extractor.calls == 12
    assert extractor.peak <= 5
    candidate = results[0]["candidate"]
    assert candidate["extraction_method"] == METHOD_HYBRID
    assert candidate["name"] == "Model Name"
    assert candidate["primary_skills"][0] == "Go"


def test_process_batch_pauses_between_chunks(tmp_path, monkeypatch):
    pauses = []
    real_sleep = asyncio.sleep

    async def fake_sleep(delay, *args, **kwargs):
        pauses.append(delay)
        await real_sleep(0)

    monkeypatch.setattr("services.resume_processor.asyncio.sleep", fake_sleep)
    processor = _processor(tmp_path, batch_size=2, batch_pause=1.5)
    items = [(f"resume_{i}.txt", RESUME_TEXT.encode("utf-8")) for i in range(5)]

    results = asyncio.run(processor.process_batch(items))

    assert len(results) == 5
    assert pauses == [1.5, 1.5]


def _eml_bytes():
    message = EmailMessage()
    message["Subject"] = "Application: Backend Engineer"
    message["From"] = "recruiter@example.com"
    message["To"] = "hiring@example.com"
    message.set_content("Please find the resumes attached.")
    message.add_attachment(RESUME_TEXT.encode("utf-8"), maintype="text", subtype="plain", filename="jane.txt")
    message.add_attachment(b"\x89PNG", maintype="image", subtype="png", filename="photo.png")
    message.add_attachment(b"", maintype="text", subtype="plain", filename="blank.txt")
    return message.as_bytes()


def test_process_eml_extracts_supported_attachments(tmp_path):
    processor = _processor(tmp_path)

    outcome = asyncio.run(processor.process_eml(_eml_bytes()))

    assert outcome["email_info"]["subject"] == "Application: Backend Engineer"
    assert outcome["email_info"]["from"] == "recruiter@example.com"
    assert [a["filename"] for a in outcome["attachments"]] == ["jane.txt", "photo.png", "blank.txt"]
    assert outcome["skipped"] == ["photo.png"]
    assert [c["name"] for c in outcome["candidates"]] == ["Jane Doe"]
    assert outcome["candidates"][0]["original_file_name"] == "jane.txt"
    assert [e["filename"] for e in outcome["errors"]] == ["blank.txt"]
    assert processor.store.count() == 1
