from email.message import EmailMessage

import fitz
import pytest
from docx import Document

from data_loader import (
    ExtractionInputError,
    is_supported,
    load_eml_attachments,
    load_resume,
    load_resume_bytes,
)


def test_load_txt_resume(tmp_path):
    path = tmp_path / "resume.txt"
    path.write_text("Jane Doe\nPython developer\n", encoding="utf-8")
    assert load_resume(path) == "Jane Doe\nPython developer"


def test_load_docx_resume_includes_tables(tmp_path):
    document = Document()
    document.add_paragraph("Jane Doe")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Skills"
    table.rows[0].cells[1].text = "Python"
    path = tmp_path / "resume.docx"
    document.save(str(path))

    text = load_resume(path)
    assert "Jane Doe" in text
    assert "Skills | Python" in text


def test_load_pdf_resume():
    pdf = fitz.open()
    page = pdf.new_page()
    page.insert_text((72, 72), "Jane Doe")
    data = pdf.tobytes()
    pdf.close()

    assert "Jane Doe" in load_resume_bytes(data, "resume.PDF")


def test_unsupported_empty_and_broken_inputs():
    with pytest.raises(ExtractionInputError, match="Unsupported file type"):
        load_resume_bytes(b"hello", "resume.rtf")
    with pytest.raises(ExtractionInputError, match="No text content"):
        load_resume_bytes(b"  \n ", "resume.txt")
    with pytest.raises(ExtractionInputError, match="PDF extraction failed"):
        load_resume_bytes(b"not a pdf", "resume.pdf")


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_resume(tmp_path / "nope.txt")


def test_is_supported():
    assert is_supported("Resume.DOCX")
    assert is_supported("cv.txt")
    assert not is_supported("photo.png")
    assert not is_supported("README")


def test_load_eml_attachments():
    message = EmailMessage()
    message["Subject"] = "Resumes"
    message["From"] = "recruiter@example.com"
    message["To"] = "hiring@example.com"
    message["Date"] = "Mon, 06 Jan 2025 10:00:00 +0000"
    message.set_content("See attached.")
    message.add_attachment(b"Jane Doe", maintype="text", subtype="plain", filename="jane.txt")
    message.add_attachment(b"%PDF-1.4", maintype="application", subtype="pdf", filename="john.pdf")

    parsed = load_eml_attachments(message.as_bytes())

    assert parsed.subject == "Resumes"
    assert parsed.sender == "recruiter@example.com"
    assert parsed.recipients == "hiring@example.com"
    assert parsed.date == "Mon, 06 Jan 2025 10:00:00 +0000"
    assert parsed.attachments == [("jane.txt", b"Jane Doe"), ("john.pdf", b"%PDF-1.4")]


def test_load_eml_without_attachments():
    message = EmailMessage()
    message["Subject"] = "Hello"
    message.set_content("No files here.")

    parsed = load_eml_attachments(message.as_bytes())

    assert parsed.attachments == []
    assert parsed.sender is None
