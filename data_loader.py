# data_loader.py

import io
from dataclasses import dataclass, field
from email import policy
from email.parser import BytesParser
from pathlib import Path
from typing import List, Optional, Tuple, Union

import fitz  # PyMuPDF
from docx import Document

SUPPORTED_EXTENSIONS = (".pdf", ".docx", ".txt")


class ExtractionInputError(Exception):
    """Text could not be extracted from a document, or it had no text at all."""


def _read_pdf(data: bytes) -> str:
    text_parts = []
    with fitz.open(stream=data, filetype="pdf") as pdf:
        for page in pdf:
            text_parts.append(page.get_text("text"))
    return "\n".join(text_parts)


def _read_docx(data: bytes) -> str:
    doc = Document(io.BytesIO(data))
    parts = [p.text for p in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            parts.append(" | ".join(cell.text for cell in row.cells))
    return "\n".join(parts)


def _read_txt(data: bytes) -> str:
    return data.decode("utf-8", errors="ignore")


_READERS = {
    ".pdf": _read_pdf,
    ".docx": _read_docx,
    ".txt": _read_txt,
}


def is_supported(filename: str) -> bool:
    return Path(filename).suffix.lower() in SUPPORTED_EXTENSIONS


def load_resume_bytes(data: bytes, filename: str) -> str:
    """
    Return raw text from the bytes of a resume file named ``filename``.
    """
    ext = Path(filename).suffix.lower()
    reader = _READERS.get(ext)
    if reader is None:
        raise ExtractionInputError(f"Unsupported file type {ext or '(none)'}. Use PDF, DOCX, or TXT.")
    try:
        text = reader(data)
    except Exception as err:
        raise ExtractionInputError(f"{ext[1:].upper()} extraction failed: {err}") from err
    text = text.strip()
    if not text:
        raise ExtractionInputError("No text content found in the resume")
    return text


def load_resume(file_path: Union[str, Path]) -> str:
    """
    Load and return raw text from a resume file (.pdf, .docx, .txt).
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"No such file: {path}")
    return load_resume_bytes(path.read_bytes(), path.name)


# ---- EML attachments ----

@dataclass
class EmlMessage:
    subject: Optional[str] = None
    sender: Optional[str] = None
    recipients: Optional[str] = None
    date: Optional[str] = None
    attachments: List[Tuple[str, bytes]] = field(default_factory=list)


def _header(message, key: str) -> Optional[str]:
    value = message.get(key)
    return str(value) if value is not None else None


def load_eml_attachments(data: bytes) -> EmlMessage:
    """Parse an EML byte stream into its headers and (filename, payload) attachments."""
    message = BytesParser(policy=policy.default).parsebytes(data)
    result = EmlMessage(
        subject=_header(message, "subject"),
        sender=_header(message, "from"),
        recipients=_header(message, "to"),
        date=_header(message, "date"),
    )
    for index, part in enumerate(message.iter_attachments()):
        payload = part.get_payload(decode=True)
        if payload is None:
            continue
        filename = part.get_filename() or f"attachment_{index}"
        result.attachments.append((filename, payload))
    return result
