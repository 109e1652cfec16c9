"""Document-to-candidate processing: single files, batches, and EML messages.

Each processed document yields a candidate record enriched with provenance
(source path, original name, size, timestamp, raw text and extraction
method) that is written to the injected :class:`CandidateStore`.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import config
from data_loader import (
    ExtractionInputError,
    is_supported,
    load_eml_attachments,
    load_resume,
    load_resume_bytes,
)
from nlp.pipeline import extract_candidate_info, extract_candidate_info_with_model
from services.candidate_store import CandidateStore

logger = logging.getLogger(__name__)
if not logging.getLogger().handlers:
    logging.basicConfig(level=logging.INFO)

METHOD_RULE_BASED = "rule_based"
METHOD_HYBRID = "hybrid"


def _chunks(items: List[Any], size: int) -> Iterable[List[Any]]:
    for start in range(0, len(items), size):
        yield items[start: start + size]


class ResumeProcessor:
    """Turns resume documents into stored candidate records."""

    def __init__(
        self,
        store: CandidateStore,
        extractor: Optional[Any] = None,
        use_model: bool = False,
        extract_additional_fields: bool = False,
        upload_dir: Optional[Union[str, Path]] = None,
        batch_size: Optional[int] = None,
        batch_pause: Optional[float] = None,
    ) -> None:
        self.store = store
        self.extractor = extractor
        self.use_model = use_model
        self.extract_additional_fields = extract_additional_fields
        self.upload_dir = Path(upload_dir) if upload_dir is not None else config.UPLOAD_DIR
        self.batch_size = batch_size or config.BATCH_SIZE
        self.batch_pause = config.BATCH_PAUSE_SECONDS if batch_pause is None else batch_pause

    # -- helpers --------------------------------------------------------
    async def _extract(self, text: str) -> Tuple[Dict[str, Any], str]:
        if self.use_model:
            record = await extract_candidate_info_with_model(
                text, self.extract_additional_fields, extractor=self.extractor
            )
            return record, METHOD_HYBRID
        return extract_candidate_info(text, self.extract_additional_fields), METHOD_RULE_BASED

    def _save_upload(self, data: bytes, filename: str) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        target = self.upload_dir / f"{uuid.uuid4().hex}_{Path(filename).name}"
        target.write_bytes(data)
        return target

    async def _finish(self, text: str, file_path: Path, original_name: str, size: int) -> Dict[str, Any]:
        record, method = await self._extract(text)
        record.update(
            {
                "file_path": str(file_path),
                "original_file_name": original_name,
                "processed_at": datetime.now(timezone.utc).isoformat(),
                "file_size": size,
                "raw_text": text,
                "extraction_method": method,
            }
        )
        self.store.create(record)
        logger.info("Stored candidate %s (%s) from %s", record["name"], method, original_name)
        return record

    # -- single documents -----------------------------------------------
    async def process_file(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """Extract from a file on disk; the record points at a copy under ``upload_dir``."""
        path = Path(file_path)
        text = load_resume(path)
        data = path.read_bytes()
        saved = self._save_upload(data, path.name)
        return await self._finish(text, saved, path.name, len(data))

    async def process_bytes(self, data: bytes, filename: str) -> Dict[str, Any]:
        """Extract from uploaded bytes; the upload is kept under ``upload_dir``."""
        text = load_resume_bytes(data, filename)
        saved = self._save_upload(data, filename)
        return await self._finish(text, saved, filename, len(data))

    # -- batches --------------------------------------------------------
    async def _process_one(self, item: Union[str, Path, Tuple[str, bytes]]) -> Dict[str, Any]:
        if isinstance(item, tuple):
            filename, data = item
            runner = self.process_bytes(data, filename)
        else:
            filename = Path(item).name
            runner = self.process_file(item)
        try:
            candidate = await runner
        except (ExtractionInputError, OSError) as err:
            logger.warning("Failed to process %s: %s", filename, err)
            return {"file": filename, "status": "failed", "error": str(err)}
        return {"file": filename, "status": "success", "candidate": candidate}

    async def process_batch(self, items: Iterable[Union[str, Path, Tuple[str, bytes]]]) -> List[Dict[str, Any]]:
        """Process paths or ``(filename, bytes)`` pairs in bounded concurrent chunks.

        Results come back in input order; one failing document never aborts
        the others.
        """
        items = list(items)
        results: List[Dict[str, Any]] = []
        chunks = list(_chunks(items, self.batch_size))
        for index, chunk in enumerate(chunks):
            logger.info("Processing batch %d/%d (%d documents)", index + 1, len(chunks), len(chunk))
            results.extend(await asyncio.gather(*(self._process_one(item) for item in chunk)))
            if index < len(chunks) - 1 and self.batch_pause > 0:
                await asyncio.sleep(self.batch_pause)
        return results

    # -- EML ------------------------------------------------------------
    async def process_eml(self, data: bytes) -> Dict[str, Any]:
        """Extract candidates from the resume attachments of an EML message."""
        message = load_eml_attachments(data)
        email_info = {
            "subject": message.subject,
            "from": message.sender,
            "to": message.recipients,
            "date": message.date,
        }

        attachments: List[Dict[str, Any]] = []
        supported: List[Tuple[str, bytes]] = []
        skipped: List[str] = []
        for filename, payload in message.attachments:
            attachments.append({"filename": filename, "size": len(payload)})
            if is_supported(filename):
                supported.append((filename, payload))
            else:
                skipped.append(filename)

        candidates: List[Dict[str, Any]] = []
        errors: List[Dict[str, str]] = []
        for result in await self.process_batch(supported):
            if result["status"] == "success":
                candidates.append(result["candidate"])
            else:
                errors.append({"filename": result["file"], "error": result["error"]})

        logger.info(
            "EML %r: %d attachments, %d candidates, %d errors",
            message.subject, len(attachments), len(candidates), len(errors),
        )
        return {
            "email_info": email_info,
            "attachments": attachments,
            "candidates": candidates,
            "skipped": skipped,
            "errors": errors,
        }


__all__ = ["ResumeProcessor", "METHOD_HYBRID", "METHOD_RULE_BASED"]
