"""Entry points for candidate extraction: rule-based and model-assisted."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import config
from nlp.llm import get_default_extractor
from nlp.merge import merge_records
from nlp.parser import extract_candidate_info

logger = logging.getLogger(__name__)


async def extract_candidate_info_with_model(
    text: str,
    extract_additional_fields: bool = False,
    extractor: Optional[Any] = None,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """Rule-based record merged with the model's record when the model succeeds.

    Any model failure (API error, malformed output, timeout) leaves the
    rule-based record as the result.
    """
    rule_record = extract_candidate_info(text, extract_additional_fields)
    extractor = extractor or get_default_extractor()
    limit = config.MODEL_TIMEOUT_SECONDS if timeout is None else timeout

    try:
        model_record = await asyncio.wait_for(extractor.extract(text, extract_additional_fields), timeout=limit)
    except asyncio.TimeoutError:
        logger.warning("Model extraction timed out after %.1fs; using rule-based record", limit)
        return rule_record
    except Exception as err:
        logger.warning("Model extraction failed (%s); using rule-based record", err)
        return rule_record

    logger.info("Merging model-assisted record for %s", model_record.get("name"))
    return merge_records(rule_record, model_record)


__all__ = ["extract_candidate_info", "extract_candidate_info_with_model"]
