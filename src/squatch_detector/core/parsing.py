"""Parsing of the vision classifier's free-text reply."""

from __future__ import annotations

import json
import logging
import re
from typing import Optional

from .models import AnalysisRecord

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\n?|\n?```", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove ```json ... ``` markup the model sometimes wraps around its answer."""
    return _CODE_FENCE.sub("", text).strip()


def parse_analysis_response(content: Optional[str]) -> AnalysisRecord:
    """Parse the classifier reply into a record.

    Unparseable replies become the empty record, which scores as
    "no signal detected".
    """
    cleaned = strip_code_fences(content or "") or "{}"
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.warning("Could not parse vision response as JSON (%s); using empty analysis", exc)
        return AnalysisRecord()
    return AnalysisRecord.from_payload(payload)
