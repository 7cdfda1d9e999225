"""Normalization and parsing of free-form completion text.

Models are asked for raw JSON but frequently wrap it in a markdown fence.
``strip_fences`` only inspects the ends of the text; anything else is left
for the JSON parser to accept or reject.
"""

from __future__ import annotations

import json
from typing import Any

from medscan.domain.errors import AnalysisError
from medscan.domain.models import AnalysisFailure, ParsedMedicineInfo

_FENCE = "```"
_JSON_FENCE = "```json"


def strip_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith(_JSON_FENCE):
        cleaned = cleaned[len(_JSON_FENCE):]
    if cleaned.startswith(_FENCE):
        cleaned = cleaned[len(_FENCE):]
    if cleaned.endswith(_FENCE):
        cleaned = cleaned[: -len(_FENCE)]
    return cleaned.strip()


def _coerce_field(value: Any) -> str | None:
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, list):
        parts = [item.strip() for item in value if isinstance(item, str) and item.strip()]
        return "; ".join(parts) or None
    return None


def parse_medicine_info(text: str) -> ParsedMedicineInfo:
    cleaned = strip_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise AnalysisError(
            f"Completion text is not valid JSON: {exc.msg}",
            cause=AnalysisFailure.PARSE_FAILED,
        ) from exc

    if not isinstance(data, dict):
        raise AnalysisError(
            f"Completion JSON is a {type(data).__name__}, expected an object",
            cause=AnalysisFailure.PARSE_FAILED,
        )

    return ParsedMedicineInfo(
        name=_coerce_field(data.get("name")),
        usage=_coerce_field(data.get("usage")),
        warnings=_coerce_field(data.get("warnings")),
    )
