from __future__ import annotations

import logging
from typing import Any

import httpx

from medscan.domain.errors import OCRRequestError
from medscan.domain.models import ExtractionResult, UploadedImage
from medscan.infra.ports.ocr import OCRPort

logger = logging.getLogger(__name__)

OCR_SPACE_URL = "https://api.ocr.space/parse/image"


def _join_error_message(value: Any) -> str | None:
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, list):
        parts = [str(item).strip() for item in value if str(item).strip()]
        return ", ".join(parts) or None
    return None


def parse_ocr_space_payload(payload: Any) -> ExtractionResult:
    """Normalize an OCR.space JSON body into an ExtractionResult."""
    if not isinstance(payload, dict):
        raise OCRRequestError("OCR.space response is not a JSON object")

    text = ""
    results = payload.get("ParsedResults")
    if isinstance(results, list) and results and isinstance(results[0], dict):
        parsed = results[0].get("ParsedText")
        if isinstance(parsed, str):
            text = parsed

    errored = bool(payload.get("IsErroredOnProcessing"))
    return ExtractionResult(
        raw_text=text,
        succeeded=bool(text.strip()) and not errored,
        provider_error_message=_join_error_message(payload.get("ErrorMessage")),
    )


class OCRSpaceOCR(OCRPort):
    provider_name = "ocrspace"

    def __init__(
        self,
        *,
        api_key: str,
        language: str = "eng",
        timeout_seconds: int = 60,
        endpoint: str = OCR_SPACE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.language = language
        self.timeout_seconds = max(3, int(timeout_seconds))
        self.endpoint = endpoint
        self._transport = transport

    async def extract(self, image: UploadedImage) -> ExtractionResult:
        data = {"language": self.language, "isOverlayRequired": "false"}
        headers = {"apikey": self.api_key}

        logger.info("Sending %s (%d bytes) to OCR.space", image.path.name, image.size_bytes)
        try:
            files = {"file": (image.path.name, image.path.read_bytes(), image.mime_type)}
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.post(self.endpoint, data=data, files=files, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise OCRRequestError(
                f"OCR.space API error ({exc.response.status_code}): {exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise OCRRequestError(f"OCR.space connection error: {exc}") from exc
        except ValueError as exc:
            raise OCRRequestError("OCR.space response is not valid JSON") from exc

        return parse_ocr_space_payload(payload)
