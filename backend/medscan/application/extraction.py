from __future__ import annotations

import logging

from medscan.application.retry import RetryPolicy
from medscan.domain.errors import ExtractionError, OCRRequestError
from medscan.domain.models import UploadedImage
from medscan.infra.ports.ocr import OCRPort

logger = logging.getLogger(__name__)

NO_TEXT_MESSAGE = "Could not read any text from the image."


class TextExtractionClient:
    def __init__(self, *, ocr: OCRPort, retry: RetryPolicy | None = None):
        self.ocr = ocr
        self.retry = retry or RetryPolicy(max_attempts=1)

    async def extract_text(self, image: UploadedImage) -> str:
        result = await self.retry.run(
            lambda: self.ocr.extract(image),
            retry_on=(OCRRequestError,),
            label="OCR request",
        )
        if not result.succeeded or not result.raw_text.strip():
            logger.warning("OCR produced no usable text: %s", result.provider_error_message or "empty result")
            raise ExtractionError(result.provider_error_message or NO_TEXT_MESSAGE)

        logger.debug("OCR extracted text:\n%s", result.raw_text)
        return result.raw_text
