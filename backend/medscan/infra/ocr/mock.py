from __future__ import annotations

from medscan.domain.models import ExtractionResult, UploadedImage
from medscan.infra.ports.ocr import OCRPort


class MockOCR(OCRPort):
    provider_name = "mock"

    def __init__(self, text: str = "[mock] OCR text"):
        self.text = text

    async def extract(self, image: UploadedImage) -> ExtractionResult:
        return ExtractionResult(raw_text=self.text, succeeded=bool(self.text.strip()))
