from __future__ import annotations

from abc import ABC, abstractmethod

from medscan.domain.models import ExtractionResult, UploadedImage


class OCRPort(ABC):
    @abstractmethod
    async def extract(self, image: UploadedImage) -> ExtractionResult:
        """Run one OCR attempt on a stored image."""
