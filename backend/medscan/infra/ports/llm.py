from __future__ import annotations

from abc import ABC, abstractmethod

from medscan.domain.models import AnalysisRequest, AnalysisResponse


class CompletionPort(ABC):
    supports_media: bool = False

    @abstractmethod
    async def complete(self, request: AnalysisRequest) -> AnalysisResponse:
        """Send one completion request and return the generated text."""
