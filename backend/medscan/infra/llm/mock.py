from __future__ import annotations

import json

from medscan.domain.models import AnalysisRequest, AnalysisResponse
from medscan.infra.ports.llm import CompletionPort


class MockLLM(CompletionPort):
    provider_name = "mock"
    model_name = "mock-llm"
    supports_media = True

    async def complete(self, request: AnalysisRequest) -> AnalysisResponse:
        payload = {
            "name": "Mock Medicine",
            "usage": f"[mock] analysis by {request.model_id or self.model_name}",
            "warnings": "[mock] image attached" if request.embedded_image else "[mock] text only",
        }
        # Real models often wrap JSON in a fence.
        return AnalysisResponse(raw_completion_text=f"```json\n{json.dumps(payload)}\n```")
