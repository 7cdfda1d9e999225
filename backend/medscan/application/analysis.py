from __future__ import annotations

import base64
import logging

from medscan.application.prompts import build_text_prompt, build_vision_prompt
from medscan.application.retry import RetryPolicy
from medscan.application.sanitizer import parse_medicine_info
from medscan.domain.errors import AnalysisError, CompletionRequestError
from medscan.domain.models import (
    AnalysisFailure,
    AnalysisMode,
    AnalysisRequest,
    ParsedMedicineInfo,
    UploadedImage,
)
from medscan.infra.ports.llm import CompletionPort

logger = logging.getLogger(__name__)


def to_data_url(image: UploadedImage) -> str:
    encoded = base64.b64encode(image.path.read_bytes()).decode("ascii")
    return f"data:{image.mime_type};base64,{encoded}"


class AnalysisClient:
    """Identifies a medicine from OCR text (TextOnly) or from the photo itself (VisionCapable).

    Both modes produce the same completion contract, so sanitizing and
    assembly do not depend on the mode.
    """

    def __init__(
        self,
        *,
        completion: CompletionPort,
        model_id: str,
        mode: AnalysisMode = AnalysisMode.TEXT,
        retry: RetryPolicy | None = None,
    ):
        self.completion = completion
        self.model_id = model_id
        self.mode = mode
        self.retry = retry or RetryPolicy(max_attempts=2, delay_seconds=1.0)

    def _can_use_media(self) -> bool:
        return self.mode == AnalysisMode.VISION and getattr(self.completion, "supports_media", False)

    def build_request(self, image: UploadedImage, extracted_text: str) -> AnalysisRequest:
        if self._can_use_media():
            return AnalysisRequest(
                prompt_text=build_vision_prompt(extracted_text),
                model_id=self.model_id,
                embedded_image=to_data_url(image),
            )
        return AnalysisRequest(prompt_text=build_text_prompt(extracted_text), model_id=self.model_id)

    async def analyze(self, image: UploadedImage, extracted_text: str) -> ParsedMedicineInfo:
        if self.mode == AnalysisMode.VISION and not self._can_use_media():
            logger.warning("Completion backend has no media support; using the text prompt")

        async def attempt():
            return await self.completion.complete(self.build_request(image, extracted_text))

        try:
            response = await self.retry.run(attempt, retry_on=(CompletionRequestError,), label="Completion request")
        except CompletionRequestError as exc:
            raise AnalysisError(
                f"Completion request failed after {self.retry.max_attempts} attempt(s): {exc}",
                cause=AnalysisFailure.REQUEST_FAILED,
            ) from exc

        info = parse_medicine_info(response.raw_completion_text)
        logger.info("Analysis identified medicine %r", info.name)
        return info
