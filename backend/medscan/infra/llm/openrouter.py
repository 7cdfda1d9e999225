from __future__ import annotations

import logging
from typing import Any

import httpx

from medscan.domain.errors import CompletionRequestError
from medscan.domain.models import AnalysisRequest, AnalysisResponse
from medscan.infra.ports.llm import CompletionPort

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"


def build_message_content(request: AnalysisRequest) -> str | list[dict[str, Any]]:
    if not request.embedded_image:
        return request.prompt_text
    return [
        {"type": "text", "text": request.prompt_text},
        {"type": "image_url", "image_url": {"url": request.embedded_image}},
    ]


def _completion_text(payload: Any) -> str:
    if not isinstance(payload, dict):
        raise CompletionRequestError("Completion response is not a JSON object")

    choices = payload.get("choices") or []
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        error = payload.get("error")
        detail = error.get("message") if isinstance(error, dict) else None
        raise CompletionRequestError(f"Completion response has no choices{f': {detail}' if detail else ''}")

    message = choices[0].get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str):
        raise CompletionRequestError("Completion choice does not contain text content")
    return content.strip()


class OpenRouterLLM(CompletionPort):
    provider_name = "openrouter"
    supports_media = True

    def __init__(
        self,
        *,
        api_key: str,
        max_tokens: int = 300,
        timeout_seconds: int = 60,
        app_url: str = "http://localhost:3000",
        app_title: str = "Medicine Search App",
        endpoint: str = OPENROUTER_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.max_tokens = max(1, int(max_tokens))
        self.timeout_seconds = max(3, int(timeout_seconds))
        self.app_url = app_url
        self.app_title = app_title
        self.endpoint = endpoint
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": self.app_url,
            "X-Title": self.app_title,
            "Content-Type": "application/json",
        }

    async def complete(self, request: AnalysisRequest) -> AnalysisResponse:
        body = {
            "model": request.model_id,
            "messages": [{"role": "user", "content": build_message_content(request)}],
            "max_tokens": self.max_tokens,
        }
        logger.info("Requesting completion (model=%s, image=%s)", request.model_id, bool(request.embedded_image))

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.post(self.endpoint, json=body, headers=self._headers())
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise CompletionRequestError(
                f"OpenRouter API error ({exc.response.status_code}): {exc.response.text[:300]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise CompletionRequestError(f"OpenRouter connection error: {exc}") from exc
        except ValueError as exc:
            raise CompletionRequestError("OpenRouter response is not valid JSON") from exc

        return AnalysisResponse(raw_completion_text=_completion_text(payload))
