"""
Gemini client (generative-model style API).

POST {base_url}/models/{model}:generateContent with payload:
{
    "contents": [{"role": "user", "parts": [
        {"text": "..."},
        {"inline_data": {"mime_type": "image/png", "data": "<base64>"}}
    ]}],
    "generationConfig": {
        "temperature": 0.2,
        "maxOutputTokens": 8192,
        "responseMimeType": "application/json"   # json_mode only
    }
}

Response:
{
    "candidates": [{"content": {"parts": [{"text": "..."}]}, "finishReason": "STOP"}],
    "usageMetadata": {"promptTokenCount": 50, "candidatesTokenCount": 150},
    "modelVersion": "gemini-1.5-flash-002"
}
"""

from typing import Any

import structlog

from generation_layer.llm.base_client import BaseLLMClient
from generation_layer.llm.exceptions import ProviderInvalidRequestError, ProviderServerError
from generation_layer.models.llm_models import LLMGenerationRequest, LLMGenerationResponse


logger = structlog.get_logger(__name__)


class GeminiClient(BaseLLMClient):
    """
    Gemini generateContent client. Supports image parts and JSON mode.
    """

    provider_name = "gemini"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: int = 120,
        **kwargs,
    ):
        super().__init__(api_key, base_url, timeout, **kwargs)

    async def _call(self, request: LLMGenerationRequest) -> Any:
        parts: list[dict[str, Any]] = [{"text": request.prompt}]
        for image in request.images:
            parts.append({"inline_data": {"mime_type": image.mime_type, "data": image.to_base64()}})

        generation_config: dict[str, Any] = {
            "temperature": request.temperature,
            "maxOutputTokens": request.max_tokens,
        }
        if request.json_mode:
            generation_config["responseMimeType"] = "application/json"

        payload = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": generation_config,
        }
        return await self._post_json(
            f"/models/{request.model}:generateContent",
            payload,
            headers={"x-goog-api-key": self._api_key},
        )

    def _parse_response(
        self, request: LLMGenerationRequest, data: Any, latency_ms: int
    ) -> LLMGenerationResponse:
        block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise ProviderInvalidRequestError(
                f"Gemini blocked the prompt: {block_reason}",
                details={"provider": self.provider_name, "block_reason": block_reason},
            )

        candidates = data.get("candidates") or []
        if not candidates:
            raise ProviderServerError(
                "Gemini returned no candidates",
                details={"provider": self.provider_name, "model": request.model},
            )

        candidate = candidates[0]
        parts = (candidate.get("content") or {}).get("parts") or []
        content = "".join(part.get("text") or "" for part in parts)
        usage = data.get("usageMetadata") or {}

        return LLMGenerationResponse(
            content=content,
            model_version=data.get("modelVersion", request.model),
            finish_reason=candidate.get("finishReason"),
            prompt_tokens=usage.get("promptTokenCount"),
            completion_tokens=usage.get("candidatesTokenCount"),
            latency_ms=latency_ms,
            raw_metadata={"safety_ratings": candidate.get("safetyRatings")},
        )
