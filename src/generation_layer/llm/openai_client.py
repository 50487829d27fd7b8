"""
OpenAI-compatible chat completions client.

POST {base_url}/chat/completions with payload:
{
    "model": "gpt-4o-mini",
    "messages": [{"role": "user", "content": [
        {"type": "text", "text": "..."},
        {"type": "image_url", "image_url": {"url": "data:image/png;base64,..."}}
    ]}],
    "temperature": 0.2,
    "max_tokens": 8192,
    "response_format": {"type": "json_object"}   # json_mode only
}

Works against any server exposing the same contract (OpenAI, vLLM, LM Studio).
"""

from typing import Any

import structlog

from generation_layer.llm.base_client import BaseLLMClient
from generation_layer.llm.exceptions import ProviderServerError
from generation_layer.models.llm_models import LLMGenerationRequest, LLMGenerationResponse


logger = structlog.get_logger(__name__)

SYSTEM_PROMPT = (
    "You are an expert software engineer who turns UI designs into "
    "production-ready application code."
)


class OpenAIClient(BaseLLMClient):
    """
    Chat completions client. Images are sent as data-URI image_url parts.
    """

    provider_name = "openai"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: int = 120,
        **kwargs,
    ):
        super().__init__(api_key, base_url, timeout, **kwargs)

    async def _call(self, request: LLMGenerationRequest) -> Any:
        if request.images:
            content: Any = [{"type": "text", "text": request.prompt}]
            content.extend(
                {"type": "image_url", "image_url": {"url": image.to_data_uri()}}
                for image in request.images
            )
        else:
            content = request.prompt

        payload: dict[str, Any] = {
            "model": request.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": content},
            ],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }
        if request.json_mode:
            payload["response_format"] = {"type": "json_object"}

        return await self._post_json(
            "/chat/completions",
            payload,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )

    def _parse_response(
        self, request: LLMGenerationRequest, data: Any, latency_ms: int
    ) -> LLMGenerationResponse:
        choices = data.get("choices") or []
        if not choices:
            raise ProviderServerError(
                "Chat completion returned no choices",
                details={"provider": self.provider_name, "model": request.model},
            )

        choice = choices[0]
        usage = data.get("usage") or {}
        return LLMGenerationResponse(
            content=(choice.get("message") or {}).get("content") or "",
            model_version=data.get("model", request.model),
            finish_reason=choice.get("finish_reason"),
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            latency_ms=latency_ms,
            raw_metadata={"id": data.get("id")},
        )
