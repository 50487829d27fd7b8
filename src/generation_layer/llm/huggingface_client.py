"""
Hugging Face inference endpoint client (text-only).

POST {base_url}/models/{model} with payload:
{
    "inputs": "...",
    "parameters": {"max_new_tokens": 2048, "temperature": 0.2, "return_full_text": false}
}

Response: [{"generated_text": "..."}]

HTTP 503 with "is currently loading" means the model is warming up and is
treated like any other transient server fault. Images are not supported by
these endpoints and are dropped with a debug log.
"""

from typing import Any

import structlog

from generation_layer.llm.base_client import BaseLLMClient
from generation_layer.llm.exceptions import ProviderServerError
from generation_layer.models.llm_models import LLMGenerationRequest, LLMGenerationResponse


logger = structlog.get_logger(__name__)

# Inference endpoints reject max_new_tokens above this for most code models
MAX_NEW_TOKENS_LIMIT = 4096


class HuggingFaceClient(BaseLLMClient):
    """
    Text-generation inference client for hosted code models.
    """

    provider_name = "huggingface"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api-inference.huggingface.co",
        timeout: int = 120,
        **kwargs,
    ):
        super().__init__(api_key, base_url, timeout, **kwargs)

    async def _call(self, request: LLMGenerationRequest) -> Any:
        if request.images:
            logger.debug(
                "Dropping image attachments for text-only provider",
                provider=self.provider_name,
                images=len(request.images),
            )

        prompt = request.prompt
        if request.json_mode:
            prompt = f"{prompt}\n\nRespond with a single JSON object and nothing else."

        payload = {
            "inputs": prompt,
            "parameters": {
                "max_new_tokens": min(request.max_tokens, MAX_NEW_TOKENS_LIMIT),
                "temperature": max(request.temperature, 0.01),
                "return_full_text": False,
            },
        }
        return await self._post_json(
            f"/models/{request.model}",
            payload,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )

    def _parse_response(
        self, request: LLMGenerationRequest, data: Any, latency_ms: int
    ) -> LLMGenerationResponse:
        if isinstance(data, list) and data:
            first = data[0]
        elif isinstance(data, dict):
            first = data
        else:
            raise ProviderServerError(
                "Unexpected inference response shape",
                details={"provider": self.provider_name, "model": request.model},
            )

        content = first.get("generated_text") or first.get("text") or ""
        return LLMGenerationResponse(
            content=content,
            model_version=request.model,
            finish_reason=(first.get("details") or {}).get("finish_reason"),
            latency_ms=latency_ms,
        )
