"""
Unit tests for provider clients.

Uses httpx.MockTransport so payload shape, response parsing and HTTP error
classification are checked without network access.
"""

import json

import httpx
import pytest

from generation_layer.llm.base_client import classify_status
from generation_layer.llm.exceptions import (
    PermanentProviderError,
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderInvalidRequestError,
    ProviderRateLimitError,
    ProviderServerError,
    ProviderTimeoutError,
    TransientProviderError,
)
from generation_layer.llm.gemini_client import GeminiClient
from generation_layer.llm.huggingface_client import HuggingFaceClient
from generation_layer.llm.openai_client import OpenAIClient
from generation_layer.models.llm_models import LLMGenerationRequest


def transport_returning(status_code: int, body, captured: list | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        if isinstance(body, (dict, list)):
            return httpx.Response(status_code, json=body)
        return httpx.Response(status_code, text=body)

    return httpx.MockTransport(handler)


def gemini_body(text: str) -> dict:
    return {
        "candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}],
        "usageMetadata": {"promptTokenCount": 12, "candidatesTokenCount": 34},
        "modelVersion": "gemini-1.5-flash-002",
    }


class TestClassifyStatus:

    @pytest.mark.parametrize("status_code,expected", [
        (429, ProviderRateLimitError),
        (500, ProviderServerError),
        (503, ProviderServerError),
        (401, ProviderAuthenticationError),
        (403, ProviderAuthenticationError),
        (400, ProviderInvalidRequestError),
        (404, ProviderInvalidRequestError),
    ])
    def test_status_mapping(self, status_code, expected):
        error = classify_status(status_code, "gemini", "body")

        assert type(error) is expected
        assert error.details["status"] == status_code

    def test_families(self):
        assert isinstance(classify_status(429, "p", ""), TransientProviderError)
        assert isinstance(classify_status(502, "p", ""), TransientProviderError)
        assert isinstance(classify_status(401, "p", ""), PermanentProviderError)
        assert isinstance(classify_status(422, "p", ""), PermanentProviderError)

    def test_body_truncated_in_details(self):
        error = classify_status(500, "gemini", "x" * 2000)

        assert len(error.details["error"]) == 500


class TestGeminiClient:

    @pytest.mark.asyncio
    async def test_payload_and_parsing(self, png_image):
        captured: list[httpx.Request] = []
        client = GeminiClient(
            api_key="secret",
            base_url="https://gemini.test/v1beta",
            transport=transport_returning(200, gemini_body('{"ok": true}'), captured),
        )
        request = LLMGenerationRequest(
            prompt="Build it", model="gemini-1.5-flash", images=(png_image,), json_mode=True
        )

        response = await client.generate(request)

        assert response.content == '{"ok": true}'
        assert response.model_version == "gemini-1.5-flash-002"
        assert response.usage_tokens == 46

        sent = captured[0]
        assert sent.url.path == "/v1beta/models/gemini-1.5-flash:generateContent"
        assert sent.headers["x-goog-api-key"] == "secret"
        payload = json.loads(sent.content)
        parts = payload["contents"][0]["parts"]
        assert parts[0] == {"text": "Build it"}
        assert parts[1]["inline_data"]["mime_type"] == "image/png"
        assert parts[1]["inline_data"]["data"] == png_image.to_base64()
        assert payload["generationConfig"]["responseMimeType"] == "application/json"
        await client.close()

    @pytest.mark.asyncio
    async def test_blocked_prompt_is_permanent(self):
        client = GeminiClient(
            api_key="k",
            transport=transport_returning(200, {"promptFeedback": {"blockReason": "SAFETY"}}),
        )

        with pytest.raises(ProviderInvalidRequestError, match="SAFETY"):
            await client.generate(LLMGenerationRequest(prompt="p", model="m"))

    @pytest.mark.asyncio
    async def test_no_candidates_is_transient(self):
        client = GeminiClient(api_key="k", transport=transport_returning(200, {"candidates": []}))

        with pytest.raises(ProviderServerError):
            await client.generate(LLMGenerationRequest(prompt="p", model="m"))

    @pytest.mark.asyncio
    async def test_empty_text_is_transient(self):
        client = GeminiClient(api_key="k", transport=transport_returning(200, gemini_body("   ")))

        with pytest.raises(ProviderServerError, match="Empty response"):
            await client.generate(LLMGenerationRequest(prompt="p", model="m"))

    @pytest.mark.asyncio
    async def test_null_text_is_transient(self):
        body = {"candidates": [{"content": {"parts": [{"text": None}]}}]}
        client = GeminiClient(api_key="k", transport=transport_returning(200, body))

        with pytest.raises(ProviderServerError, match="Empty response"):
            await client.generate(LLMGenerationRequest(prompt="p", model="m"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"candidates": ["not-an-object"]},
        {"candidates": [{"content": {"parts": "text"}}]},
        ["unexpected", "list"],
    ])
    async def test_malformed_body_is_server_error(self, body):
        client = GeminiClient(api_key="k", transport=transport_returning(200, body))

        with pytest.raises(ProviderServerError, match="Unexpected response shape") as exc_info:
            await client.generate(LLMGenerationRequest(prompt="p", model="m"))

        assert exc_info.value.details["provider"] == "gemini"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code,expected", [
        (429, ProviderRateLimitError),
        (500, ProviderServerError),
        (401, ProviderAuthenticationError),
        (400, ProviderInvalidRequestError),
    ])
    async def test_http_errors_classified(self, status_code, expected):
        client = GeminiClient(api_key="k", transport=transport_returning(status_code, {"error": "x"}))

        with pytest.raises(expected):
            await client.generate(LLMGenerationRequest(prompt="p", model="m"))

    @pytest.mark.asyncio
    async def test_undecodable_body_is_server_error(self):
        client = GeminiClient(api_key="k", transport=transport_returning(200, "<html>oops</html>"))

        with pytest.raises(ProviderServerError, match="Invalid JSON"):
            await client.generate(LLMGenerationRequest(prompt="p", model="m"))


class TestTransportFailures:

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = OpenAIClient(api_key="k", transport=httpx.MockTransport(handler))

        with pytest.raises(ProviderTimeoutError):
            await client.generate(LLMGenerationRequest(prompt="p", model="m"))

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = OpenAIClient(api_key="k", transport=httpx.MockTransport(handler))

        with pytest.raises(ProviderConnectionError) as exc_info:
            await client.generate(LLMGenerationRequest(prompt="p", model="m"))
        assert not isinstance(exc_info.value, ProviderTimeoutError)


class TestOpenAIClient:

    @pytest.mark.asyncio
    async def test_payload_and_parsing(self, png_image):
        captured: list[httpx.Request] = []
        body = {
            "id": "chatcmpl-1",
            "model": "gpt-4o-mini-2024",
            "choices": [{"message": {"content": "answer"}, "finish_reason": "stop"}],
            "usage": {"prompt_tokens": 5, "completion_tokens": 7},
        }
        client = OpenAIClient(
            api_key="sk-test",
            base_url="https://openai.test/v1",
            transport=transport_returning(200, body, captured),
        )

        response = await client.generate(LLMGenerationRequest(
            prompt="Build it", model="gpt-4o-mini", images=(png_image,), json_mode=True
        ))

        assert response.content == "answer"
        assert response.model_version == "gpt-4o-mini-2024"
        assert response.finish_reason == "stop"

        sent = captured[0]
        assert sent.url.path == "/v1/chat/completions"
        assert sent.headers["authorization"] == "Bearer sk-test"
        payload = json.loads(sent.content)
        assert payload["model"] == "gpt-4o-mini"
        assert payload["messages"][0]["role"] == "system"
        user_content = payload["messages"][1]["content"]
        assert user_content[0] == {"type": "text", "text": "Build it"}
        assert user_content[1]["image_url"]["url"] == png_image.to_data_uri()
        assert payload["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_text_only_uses_plain_content(self):
        captured: list[httpx.Request] = []
        body = {"choices": [{"message": {"content": "x"}}]}
        client = OpenAIClient(api_key="k", transport=transport_returning(200, body, captured))

        await client.generate(LLMGenerationRequest(prompt="Just text", model="m"))

        payload = json.loads(captured[0].content)
        assert payload["messages"][1]["content"] == "Just text"
        assert "response_format" not in payload


class TestHuggingFaceClient:

    @pytest.mark.asyncio
    async def test_payload_and_parsing(self, png_image):
        captured: list[httpx.Request] = []
        client = HuggingFaceClient(
            api_key="hf_token",
            base_url="https://hf.test",
            transport=transport_returning(200, [{"generated_text": "code"}], captured),
        )

        response = await client.generate(LLMGenerationRequest(
            prompt="Build it",
            model="bigcode/starcoder2-15b",
            images=(png_image,),
            json_mode=True,
            max_tokens=8192,
        ))

        assert response.content == "code"
        sent = captured[0]
        assert sent.url.path == "/models/bigcode/starcoder2-15b"
        payload = json.loads(sent.content)
        assert payload["inputs"].startswith("Build it")
        assert "JSON object" in payload["inputs"]
        assert payload["parameters"]["max_new_tokens"] <= 4096
        assert payload["parameters"]["return_full_text"] is False

    @pytest.mark.asyncio
    async def test_unexpected_shape_is_server_error(self):
        client = HuggingFaceClient(api_key="k", transport=transport_returning(200, []))

        with pytest.raises(ProviderServerError):
            await client.generate(LLMGenerationRequest(prompt="p", model="m"))
