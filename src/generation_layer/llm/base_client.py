"""
Abstract base client for LLM providers.

Defines the interface that all provider implementations (Gemini,
OpenAI-compatible, Hugging Face) must adhere to, plus the shared HTTP plumbing
that maps transport failures and status codes onto the provider error
taxonomy. This abstraction allows swapping providers without changing the
invoker, the recovery loop or the pipeline.
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx
import structlog

from generation_layer.llm.exceptions import (
    LLMClientError,
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderInvalidRequestError,
    ProviderRateLimitError,
    ProviderServerError,
    ProviderTimeoutError,
)
from generation_layer.models.llm_models import LLMGenerationRequest, LLMGenerationResponse
from generation_layer.monitoring.metrics import llm_latency_seconds, llm_tokens_total


logger = structlog.get_logger(__name__)


def classify_status(status_code: int, provider: str, body: str) -> LLMClientError:
    """
    Map an HTTP error status onto the provider error taxonomy.

    Args:
        status_code: HTTP status of the failed response
        provider: Provider name (for messages and details)
        body: Response body, truncated into details for debugging

    Returns:
        Exception instance to raise (not raised here)
    """
    details = {"provider": provider, "status": status_code, "error": body[:500]}
    if status_code == 429:
        return ProviderRateLimitError(f"{provider} rate limit exceeded", details=details)
    if status_code >= 500:
        return ProviderServerError(f"{provider} server error: {status_code}", details=details)
    if status_code in (401, 403):
        return ProviderAuthenticationError(
            f"{provider} rejected the credential: {status_code}", details=details
        )
    return ProviderInvalidRequestError(f"{provider} client error: {status_code}", details=details)


class BaseLLMClient(ABC):
    """
    Abstract base class for LLM provider clients.

    One instance is bound to one credential. Clients never retry: a failed
    call raises a classified exception and the ResilientInvoker decides
    whether to rotate to the next credential/model pair.

    Responsibilities:
    - Format requests according to the provider's API
    - Parse responses into LLMGenerationResponse
    - Classify HTTP/transport failures

    Does NOT handle:
    - Prompt construction (that's PromptBuilder's job)
    - Retry, backoff and rotation (that's ResilientInvoker's job)
    - JSON repair (that's StructuredOutputRecovery's job)
    """

    provider_name: str = "base"

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: int = 120,
        connection_limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize base client.

        Args:
            api_key: Credential used for every call from this client
            base_url: Provider API root (e.g., https://api.openai.com/v1)
            timeout: Request timeout in seconds
            connection_limits: httpx connection pool limits
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._connection_limits = connection_limits or httpx.Limits(
            max_keepalive_connections=5,
            max_connections=20,
            keepalive_expiry=30.0
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            "Initialized LLM client",
            client_class=self.__class__.__name__,
            base_url=self.base_url,
            timeout=timeout,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                transport=self._transport,
                follow_redirects=True
            )
            logger.debug("Created new httpx AsyncClient", provider=self.provider_name)
        return self._client

    async def _post_json(
        self,
        path: str,
        payload: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """
        POST a JSON payload and return the decoded JSON body.

        Raises:
            ProviderTimeoutError: Request exceeded timeout
            ProviderConnectionError: Network/DNS/connection failure
            ProviderRateLimitError: HTTP 429
            ProviderServerError: HTTP 5xx or undecodable body
            ProviderAuthenticationError: HTTP 401/403
            ProviderInvalidRequestError: Other HTTP 4xx
        """
        client = await self._get_client()
        try:
            response = await client.post(path, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(
                f"{self.provider_name} request timeout after {self.timeout}s",
                details={"provider": self.provider_name, "timeout": self.timeout},
            ) from e
        except httpx.TransportError as e:
            raise ProviderConnectionError(
                f"{self.provider_name} network error: {e}",
                details={"provider": self.provider_name, "error_type": type(e).__name__},
            ) from e

        if response.status_code >= 400:
            raise classify_status(response.status_code, self.provider_name, response.text)

        try:
            return response.json()
        except ValueError as e:
            raise ProviderServerError(
                f"Invalid JSON response from {self.provider_name}",
                details={"provider": self.provider_name, "parse_error": str(e)},
            ) from e

    def _record_success(self, response: LLMGenerationResponse) -> None:
        llm_latency_seconds.labels(
            provider=self.provider_name, model=response.model_version, success="true"
        ).observe(response.latency_ms / 1000.0)
        if response.prompt_tokens:
            llm_tokens_total.labels(
                provider=self.provider_name, model=response.model_version, token_type="prompt"
            ).inc(response.prompt_tokens)
        if response.completion_tokens:
            llm_tokens_total.labels(
                provider=self.provider_name, model=response.model_version, token_type="completion"
            ).inc(response.completion_tokens)

    async def generate(self, request: LLMGenerationRequest) -> LLMGenerationResponse:
        """
        Run one provider call and return the parsed response.

        Args:
            request: Standardized generation request

        Returns:
            LLMGenerationResponse with generated text and metadata

        Raises:
            TransientProviderError subclasses: retryable failures
            PermanentProviderError subclasses: non-retryable failures
        """
        start_time = time.perf_counter()
        logger.debug(
            "Sending generation request",
            provider=self.provider_name,
            model=request.model,
            prompt_length=len(request.prompt),
            images=len(request.images),
            json_mode=request.json_mode,
        )
        try:
            data = await self._call(request)
        except LLMClientError:
            llm_latency_seconds.labels(
                provider=self.provider_name, model=request.model, success="false"
            ).observe(time.perf_counter() - start_time)
            raise

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        try:
            response = self._parse_response(request, data, latency_ms)
        except (KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
            llm_latency_seconds.labels(
                provider=self.provider_name, model=request.model, success="false"
            ).observe(latency_ms / 1000.0)
            raise ProviderServerError(
                f"Unexpected response shape from {self.provider_name}",
                details={
                    "provider": self.provider_name,
                    "model": request.model,
                    "parse_error": f"{type(e).__name__}: {e}",
                },
            ) from e
        if not response.content.strip():
            raise ProviderServerError(
                f"Empty response from {self.provider_name}",
                details={"provider": self.provider_name, "model": request.model},
            )

        self._record_success(response)
        logger.info(
            "Generation successful",
            provider=self.provider_name,
            model=response.model_version,
            latency_ms=latency_ms,
            prompt_tokens=response.prompt_tokens,
            completion_tokens=response.completion_tokens,
            finish_reason=response.finish_reason,
        )
        return response

    @abstractmethod
    async def _call(self, request: LLMGenerationRequest) -> Any:
        """Send the provider-specific payload and return the decoded body."""

    @abstractmethod
    def _parse_response(
        self, request: LLMGenerationRequest, data: Any, latency_ms: int
    ) -> LLMGenerationResponse:
        """Extract text and usage from the provider-specific body."""

    async def close(self):
        """Close the HTTP client connection."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed LLM client connection", provider=self.provider_name)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"timeout={self.timeout}s)"
        )
