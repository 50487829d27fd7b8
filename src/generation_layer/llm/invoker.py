"""
Resilient invoker: one logical LLM call with classified retry.

Retry Policy:
    1. Rate limit (HTTP 429): wait base_delay * attempt, retry on the next pair
    2. Transient fault (5xx, timeout, network): wait a fixed short delay,
       retry on the next pair
    3. Anything else (auth, malformed request, unknown model): raise at once
    4. Ceiling: after credentials x models attempts, raise AllProvidersExhausted

The loop is an explicit bounded `for`, and both the backoff policy and the
sleep function are injected so tests run with zero real delay.

Usage:
    invoker = ResilientInvoker("gemini", rotator, clients)
    text = await invoker.invoke(prompt, images=images, json_mode=True)
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping, Optional, Sequence

import structlog

from generation_layer.llm.base_client import BaseLLMClient
from generation_layer.llm.exceptions import (
    AllProvidersExhausted,
    PermanentProviderError,
    ProviderRateLimitError,
    TransientProviderError,
)
from generation_layer.llm.rotator import ProviderPoolRotator
from generation_layer.llm.text_utils import strip_code_fences
from generation_layer.models.generation import ImageAttachment
from generation_layer.models.llm_models import LLMGenerationRequest
from generation_layer.monitoring.metrics import provider_calls_total, provider_retries_total

logger = structlog.get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class BackoffPolicy:
    """
    Delays between attempts.

    Attributes:
        rate_limit_base_delay: Seconds per attempt number after a 429
        server_error_delay: Fixed seconds after any other transient failure
    """

    rate_limit_base_delay: float = 2.0
    server_error_delay: float = 1.0

    def __post_init__(self) -> None:
        if self.rate_limit_base_delay < 0 or self.server_error_delay < 0:
            raise ValueError("Backoff delays must be >= 0")

    def delay_for(self, error: TransientProviderError, attempt: int) -> float:
        """Delay before the attempt following `attempt` (1-based)."""
        if isinstance(error, ProviderRateLimitError):
            return self.rate_limit_base_delay * attempt
        return self.server_error_delay


class ResilientInvoker:
    """
    Execute one call against a rotating provider pool.

    Attributes:
        provider: Provider name (gemini, openai, huggingface)
        rotator: Shared credential/model rotator for this provider
        clients: Provider clients keyed by credential name
        backoff: Delay policy between attempts
    """

    def __init__(
        self,
        provider: str,
        rotator: ProviderPoolRotator,
        clients: Mapping[str, BaseLLMClient],
        backoff: Optional[BackoffPolicy] = None,
        sleep: SleepFunc = asyncio.sleep,
        temperature: float = 0.2,
        max_tokens: int = 8192,
    ):
        missing = set(rotator.credentials) - set(clients)
        if missing:
            raise ValueError(f"No client configured for credentials: {sorted(missing)}")

        self.provider = provider
        self.rotator = rotator
        self.clients = dict(clients)
        self.backoff = backoff or BackoffPolicy()
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self.rotator.size

    async def invoke(
        self,
        prompt: str,
        images: Sequence[ImageAttachment] = (),
        json_mode: bool = False,
    ) -> str:
        """
        Run the prompt until a pair answers or the pool is exhausted.

        Args:
            prompt: Prompt text
            images: Ordered image attachments
            json_mode: Ask the provider for a JSON object; fences are only
                stripped from plain-text answers

        Returns:
            Generated text

        Raises:
            PermanentProviderError: Non-retryable provider failure
            AllProvidersExhausted: Every pair failed transiently
        """
        last_error: Optional[TransientProviderError] = None
        max_attempts = self.max_attempts

        for attempt in range(1, max_attempts + 1):
            pair = self.rotator.next()
            request = LLMGenerationRequest(
                prompt=prompt,
                model=pair.model,
                images=tuple(images),
                json_mode=json_mode,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )

            try:
                response = await self.clients[pair.credential].generate(request)
            except TransientProviderError as e:
                last_error = e
                reason = "rate_limit" if isinstance(e, ProviderRateLimitError) else "transient"
                provider_calls_total.labels(provider=self.provider, outcome=reason).inc()
                logger.warning(
                    "Provider call failed, rotating",
                    provider=self.provider,
                    credential=pair.credential,
                    model=pair.model,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error_type=type(e).__name__,
                    error=e.message,
                )
                if attempt < max_attempts:
                    delay = self.backoff.delay_for(e, attempt)
                    provider_retries_total.labels(provider=self.provider, reason=reason).inc()
                    await self._sleep(delay)
                continue
            except PermanentProviderError as e:
                provider_calls_total.labels(provider=self.provider, outcome="permanent").inc()
                logger.error(
                    "Provider call failed permanently",
                    provider=self.provider,
                    credential=pair.credential,
                    model=pair.model,
                    attempt=attempt,
                    error_type=type(e).__name__,
                    error=e.message,
                )
                raise

            provider_calls_total.labels(provider=self.provider, outcome="success").inc()
            logger.info(
                "Provider call succeeded",
                provider=self.provider,
                credential=pair.credential,
                model=response.model_version,
                attempt=attempt,
            )
            if json_mode:
                return response.content
            return strip_code_fences(response.content)

        logger.error(
            "Provider pool exhausted",
            provider=self.provider,
            attempts=max_attempts,
            last_error=last_error.message if last_error else None,
        )
        raise AllProvidersExhausted(self.provider, max_attempts, last_error)

    async def close(self) -> None:
        for client in self.clients.values():
            await client.close()

    def __repr__(self) -> str:
        return f"ResilientInvoker(provider={self.provider}, pool_size={self.rotator.size})"
