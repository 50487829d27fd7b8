"""
Provider registry: build a ResilientInvoker for a named provider from settings.
"""

from typing import Optional

import structlog

from generation_layer.config import Settings
from generation_layer.llm.base_client import BaseLLMClient
from generation_layer.llm.gemini_client import GeminiClient
from generation_layer.llm.huggingface_client import HuggingFaceClient
from generation_layer.llm.invoker import BackoffPolicy, ResilientInvoker, SleepFunc
from generation_layer.llm.openai_client import OpenAIClient
from generation_layer.llm.rotator import ProviderPoolRotator

logger = structlog.get_logger(__name__)

PROVIDER_CLIENTS: dict[str, type[BaseLLMClient]] = {
    "gemini": GeminiClient,
    "openai": OpenAIClient,
    "huggingface": HuggingFaceClient,
}


class ProviderNotConfigured(ValueError):
    """Raised when a provider is unknown or has no keys/models configured."""


def provider_config(provider: str, settings: Settings) -> tuple[list[str], list[str], str]:
    """
    Return (api_keys, models, base_url) for a provider.

    Raises:
        ProviderNotConfigured: Unknown provider name
    """
    if provider == "gemini":
        return settings.GEMINI_API_KEYS, settings.GEMINI_MODELS, settings.GEMINI_BASE_URL
    if provider == "openai":
        return settings.OPENAI_API_KEYS, settings.OPENAI_MODELS, settings.OPENAI_BASE_URL
    if provider == "huggingface":
        return (
            settings.HUGGINGFACE_API_TOKENS,
            settings.HUGGINGFACE_MODELS,
            settings.HUGGINGFACE_BASE_URL,
        )
    raise ProviderNotConfigured(
        f"Unknown provider '{provider}'. Expected one of: {sorted(PROVIDER_CLIENTS)}"
    )


def is_provider_configured(provider: Optional[str], settings: Settings) -> bool:
    if not provider or provider not in PROVIDER_CLIENTS:
        return False
    keys, models, _ = provider_config(provider, settings)
    return bool(keys) and bool(models)


def build_invoker(
    provider: str,
    settings: Settings,
    sleep: Optional[SleepFunc] = None,
) -> ResilientInvoker:
    """
    Create the rotator, one client per credential, and the invoker.

    Credentials are named "<provider>-<index>" so logs can tell them apart
    without exposing the secret.

    Raises:
        ProviderNotConfigured: Unknown provider, or no keys/models in settings
    """
    keys, models, base_url = provider_config(provider, settings)
    if not keys or not models:
        raise ProviderNotConfigured(
            f"Provider '{provider}' needs at least one API key and one model"
        )

    client_class = PROVIDER_CLIENTS[provider]
    clients = {
        f"{provider}-{index}": client_class(
            api_key=key, base_url=base_url, timeout=settings.PROVIDER_TIMEOUT
        )
        for index, key in enumerate(keys)
    }
    rotator = ProviderPoolRotator(list(clients), models)
    backoff = BackoffPolicy(
        rate_limit_base_delay=settings.RATE_LIMIT_BASE_DELAY,
        server_error_delay=settings.SERVER_ERROR_DELAY,
    )

    logger.info("Built provider invoker", provider=provider, pool_size=rotator.size)

    kwargs = {"sleep": sleep} if sleep is not None else {}
    return ResilientInvoker(
        provider,
        rotator,
        clients,
        backoff=backoff,
        temperature=settings.LLM_TEMPERATURE,
        max_tokens=settings.LLM_MAX_TOKENS,
        **kwargs,
    )
