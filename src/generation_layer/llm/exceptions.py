"""
Custom exceptions for the LLM provider layer.

Every provider failure is classified into one of two families so the
ResilientInvoker can decide between retrying on a fresh credential/model
pair and failing fast:

- TransientProviderError: rate limits, 5xx faults, timeouts, network errors.
  Retried automatically within the rotation budget.
- PermanentProviderError: bad credentials, malformed requests, unknown
  models. Never retried.
"""

from typing import Optional


class LLMClientError(Exception):
    """
    Base exception for all LLM provider errors.

    All provider-specific exceptions inherit from this to allow catching
    any provider-related error with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransientProviderError(LLMClientError):
    """
    Failure expected to go away on retry (possibly with another pair).
    """
    pass


class ProviderRateLimitError(TransientProviderError):
    """
    Raised when the provider answers HTTP 429.

    Triggers linear backoff (base_delay * attempt) before the next pair.
    """
    pass


class ProviderServerError(TransientProviderError):
    """
    Raised on HTTP 5xx, or when a 2xx body is empty or unreadable.

    Triggers a short fixed delay before the next pair.
    """
    pass


class ProviderConnectionError(TransientProviderError):
    """
    Raised when unable to reach the provider (DNS, refused, reset).
    """
    pass


class ProviderTimeoutError(ProviderConnectionError):
    """
    Raised when the provider call exceeds the client timeout.
    """
    pass


class PermanentProviderError(LLMClientError):
    """
    Failure that retrying cannot fix. Propagated immediately.
    """
    pass


class ProviderAuthenticationError(PermanentProviderError):
    """
    Raised on HTTP 401/403: invalid, revoked or unauthorized credential.
    """
    pass


class ProviderInvalidRequestError(PermanentProviderError):
    """
    Raised on any other HTTP 4xx: malformed request, unknown model,
    payload too large, content blocked.
    """
    pass


class AllProvidersExhausted(LLMClientError):
    """
    Raised when every credential/model pair in the pool failed transiently.

    Attributes:
        provider: Provider whose pool was exhausted
        attempts: Number of calls made (equals the pool size)
        last_error: Final transient error observed
    """

    def __init__(
        self,
        provider: str,
        attempts: int,
        last_error: Optional[TransientProviderError],
    ):
        self.provider = provider
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"All {attempts} credential/model pairs for '{provider}' failed. "
            f"Last error: {last_error.message if last_error else 'none'}",
            details={
                "provider": provider,
                "attempts": attempts,
                "last_error_type": type(last_error).__name__ if last_error else None,
            },
        )
