"""
LLM provider abstraction, rotation and resilient invocation.

Components:
- BaseLLMClient: Abstract base class for provider clients
- GeminiClient, OpenAIClient, HuggingFaceClient: Concrete providers
- ProviderPoolRotator: Round-robin over credential/model pairs
- ResilientInvoker: Classified retry over the rotating pool
- PromptBuilder: Renders generation, merge, correction and evaluation prompts
- text_utils: Fence stripping and JSON object extraction
- exceptions: Provider error taxonomy
"""

from generation_layer.llm.base_client import BaseLLMClient
from generation_layer.llm.gemini_client import GeminiClient
from generation_layer.llm.huggingface_client import HuggingFaceClient
from generation_layer.llm.openai_client import OpenAIClient
from generation_layer.llm.rotator import ProviderPair, ProviderPoolRotator
from generation_layer.llm.invoker import BackoffPolicy, ResilientInvoker
from generation_layer.llm.prompt_builder import PromptBuilder
from generation_layer.llm.exceptions import (
    AllProvidersExhausted,
    LLMClientError,
    PermanentProviderError,
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderInvalidRequestError,
    ProviderRateLimitError,
    ProviderServerError,
    ProviderTimeoutError,
    TransientProviderError,
)

__all__ = [
    "BaseLLMClient",
    "GeminiClient",
    "HuggingFaceClient",
    "OpenAIClient",
    "ProviderPair",
    "ProviderPoolRotator",
    "BackoffPolicy",
    "ResilientInvoker",
    "PromptBuilder",
    "AllProvidersExhausted",
    "LLMClientError",
    "PermanentProviderError",
    "ProviderAuthenticationError",
    "ProviderConnectionError",
    "ProviderInvalidRequestError",
    "ProviderRateLimitError",
    "ProviderServerError",
    "ProviderTimeoutError",
    "TransientProviderError",
]
