"""
LLM-specific data models for request/response cycle.

These models are internal to the LLM layer and handle the raw communication
with provider APIs (Gemini, OpenAI-compatible, Hugging Face). They are
separate from the generation models so that provider clients stay
interchangeable behind one call contract.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, ConfigDict

from generation_layer.models.generation import ImageAttachment


class LLMGenerationRequest(BaseModel):
    """
    Internal request model for one provider call.

    This is the standardized format sent to any client implementation. It
    abstracts away provider-specific payload shapes (inline_data parts,
    data-URI image_url parts, plain inputs).
    """
    model_config = ConfigDict(frozen=True)

    prompt: str = Field(..., description="Complete prompt text")
    model: str = Field(..., description="Model name/identifier (e.g., 'gemini-1.5-flash')")
    images: tuple[ImageAttachment, ...] = Field(
        default=(),
        description="Ordered image attachments; ignored by text-only providers"
    )
    json_mode: bool = Field(default=False, description="Ask the provider for a JSON object response")
    temperature: float = Field(default=0.2, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=8192, ge=1, le=65536, description="Maximum tokens to generate")


class LLMGenerationResponse(BaseModel):
    """
    Internal response model from one provider call.

    Contains the raw generated text plus metadata for logging and metrics.
    """
    model_config = ConfigDict(frozen=True)

    content: str = Field(..., description="Generated text")
    model_version: str = Field(..., description="Model that actually answered")
    finish_reason: Optional[str] = Field(
        default=None,
        description="Why generation stopped: 'stop', 'length', 'MAX_TOKENS', etc."
    )
    prompt_tokens: Optional[int] = Field(default=None, description="Tokens in prompt")
    completion_tokens: Optional[int] = Field(default=None, description="Tokens in completion")
    latency_ms: int = Field(..., ge=0, description="Call latency in milliseconds")
    raw_metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Provider-specific metadata (for debugging)"
    )

    @property
    def usage_tokens(self) -> Optional[int]:
        if self.prompt_tokens is None or self.completion_tokens is None:
            return None
        return self.prompt_tokens + self.completion_tokens
