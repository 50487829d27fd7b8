"""
Pydantic data models for the UI Generation Layer.

Includes:
- Enums (Platform, OutputMode, EvaluationCategory, RaterKind, PipelineState)
- Generation input models (ImageAttachment, DesignNode, GenerationRequest)
- LLM models (LLMGenerationRequest, LLMGenerationResponse)
- Evaluation models (CategoryScore, RaterOutcome, EvaluationResult)
- Artifact models (GenerationArtifact, PipelineRun, PipelineError)
"""

from generation_layer.models.enums import (
    EvaluationCategory,
    OutputMode,
    PipelineState,
    Platform,
    RaterKind,
)
from generation_layer.models.generation import (
    BoundingBox,
    DesignNode,
    GenerationOptions,
    GenerationRequest,
    ImageAttachment,
)
from generation_layer.models.llm_models import (
    LLMGenerationRequest,
    LLMGenerationResponse,
)
from generation_layer.models.evaluation import (
    CategoryScore,
    EvaluationResult,
    RaterOutcome,
)
from generation_layer.models.artifacts import (
    GenerationArtifact,
    PipelineError,
    PipelineRun,
)

__all__ = [
    # Enums
    "EvaluationCategory",
    "OutputMode",
    "PipelineState",
    "Platform",
    "RaterKind",
    # Generation inputs
    "BoundingBox",
    "DesignNode",
    "GenerationOptions",
    "GenerationRequest",
    "ImageAttachment",
    # LLM models
    "LLMGenerationRequest",
    "LLMGenerationResponse",
    # Evaluation
    "CategoryScore",
    "EvaluationResult",
    "RaterOutcome",
    # Artifacts
    "GenerationArtifact",
    "PipelineError",
    "PipelineRun",
]
