"""
API-specific request and response models for FastAPI endpoints.

These models wrap the core domain models (GenerationRequest,
GenerationArtifact, EvaluationResult) in the camelCase shape HTTP clients
use: {success, generatedFiles, analysis, qa, projectId, error, timestamp}.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from generation_layer.models.artifacts import GenerationArtifact
from generation_layer.models.enums import OutputMode, Platform
from generation_layer.models.evaluation import EvaluationResult
from generation_layer.models.generation import GenerationOptions


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base for API payloads: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerationOptionsPayload(CamelModel):
    """Target stack options shared by all generation endpoints."""

    platform: Platform = Field(default=Platform.WEB, examples=["web", "android", "ios"])
    framework: Optional[str] = Field(
        default=None,
        description="Target framework (defaults per platform)",
        examples=["React", "Jetpack Compose", "SwiftUI"]
    )
    styling: str = Field(default="Tailwind CSS")
    architecture: str = Field(default="Component-based")
    custom_logic: str = Field(default="", max_length=10000)
    routing: str = Field(default="", max_length=5000)
    output_mode: Optional[OutputMode] = Field(
        default=None,
        description="file_map (JSON file map) or single_blob (text split into files)"
    )
    evaluate: bool = Field(default=True, description="Run the multi-model evaluator")

    def to_options(self) -> GenerationOptions:
        return GenerationOptions(
            platform=self.platform,
            framework=self.framework,
            styling=self.styling,
            architecture=self.architecture,
            custom_logic=self.custom_logic,
            routing=self.routing,
        )


class TextGenerationRequest(GenerationOptionsPayload):
    """Request for POST /generate/text."""

    prompt: str = Field(..., min_length=1, max_length=20000, description="Description of the UI to build")


class FigmaGenerationRequest(GenerationOptionsPayload):
    """Request for POST /generate/figma."""

    figma_url: str = Field(..., min_length=1, description="Figma file URL or file key")
    prompt: str = Field(default="", max_length=20000, description="Extra instructions")
    max_frames: Optional[int] = Field(default=None, ge=1, le=50)


class AnalysisRequest(CamelModel):
    """Request for POST /analyze."""

    prompt: str = Field(..., min_length=1, max_length=20000, description="App idea to plan")
    platform: Platform = Field(default=Platform.WEB)
    framework: Optional[str] = Field(default=None, description="Target framework (defaults per platform)")
    styling: str = Field(default="Tailwind CSS")
    architecture: str = Field(default="Component-based")

    def to_options(self) -> GenerationOptions:
        return GenerationOptions(
            platform=self.platform,
            framework=self.framework,
            styling=self.styling,
            architecture=self.architecture,
        )


class AnalysisResponse(CamelModel):
    """Response for POST /analyze: a markdown plan of pages and components."""

    success: bool = True
    analysis: str = Field(description="Markdown plan")
    prompt: str
    platform: Platform
    framework: str
    styling: str
    architecture: str
    provider: str
    timestamp: datetime = Field(default_factory=_utcnow)


class GenerationResponse(CamelModel):
    """Response for generation endpoints."""

    success: bool = Field(description="True when the run reached DONE")
    generated_files: dict[str, str] = Field(
        default_factory=dict,
        description="Relative path -> file content"
    )
    analysis: Optional[str] = Field(default=None, description="Model's description of the result")
    qa: Optional[EvaluationResult] = Field(default=None, description="Multi-model evaluation")
    project_id: Optional[str] = Field(default=None)
    location: Optional[str] = Field(default=None, description="Project store location")
    providers: list[str] = Field(default_factory=list)
    run_id: Optional[str] = Field(default=None)
    error: Optional[str] = Field(default=None)
    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def from_artifact(cls, artifact: GenerationArtifact, run_id: Optional[str] = None) -> "GenerationResponse":
        return cls(
            success=True,
            generated_files=artifact.files,
            analysis=artifact.analysis or None,
            qa=artifact.qa,
            project_id=artifact.project_id,
            location=artifact.location,
            providers=artifact.providers,
            run_id=run_id,
        )


class EvaluationRequest(CamelModel):
    """Request for POST /evaluate."""

    code: str = Field(..., min_length=1, description="Source code to evaluate")
    framework: str = Field(default="React")
    platform: Platform = Field(default=Platform.WEB)


class EvaluationResponse(CamelModel):
    """Response for POST /evaluate."""

    success: bool = True
    qa: EvaluationResult
    timestamp: datetime = Field(default_factory=_utcnow)


class ProjectListResponse(CamelModel):
    """Response for GET /projects."""

    success: bool = True
    projects: list[dict[str, Any]] = Field(default_factory=list)
    count: int = Field(default=0, ge=0)


class ProjectResponse(CamelModel):
    """Response for GET /projects/{project_id}."""

    success: bool = True
    project: dict[str, Any]


class HealthResponse(CamelModel):
    """Response for health check endpoint."""

    status: str = Field(
        description="Overall health status",
        examples=["healthy", "degraded", "unhealthy"]
    )
    version: str = Field(
        description="Generation layer version",
        examples=["0.1.0"]
    )
    services: dict[str, str] = Field(
        description="Service-specific health status",
        examples=[{
            "primary:gemini": "ok",
            "secondary:openai": "not_configured",
            "figma": "not_configured",
            "evaluation": "ok",
        }]
    )
    timestamp: datetime = Field(default_factory=_utcnow)


class ErrorResponse(BaseModel):
    """Standard error response format (field names as sent)."""

    success: bool = False
    error: str = Field(description="Human-readable error message")
    error_type: str = Field(
        description="Error class",
        examples=["InvalidGenerationRequest", "AllProvidersExhausted", "internal_error"]
    )
    details: Optional[dict] = Field(default=None)
    timestamp: datetime = Field(default_factory=_utcnow)
