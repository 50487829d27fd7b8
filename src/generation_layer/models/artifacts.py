"""
Pipeline output models: the generated artifact and the run record.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from generation_layer.models.enums import PipelineState, Platform
from generation_layer.models.evaluation import EvaluationResult


class GenerationArtifact(BaseModel):
    """
    Result bundle of a successful run.

    `files` maps unique relative paths to file contents (last write wins on
    duplicate paths). The same mapping is handed to the project store.
    """

    project_id: str
    platform: Platform
    framework: str
    files: dict[str, str] = Field(..., description="Relative path -> file content")
    analysis: str = Field(default="", description="Model's description of the generated app")
    qa: Optional[EvaluationResult] = Field(default=None, description="Evaluation, when enabled")
    location: Optional[str] = Field(default=None, description="Where the project store wrote the files")
    providers: list[str] = Field(default_factory=list, description="Providers whose output was used")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PipelineError(BaseModel):
    """Why a run ended in ERROR."""

    message: str
    error_type: str
    failed_state: PipelineState
    details: dict = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class PipelineRun(BaseModel):
    """
    Record of one pipeline execution.

    `artifact` is set only when state is DONE; `error` only when ERROR.
    `transitions` lists every visited state in order.
    """

    run_id: str
    state: PipelineState = PipelineState.ANALYZING
    transitions: list[PipelineState] = Field(default_factory=list)
    artifact: Optional[GenerationArtifact] = None
    error: Optional[PipelineError] = None
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.state == PipelineState.DONE
