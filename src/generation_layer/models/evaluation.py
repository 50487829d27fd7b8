"""
Evaluation result models.

All scores use one canonical 0-100 scale. Models serialize with camelCase
aliases (codeQuality, overallScore) so HTTP clients and metadata.json see
the same shape.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from generation_layer.models.enums import EvaluationCategory, RaterKind

SCORE_MIN = 0.0
SCORE_MAX = 100.0


class CategoryScore(BaseModel):
    """Score and findings for one category, from one rater or combined."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    score: float = Field(..., ge=SCORE_MIN, le=SCORE_MAX, description="Score on the 0-100 scale")
    issues: list[str] = Field(default_factory=list, description="Problems found")
    recommendations: list[str] = Field(default_factory=list, description="Suggested improvements")


class RaterOutcome(BaseModel):
    """Per-source diagnostics: which raters contributed and with what weight."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    kind: RaterKind
    configured_weight: float = Field(..., ge=0.0, le=1.0)
    effective_weight: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Weight after renormalization over successful raters (0 if failed)"
    )
    succeeded: bool
    error: Optional[str] = None
    duration_ms: int = Field(default=0, ge=0)


class EvaluationResult(BaseModel):
    """
    Combined quality judgement for one generated artifact.

    Computed once per artifact; persisted alongside the project.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    code_quality: CategoryScore
    performance: CategoryScore
    accessibility: CategoryScore
    security: CategoryScore
    overall_score: float = Field(..., ge=SCORE_MIN, le=SCORE_MAX, description="Mean of category scores")
    sources: list[RaterOutcome] = Field(default_factory=list)
    evaluated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def category(self, category: EvaluationCategory) -> CategoryScore:
        return getattr(self, category.value)

    @property
    def categories(self) -> dict[EvaluationCategory, CategoryScore]:
        return {category: self.category(category) for category in EvaluationCategory}
