"""
Multi-model evaluator: triangulate several raters into one judgement.

Raters run concurrently, each under its own timeout. Failed raters are
excluded and the weights of the remaining raters are renormalized to sum
to 1. For every category:

    combined.score = sum(score_i * weight_i)
    combined.issues / recommendations = ordered union over raters

overall_score is the mean of the four combined category scores. If every
rater fails, AllEvaluationSourcesFailed is raised.

Usage:
    evaluator = MultiModelEvaluator([WeightedRater(rater, 0.4), ...])
    result = await evaluator.evaluate(code, framework="React", platform="web")
"""

import asyncio
import math
import time
from dataclasses import dataclass
from typing import Optional, Sequence

import structlog

from generation_layer.evaluation.exceptions import (
    AllEvaluationSourcesFailed,
    EvaluationSourceFailure,
)
from generation_layer.evaluation.raters import (
    EvaluationContext,
    LLMRater,
    Rater,
    RaterScores,
    RuleBasedRater,
)
from generation_layer.evaluation.rules import BEST_PRACTICE_RULES, STATIC_ANALYSIS_RULES
from generation_layer.llm.exceptions import LLMClientError
from generation_layer.llm.prompt_builder import PromptBuilder
from generation_layer.models.enums import EvaluationCategory
from generation_layer.models.evaluation import (
    SCORE_MAX,
    SCORE_MIN,
    CategoryScore,
    EvaluationResult,
    RaterOutcome,
)
from generation_layer.monitoring.metrics import evaluation_score, rater_failures_total
from generation_layer.recovery.exceptions import RecoveryError
from generation_layer.recovery.structured_output import TextInvoker

logger = structlog.get_logger(__name__)

DEFAULT_WEIGHTS = (0.4, 0.3, 0.2, 0.1)
WEIGHT_TOLERANCE = 1e-6


@dataclass(frozen=True)
class WeightedRater:
    """A rater and its configured blend weight."""

    rater: Rater
    weight: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.weight <= 1.0:
            raise ValueError(f"Weight for '{self.rater.name}' must be within [0, 1], got {self.weight}")


@dataclass
class _RaterRun:
    weighted: WeightedRater
    scores: Optional[RaterScores] = None
    error: Optional[str] = None
    duration_ms: int = 0

    @property
    def succeeded(self) -> bool:
        return self.scores is not None


def _union(items: Sequence[list[str]]) -> list[str]:
    seen: dict[str, None] = {}
    for group in items:
        for item in group:
            seen.setdefault(item, None)
    return list(seen)


def normalize_weights(weights: Sequence[float]) -> list[float]:
    """
    Scale weights so they sum to 1.

    Raises:
        ValueError: If the weights sum to zero
    """
    total = math.fsum(weights)
    if total <= 0:
        raise ValueError("Cannot normalize weights that sum to zero")
    return [weight / total for weight in weights]


def combine_scores(
    weighted_scores: Sequence[tuple[RaterScores, float]],
) -> dict[EvaluationCategory, CategoryScore]:
    """
    Blend per-rater scores with the given weights.

    Weights are renormalized over the entries passed in, so callers pass
    only the raters that succeeded.

    Args:
        weighted_scores: (scores, weight) for each successful rater

    Returns:
        Combined CategoryScore per category, clamped to the 0-100 scale
    """
    weights = normalize_weights([weight for _, weight in weighted_scores])
    combined: dict[EvaluationCategory, CategoryScore] = {}
    for category in EvaluationCategory:
        score = math.fsum(
            scores[category].score * weight
            for (scores, _), weight in zip(weighted_scores, weights)
        )
        combined[category] = CategoryScore(
            score=round(min(max(score, SCORE_MIN), SCORE_MAX), 2),
            issues=_union([scores[category].issues for scores, _ in weighted_scores]),
            recommendations=_union(
                [scores[category].recommendations for scores, _ in weighted_scores]
            ),
        )
    return combined


class MultiModelEvaluator:
    """
    Weighted, failure-tolerant blend of independent raters.

    Attributes:
        raters: Raters with configured weights (summing to 1)
        rater_timeout: Seconds before a rater counts as failed
    """

    def __init__(self, raters: Sequence[WeightedRater], rater_timeout: float = 90.0):
        if not raters:
            raise ValueError("MultiModelEvaluator needs at least one rater")
        total = math.fsum(weighted.weight for weighted in raters)
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(f"Rater weights must sum to 1.0, got {total}")
        names = [weighted.rater.name for weighted in raters]
        if len(set(names)) != len(names):
            raise ValueError(f"Rater names must be unique: {names}")

        self.raters = list(raters)
        self.rater_timeout = rater_timeout

        logger.info(
            "Evaluator initialized",
            raters={weighted.rater.name: weighted.weight for weighted in self.raters},
            rater_timeout=rater_timeout,
        )

    async def _run_rater(
        self, weighted: WeightedRater, code: str, context: EvaluationContext
    ) -> _RaterRun:
        rater = weighted.rater
        start = time.perf_counter()
        reason: str
        try:
            scores = await asyncio.wait_for(rater.rate(code, context), timeout=self.rater_timeout)
        except asyncio.TimeoutError:
            reason, error = "timeout", f"timed out after {self.rater_timeout}s"
        except EvaluationSourceFailure as e:
            reason, error = e.reason, e.message
        except LLMClientError as e:
            reason, error = "provider_error", e.message
        except RecoveryError as e:
            reason, error = "unparseable", e.message
        except Exception as e:
            logger.exception("Rater raised unexpectedly", rater=rater.name)
            reason, error = "error", f"{type(e).__name__}: {e}"
        else:
            duration_ms = int((time.perf_counter() - start) * 1000)
            missing = [category.value for category in EvaluationCategory if category not in scores]
            if not missing:
                return _RaterRun(weighted, scores=scores, duration_ms=duration_ms)
            reason, error = "incomplete", f"missing categories: {missing}"

        duration_ms = int((time.perf_counter() - start) * 1000)
        rater_failures_total.labels(rater=rater.name, reason=reason).inc()
        logger.warning(
            "Rater failed, excluding from blend",
            rater=rater.name,
            reason=reason,
            error=error,
            duration_ms=duration_ms,
        )
        return _RaterRun(weighted, error=error, duration_ms=duration_ms)

    async def evaluate(self, code: str, framework: str, platform: str) -> EvaluationResult:
        """
        Score code with every rater and blend the results.

        Args:
            code: Source code to evaluate (all generated files, concatenated)
            framework: Target framework (selects framework-specific rules)
            platform: Target platform

        Returns:
            EvaluationResult on the 0-100 scale with per-source outcomes

        Raises:
            AllEvaluationSourcesFailed: Every rater failed
        """
        context = EvaluationContext(framework=framework, platform=platform)
        runs = await asyncio.gather(
            *(self._run_rater(weighted, code, context) for weighted in self.raters)
        )

        successful = [run for run in runs if run.succeeded]
        effective: dict[str, float] = {}
        if successful:
            normalized = normalize_weights([run.weighted.weight for run in successful])
            effective = {
                run.weighted.rater.name: weight for run, weight in zip(successful, normalized)
            }

        outcomes = [
            RaterOutcome(
                name=run.weighted.rater.name,
                kind=run.weighted.rater.kind,
                configured_weight=run.weighted.weight,
                effective_weight=round(effective.get(run.weighted.rater.name, 0.0), 6),
                succeeded=run.succeeded,
                error=run.error,
                duration_ms=run.duration_ms,
            )
            for run in runs
        ]

        if not successful:
            logger.error("All evaluation sources failed", raters=len(runs))
            raise AllEvaluationSourcesFailed(outcomes)

        combined = combine_scores([(run.scores, run.weighted.weight) for run in successful])
        overall = round(
            math.fsum(score.score for score in combined.values()) / len(combined), 2
        )

        for category, score in combined.items():
            evaluation_score.labels(category=category.value).observe(score.score)

        logger.info(
            "Evaluation completed",
            framework=framework,
            platform=platform,
            overall_score=overall,
            succeeded=len(successful),
            failed=len(runs) - len(successful),
        )

        return EvaluationResult(
            code_quality=combined[EvaluationCategory.CODE_QUALITY],
            performance=combined[EvaluationCategory.PERFORMANCE],
            accessibility=combined[EvaluationCategory.ACCESSIBILITY],
            security=combined[EvaluationCategory.SECURITY],
            overall_score=overall,
            sources=outcomes,
        )


def build_reference_evaluator(
    primary: TextInvoker,
    secondary: Optional[TextInvoker] = None,
    weights: Sequence[float] = DEFAULT_WEIGHTS,
    rater_timeout: float = 90.0,
    prompt_builder: Optional[PromptBuilder] = None,
    max_recovery_attempts: int = 3,
) -> MultiModelEvaluator:
    """
    Build the four-source evaluator: two LLM raters on different providers,
    then the static-analysis and best-practice rule tables, in that order.

    When no secondary provider is available the second LLM rater is left out
    and the remaining weights are rescaled to sum to 1.

    Args:
        weights: Blend weights, one per source, in the order above
    """
    if len(weights) != 4:
        raise ValueError(f"Expected 4 evaluator weights, got {len(weights)}")

    builder = prompt_builder or PromptBuilder()
    candidates: list[tuple[Optional[Rater], float]] = [
        (LLMRater(f"llm_{primary.provider}", primary, builder, max_recovery_attempts), weights[0]),
        (
            LLMRater(f"llm_{secondary.provider}_secondary", secondary, builder, max_recovery_attempts)
            if secondary is not None else None,
            weights[1],
        ),
        (RuleBasedRater(STATIC_ANALYSIS_RULES), weights[2]),
        (RuleBasedRater(BEST_PRACTICE_RULES), weights[3]),
    ]
    available = [(rater, weight) for rater, weight in candidates if rater is not None]
    normalized = normalize_weights([weight for _, weight in available])

    return MultiModelEvaluator(
        [WeightedRater(rater, weight) for (rater, _), weight in zip(available, normalized)],
        rater_timeout=rater_timeout,
    )
