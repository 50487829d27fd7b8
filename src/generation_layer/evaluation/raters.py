"""
Raters: independent sources of category scores.

- LLMRater asks a model for 0-100 scores through structured output
  recovery. Output that cannot be recovered is a rater failure; no neutral
  default score is ever substituted.
- RuleBasedRater scores code against a pattern table (see rules.py).
"""

from dataclasses import dataclass
from typing import Optional, Protocol

import structlog

from generation_layer.evaluation.exceptions import EvaluationSourceFailure
from generation_layer.evaluation.rules import RuleTable
from generation_layer.llm.exceptions import LLMClientError
from generation_layer.llm.prompt_builder import PromptBuilder
from generation_layer.models.enums import EvaluationCategory, RaterKind
from generation_layer.models.evaluation import CategoryScore
from generation_layer.recovery import (
    EVALUATION_SCHEMA,
    MAX_RECOVERY_ATTEMPTS,
    StructuredOutputRecovery,
    StructuredOutputUnrecoverable,
)
from generation_layer.recovery.structured_output import TextInvoker

logger = structlog.get_logger(__name__)

RaterScores = dict[EvaluationCategory, CategoryScore]


@dataclass(frozen=True)
class EvaluationContext:
    """What the code targets; raters may tailor prompts or rules to it."""

    framework: str
    platform: str


class Rater(Protocol):
    """A source of per-category scores on the 0-100 scale."""

    name: str
    kind: RaterKind

    async def rate(self, code: str, context: EvaluationContext) -> RaterScores:
        ...


class LLMRater:
    """
    Model-backed rater.

    Attributes:
        name: Rater name (e.g., llm_gemini)
        invoker: Provider invoker used for the evaluation call
    """

    kind = RaterKind.LLM

    def __init__(
        self,
        name: str,
        invoker: TextInvoker,
        prompt_builder: Optional[PromptBuilder] = None,
        max_recovery_attempts: int = MAX_RECOVERY_ATTEMPTS,
    ):
        self.name = name
        self.invoker = invoker
        self.prompt_builder = prompt_builder or PromptBuilder()
        self.recovery = StructuredOutputRecovery(
            invoker, self.prompt_builder, max_attempts=max_recovery_attempts
        )

    async def rate(self, code: str, context: EvaluationContext) -> RaterScores:
        """
        Ask the model for scores.

        Raises:
            EvaluationSourceFailure: Provider error or unrecoverable output
        """
        prompt = self.prompt_builder.build_evaluation_prompt(code, context.framework, context.platform)
        try:
            data = await self.recovery.generate_json(prompt, schema=EVALUATION_SCHEMA)
        except StructuredOutputUnrecoverable as e:
            raise EvaluationSourceFailure(self.name, "unparseable", e.message) from e
        except LLMClientError as e:
            raise EvaluationSourceFailure(self.name, "provider_error", e.message) from e

        return {
            category: CategoryScore(
                score=float(data[category.value]["score"]),
                issues=[str(item) for item in data[category.value].get("issues", [])],
                recommendations=[
                    str(item) for item in data[category.value].get("recommendations", [])
                ],
            )
            for category in EvaluationCategory
        }

    def __repr__(self) -> str:
        return f"LLMRater(name={self.name}, provider={getattr(self.invoker, 'provider', None)})"


class RuleBasedRater:
    """
    Deterministic rater backed by a pattern table.
    """

    kind = RaterKind.RULE_BASED

    def __init__(self, table: RuleTable, name: Optional[str] = None):
        self.table = table
        self.name = name or table.name

    async def rate(self, code: str, context: EvaluationContext) -> RaterScores:
        scores = self.table.score(code, context.framework)
        logger.debug(
            "Rule-based scores computed",
            rater=self.name,
            scores={category.value: score.score for category, score in scores.items()},
        )
        return scores

    def __repr__(self) -> str:
        return f"RuleBasedRater(name={self.name})"
