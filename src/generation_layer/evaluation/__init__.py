"""
Multi-model evaluation of generated code.

- rules.py: Pattern tables (static analysis, best practices)
- raters.py: LLMRater and RuleBasedRater
- evaluator.py: Concurrent fan-out, weighted blend, renormalization on failure
"""

from .evaluator import (
    DEFAULT_WEIGHTS,
    MultiModelEvaluator,
    WeightedRater,
    build_reference_evaluator,
    combine_scores,
    normalize_weights,
)
from .exceptions import (
    AllEvaluationSourcesFailed,
    EvaluationError,
    EvaluationSourceFailure,
)
from .raters import EvaluationContext, LLMRater, Rater, RaterScores, RuleBasedRater
from .rules import BEST_PRACTICE_RULES, STATIC_ANALYSIS_RULES, Rule, RuleSet, RuleTable

__all__ = [
    "MultiModelEvaluator",
    "WeightedRater",
    "build_reference_evaluator",
    "combine_scores",
    "normalize_weights",
    "DEFAULT_WEIGHTS",
    "EvaluationContext",
    "LLMRater",
    "Rater",
    "RaterScores",
    "RuleBasedRater",
    "Rule",
    "RuleSet",
    "RuleTable",
    "STATIC_ANALYSIS_RULES",
    "BEST_PRACTICE_RULES",
    "EvaluationError",
    "EvaluationSourceFailure",
    "AllEvaluationSourcesFailed",
]
