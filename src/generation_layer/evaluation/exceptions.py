"""
Exceptions for the multi-model evaluator.

A single failing rater is never fatal: EvaluationSourceFailure marks it as
excluded and the remaining weights are renormalized. Only when every rater
fails does AllEvaluationSourcesFailed reach the caller.
"""

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from generation_layer.models.evaluation import RaterOutcome


class EvaluationError(Exception):
    """
    Base exception for all evaluation errors.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EvaluationSourceFailure(EvaluationError):
    """
    One rater could not produce scores (network, timeout, unparseable output).

    Attributes:
        rater: Name of the failing rater
        reason: Short machine-readable reason (timeout, provider_error, unparseable)
    """

    def __init__(self, rater: str, reason: str, message: str):
        self.rater = rater
        self.reason = reason
        super().__init__(
            f"Rater '{rater}' failed ({reason}): {message}",
            details={"rater": rater, "reason": reason},
        )


class AllEvaluationSourcesFailed(EvaluationError):
    """
    Every configured rater failed; no score can be produced.

    Attributes:
        outcomes: Per-rater diagnostics, all with succeeded=False
    """

    def __init__(self, outcomes: "list[RaterOutcome]"):
        self.outcomes = outcomes
        super().__init__(
            f"All {len(outcomes)} evaluation sources failed",
            details={"sources": {outcome.name: outcome.error for outcome in outcomes}},
        )
