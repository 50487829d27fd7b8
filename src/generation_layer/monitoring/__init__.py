"""Monitoring and metrics instrumentation for the UI Generation Layer.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from generation_layer.monitoring.metrics import (
    evaluation_score,
    llm_latency_seconds,
    llm_tokens_total,
    pipeline_duration_seconds,
    pipeline_runs_total,
    provider_calls_total,
    provider_retries_total,
    rater_failures_total,
    recovery_rounds_total,
)

__all__ = [
    "provider_calls_total",
    "provider_retries_total",
    "llm_latency_seconds",
    "llm_tokens_total",
    "recovery_rounds_total",
    "rater_failures_total",
    "evaluation_score",
    "pipeline_runs_total",
    "pipeline_duration_seconds",
]
