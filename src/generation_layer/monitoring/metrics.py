"""Custom Prometheus metrics for the UI Generation Layer.

These metrics are exposed at /metrics endpoint and should be scraped by Prometheus.
Alert rules should be configured for:
- provider_calls_total{outcome="permanent"} (revoked keys, unknown models)
- provider_retries_total (rate-limit pressure on the credential pool)
- recovery_rounds_total{outcome="unrecoverable"} (models ignoring JSON instructions)
- pipeline_runs_total{state="error"} (end-user visible failures)
"""

from prometheus_client import Counter, Histogram

# === Provider Metrics ===

provider_calls_total = Counter(
    "provider_calls_total",
    "Total provider calls by provider and outcome",
    ["provider", "outcome"],
)
"""
Provider calls counter.

Labels:
- provider: gemini, openai, huggingface
- outcome: success, rate_limit, transient, permanent

Alert thresholds:
- WARN: permanent > 0 over 5m (credential or model misconfiguration)
"""

provider_retries_total = Counter(
    "provider_retries_total",
    "Total retries (rotations to the next pair) by provider and reason",
    ["provider", "reason"],
)
"""
Retry counter. One increment per rotation after a transient failure.

Labels:
- provider: gemini, openai, huggingface
- reason: rate_limit, transient

Alert thresholds:
- WARN: rate_limit retries > 20% of calls (add credentials)
"""

llm_latency_seconds = Histogram(
    "llm_latency_seconds",
    "Provider call latency in seconds",
    ["provider", "model", "success"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)
"""
Provider call latency histogram.

Buckets optimized for multimodal code generation (0.5s to 120s).
"""

llm_tokens_total = Counter(
    "llm_tokens_total",
    "Total tokens consumed by provider, model and type",
    ["provider", "model", "token_type"],
)
"""
Token consumption counter (token_type: prompt, completion).

Used for cost estimation and capacity planning.
"""

# === Structured Output Recovery Metrics ===

recovery_rounds_total = Counter(
    "recovery_rounds_total",
    "Structured output recovery rounds by outcome",
    ["outcome"],
)
"""
Recovery rounds counter.

Labels:
- outcome: parsed (strict parse), extracted (balanced-brace extraction),
  failed (round failed, correction requested), unrecoverable (gave up)
"""

# === Evaluation Metrics ===

rater_failures_total = Counter(
    "rater_failures_total",
    "Evaluation rater failures by rater and reason",
    ["rater", "reason"],
)
"""
Rater failures counter.

Labels:
- rater: rater name (llm_primary, static_analysis, ...)
- reason: timeout, provider_error, unparseable, error
"""

evaluation_score = Histogram(
    "evaluation_score",
    "Combined evaluation score (0-100) by category",
    ["category"],
    buckets=[10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
)

# === Pipeline Metrics ===

pipeline_runs_total = Counter(
    "pipeline_runs_total",
    "Total pipeline runs by platform and final state",
    ["platform", "state"],
)

pipeline_duration_seconds = Histogram(
    "pipeline_duration_seconds",
    "Pipeline run duration in seconds by platform",
    ["platform"],
    buckets=[5.0, 15.0, 30.0, 60.0, 120.0, 300.0, 600.0],
)
