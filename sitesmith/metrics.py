"""Prometheus metric definitions for the sitesmith service."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# --- Pipeline steps ---

step_duration_seconds = Histogram(
    "sitesmith_step_duration_seconds",
    "Time spent executing a deployment pipeline step",
    labelnames=["step_name"],
    buckets=(0.5, 1, 2, 5, 10, 30, 60, 120, 300),
)

step_executions_total = Counter(
    "sitesmith_step_executions_total",
    "Total deployment pipeline step executions",
    labelnames=["step_name", "status"],
)

# --- Retry ---

retry_attempts_total = Counter(
    "sitesmith_retry_attempts_total",
    "Total retry attempts on read-only provider calls",
    labelnames=["fn_name"],
)

retry_exhausted_total = Counter(
    "sitesmith_retry_exhausted_total",
    "Total times retries were exhausted",
    labelnames=["fn_name"],
)

# --- Generation ---

generated_pages_total = Counter(
    "sitesmith_generated_pages_total",
    "Pages returned by the generate endpoint",
    labelnames=["outcome"],
)

llm_tokens_total = Counter(
    "sitesmith_llm_tokens_total",
    "Total LLM tokens consumed",
    labelnames=["model", "token_type"],
)

# --- Deployment status ---

status_transitions_total = Counter(
    "sitesmith_status_transitions_total",
    "Deployment state transitions observed by status polling",
    labelnames=["state"],
)

domain_purchases_total = Counter(
    "sitesmith_domain_purchases_total",
    "Domain purchase outcomes",
    labelnames=["registrar", "outcome"],
)
