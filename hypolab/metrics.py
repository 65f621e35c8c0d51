"""Prometheus metric definitions for the workflow engine."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# --- Transitions ---

transitions_total = Counter(
    "hypolab_transitions_total",
    "Accepted hypothesis transitions",
    labelnames=["kind", "target"],
)

transition_rejections_total = Counter(
    "hypolab_transition_rejections_total",
    "Rejected hypothesis transition requests",
    labelnames=["kind", "reason"],
)

# --- Analysis ---

analyses_total = Counter(
    "hypolab_analyses_total",
    "Experiment analysis reports generated",
    labelnames=["recommended_status"],
)

analysis_duration_seconds = Histogram(
    "hypolab_analysis_duration_seconds",
    "Time spent building an experiment analysis report",
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1),
)
