"""Prometheus metrics for alert generation, gamification and data availability"""

from prometheus_client import Counter, Histogram

# Alert metrics
alert_batch_counter = Counter(
    "budget_alert_batches_total",
    "Alert batches generated",
    ["source"],  # model | fallback
)

alerts_generated_counter = Counter(
    "budget_alerts_generated_total",
    "Alerts generated by severity",
    ["severity"],
)

completion_failure_counter = Counter(
    "completion_failures_total",
    "Generative completion calls that fell back to rules",
    ["reason"],  # timeout | http_status | network | invalid_json | schema_mismatch ...
)

completion_latency_histogram = Histogram(
    "completion_latency_seconds",
    "Generative completion response time",
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0],
)

# Store reads
partial_data_counter = Counter(
    "partial_data_unavailable_total",
    "Store reads that degraded to an empty default",
    ["source"],  # manual | bank | budget | categories | ...
)

# Gamification
streak_check_in_counter = Counter(
    "streak_check_ins_total",
    "Daily streak check-ins",
    ["outcome"],  # started | continued | restarted | broken | duplicate
)

mission_baseline_counter = Counter(
    "mission_baselines_total",
    "Weekly mission baselines by source tier",
    ["source"],  # last_week | monthly_average | default_min
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_alert_batch(source: str, severities: list[str]) -> None:
    """Record one generated batch and the severity mix it contained"""
    alert_batch_counter.labels(source=source).inc()
    for severity in severities:
        alerts_generated_counter.labels(severity=severity).inc()
