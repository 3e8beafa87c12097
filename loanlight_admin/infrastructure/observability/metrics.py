"""Prometheus metrics for dashboard aggregations, report exports and backend latency"""

from prometheus_client import Counter, Histogram

# Aggregation metrics
aggregation_counter = Counter(
    "loanlight_aggregation_total",
    "Dashboard aggregations computed",
    ["aggregator", "outcome"],  # stats | activities | loan_status ; ok | failed
)

aggregation_latency_histogram = Histogram(
    "loanlight_aggregation_seconds",
    "Time spent computing a dashboard aggregation",
    ["aggregator"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 15.0],
)

# Report metrics
report_counter = Counter(
    "loanlight_report_total",
    "Reports printed or exported",
    ["format", "outcome"],  # html | csv | pdf ; ok | failed
)

# Backend metrics
gateway_latency_histogram = Histogram(
    "gateway_request_seconds",
    "Remote data backend response time",
    ["operation", "table"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Messaging stubs
message_counter = Counter(
    "loanlight_message_dispatch_total",
    "Email/SMS dispatch requests",
    ["channel", "outcome"],  # email | sms ; accepted | rejected
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_aggregation(aggregator: str, succeeded: bool, duration_seconds: float) -> None:
    """Record outcome and latency of one aggregation run"""
    aggregation_counter.labels(aggregator=aggregator, outcome="ok" if succeeded else "failed").inc()
    aggregation_latency_histogram.labels(aggregator=aggregator).observe(duration_seconds)
