"""Prometheus metrics for intent mix, dispatch outcomes and guarded actions"""

from prometheus_client import Counter, Histogram

# Classification metrics
intent_counter = Counter(
    "carteira_intent_total",
    "Inbound messages by classified intent",
    ["kind"],  # command | expense | installment | unknown
)

category_match_counter = Counter(
    "carteira_category_match_total",
    "Automatic category assignments",
    ["category"],
)

# Dispatch metrics
dispatch_outcome_counter = Counter(
    "carteira_dispatch_outcome_total",
    "Dispatcher results by status",
    ["status"],  # ok | error | confirmation_required | duplicate | ignored | welcome
)

guarded_action_counter = Counter(
    "carteira_guarded_action_total",
    "Confirmation gate decisions",
    ["action_type", "outcome"],  # outcome: pending | executed | rejected
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_dispatch(intent_kind: str, status: str) -> None:
    """Record classification and dispatch outcome for one message"""
    intent_counter.labels(kind=intent_kind).inc()
    dispatch_outcome_counter.labels(status=status).inc()
