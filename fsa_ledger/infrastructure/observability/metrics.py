"""Prometheus metrics for monitoring allocation outcomes, contention and account creation"""

from decimal import Decimal
from prometheus_client import Counter, Histogram

# Allocation metrics
allocation_counter = Counter(
    "fsa_allocation_total",
    "Allocation requests by outcome",
    ["outcome"],  # success | invalid_argument | not_found | invalid_state | limit_exceeded | storage_failure
)

allocated_amount_counter = Counter(
    "fsa_allocated_amount_dollars_total",
    "Dollars committed to FSA accounts by allocations",
)

allocation_conflict_counter = Counter(
    "fsa_allocation_conflicts_total",
    "Allocation attempts retried after a concurrent commit on the same account",
)

allocation_duration_histogram = Histogram(
    "fsa_allocation_duration_seconds",
    "Allocation latency including retries",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

# Lifecycle metrics
account_created_counter = Counter(
    "fsa_account_created_total",
    "FSA accounts created",
    ["source"],  # onboarding | direct
)

account_status_change_counter = Counter(
    "fsa_account_status_change_total",
    "Administrative account status transitions",
    ["from_status", "to_status"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_allocation(outcome: str, amount: Decimal | None = None) -> None:
    """Record allocation outcome; committed amounts feed the dollars counter"""
    allocation_counter.labels(outcome=outcome).inc()
    if outcome == "success" and amount is not None:
        allocated_amount_counter.inc(float(amount))
