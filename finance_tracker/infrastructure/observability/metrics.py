"""Prometheus metrics for settlements, payoffs and HTTP latency"""

from prometheus_client import Counter, Histogram

# Settlement metrics
settlement_counter = Counter(
    "finance_settlement_total",
    "Credit payment settlement attempts",
    ["outcome"],  # settled | conflict | not_found | invalid
)

settled_amount_histogram = Histogram(
    "finance_settled_amount_cents",
    "Settled installment amounts in cents",
    buckets=[10_000, 50_000, 100_000, 250_000, 500_000, 1_000_000, 5_000_000],
)

credit_paid_off_counter = Counter(
    "finance_credit_paid_off_total",
    "Credits whose balance reached zero",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_settlement(outcome: str, amount_cents: int | None = None, paid_off: bool = False) -> None:
    """Record settlement outcome, amount distribution and payoffs"""
    settlement_counter.labels(outcome=outcome).inc()

    if amount_cents is not None:
        settled_amount_histogram.observe(amount_cents)

    if paid_off:
        credit_paid_off_counter.inc()
