"""Prometheus metrics for billing volume, collections and payment outcomes"""

from prometheus_client import Counter, Histogram

# Billing metrics
bill_counter = Counter(
    "fish_ledger_bills_total",
    "Total bills created",
)

billed_paise_counter = Counter(
    "fish_ledger_billed_paise_total",
    "Sum of bill totals in paise",
)

# Payment metrics
payment_counter = Counter(
    "fish_ledger_payments_total",
    "Payment attempts by outcome",
    ["outcome"],  # accepted | non_positive | overpayment | not_found | conflict
)

collected_paise_counter = Counter(
    "fish_ledger_collected_paise_total",
    "Sum of accepted payments in paise",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_bill(total_paise: int) -> None:
    """Record a created bill"""
    bill_counter.inc()
    billed_paise_counter.inc(total_paise)


def record_payment(outcome: str, amount_paise: int = 0) -> None:
    """Record a payment attempt; only accepted payments count toward collections"""
    payment_counter.labels(outcome=outcome).inc()
    if outcome == "accepted":
        collected_paise_counter.inc(amount_paise)
