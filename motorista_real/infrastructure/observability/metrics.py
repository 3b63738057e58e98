"""Prometheus metrics for ledger activity, vehicle lifecycle and goal completion"""

from prometheus_client import Counter, Histogram

# Ledger metrics
transaction_counter = Counter(
    "motorista_transactions_total",
    "Transactions recorded by drivers",
    ["type", "category"],
)

# Vehicle lifecycle metrics
vehicle_registration_counter = Counter(
    "motorista_vehicle_registrations_total",
    "Vehicles registered",
    ["ownership"],  # proprio | financiado | alugado
)

obligations_scheduled_counter = Counter(
    "motorista_obligations_scheduled_total",
    "Future obligations materialized at vehicle registration",
    ["category"],
)

amortization_counter = Counter(
    "motorista_amortizations_total",
    "Early installment payments",
    ["outcome"],  # amortized | paid_off
)

# Dashboard metrics
goal_completion_counter = Counter(
    "motorista_goal_completion_total",
    "Dashboard reads by goal completion bucket",
    ["bucket"],  # no_goal, 0-50%, 50-100%, 100%+
)

# Identity provider metrics
auth_provider_failures_counter = Counter(
    "auth_provider_failures_total",
    "Failed identity provider calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_goal_completion(dynamic_goal: float, raw_percent: float) -> None:
    """Bucket goal completion for monitoring how often drivers hit their target"""
    if dynamic_goal <= 0:
        bucket = "no_goal"
    elif raw_percent < 50:
        bucket = "0-50%"
    elif raw_percent < 100:
        bucket = "50-100%"
    else:
        bucket = "100%+"

    goal_completion_counter.labels(bucket=bucket).inc()
