"""Prometheus metric inventory.

Every metric the service exports is declared here; the modules that own
the behavior import and update them at the point of action.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Ledger metrics
# ---------------------------------------------------------------------------

MEMBERSHIP_OPERATIONS = Counter(
    "membership_operations_total",
    "Ledger operations by outcome",
    ["operation", "result"],  # result: "ok" or the error code
)

FEES_COLLECTED = Counter(
    "membership_fees_collected_total",
    "Sum of membership fees credited to the collector",
)

EVENTS_DROPPED = Counter(
    "membership_events_dropped_total",
    "Ledger events that the sink failed to publish",
    ["event_type"],
)

FEE_REFUND_FAILURES = Counter(
    "membership_fee_refund_failures_total",
    "Reserved fees that could not be returned after a failed operation",
)
