"""Prometheus metric inventory.

Every metric the service exposes is defined here; the modules that own the
behavior import and increment them. Scraped from GET /metrics.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by the MetricsMiddleware)
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
# Domain metrics
# ---------------------------------------------------------------------------

ENROLLMENTS_CREATED = Counter(
    "enrollments_created_total",
    "Enrollments created",
)

ENROLLMENTS_COMPLETED = Counter(
    "enrollments_completed_total",
    "Enrollments that transitioned into the completed state",
)

MESSAGES_RECEIVED = Counter(
    "contact_messages_received_total",
    "Contact messages received",
    ["sender"],  # "user" or "anonymous"
)

REPLIES_SENT = Counter(
    "message_replies_total",
    "Replies appended to message threads",
    ["author"],  # "admin" or "user"
)

RATE_LIMIT_HITS = Counter(
    "rate_limit_hits_total",
    "Requests rejected by rate limiting (429s)",
    ["key_type"],  # "user" or "ip"
)
