"""
Prometheus metrics shared across the API.

The ASGI exporter is mounted at /metrics by the application.
"""

from prometheus_client import Counter

ALLOCATION_DECISIONS = Counter(
    "projectdesk_allocation_decisions_total",
    "Resource allocation capacity decisions",
    ["operation", "outcome"],
)


def record_allocation_decision(operation: str, accepted: bool) -> None:
    """Count an accept/reject decision for create or update."""
    outcome = "accepted" if accepted else "rejected"
    ALLOCATION_DECISIONS.labels(operation=operation, outcome=outcome).inc()
