"""
Treasury and grant instrumentation.

Prometheus counters tracking how much is allocated to and released from
grants, plus rejected operations by error class. The helpers are safe to
call from the settlement path: they never raise and become no-ops when
the caller passes ``enabled=False`` (each service passes its own config flag).
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Gauge

logger = logging.getLogger(__name__)

grants_created_counter = Counter(
    "grantstream_grants_created_total", "Total number of grants created", ["kind"]
)

amount_allocated_counter = Counter(
    "grantstream_amount_allocated_total",
    "Total base units moved into grant custody at creation",
    ["kind"],
)

amount_released_counter = Counter(
    "grantstream_amount_released_total",
    "Total base units released from grant custody to recipients",
    ["kind"],
)

operations_rejected_counter = Counter(
    "grantstream_operations_rejected_total",
    "Operations rejected before any state was committed",
    ["operation", "error"],
)

treasury_paid_gauge = Gauge(
    "grantstream_treasury_total_paid", "Cumulative amount paid out by a treasury", ["treasury"]
)


def record_grant_created(kind: str, amount: int, enabled: bool = True) -> None:
    """Count a committed grant creation and its funded amount."""
    if not enabled or amount <= 0:
        return
    try:
        grants_created_counter.labels(kind=kind).inc()
        amount_allocated_counter.labels(kind=kind).inc(amount)
    except ValueError:
        logger.debug("Metric update skipped", extra={"event": "metrics.skipped", "kind": kind})


def record_release(
    kind: str, amount: int, treasury_id: str, treasury_total_paid: int, enabled: bool = True
) -> None:
    """Count a committed withdrawal or claim."""
    if not enabled or amount <= 0:
        return
    try:
        amount_released_counter.labels(kind=kind).inc(amount)
        treasury_paid_gauge.labels(treasury=treasury_id).set(treasury_total_paid)
    except ValueError:
        logger.debug("Metric update skipped", extra={"event": "metrics.skipped", "kind": kind})


def record_rejection(operation: str, error: str, enabled: bool = True) -> None:
    if not enabled:
        return
    try:
        operations_rejected_counter.labels(operation=operation, error=error).inc()
    except ValueError:
        logger.debug("Metric update skipped", extra={"event": "metrics.skipped", "operation": operation})
