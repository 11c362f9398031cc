"""Prometheus metrics and observability helpers for the coin search service."""
from __future__ import annotations

import time
from contextlib import contextmanager

from prometheus_client import Counter, Gauge, Histogram

from .config import Settings, get_settings

_CYCLE_DURATION = Histogram(
    "coinsearch_refresh_cycle_duration_seconds",
    "Duration of a full fetch-normalize-rank-publish cycle.",
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 3, 5, 8, 13, 30),
)
_CYCLES = Counter(
    "coinsearch_refresh_cycles_total",
    "Refresh cycles by outcome.",
    ["outcome"],
)
_ERRORS = Counter(
    "coinsearch_refresh_errors_total",
    "Refresh cycle failures by kind.",
    ["kind"],
)
_SNAPSHOT_RECORDS = Gauge(
    "coinsearch_snapshot_records",
    "Number of records in the published snapshot.",
)
_RELAY_REQUESTS = Counter(
    "coinsearch_relay_requests_total",
    "Relay requests by response status.",
    ["status"],
)
_FETCH_LATENCY = Histogram(
    "coinsearch_fetch_latency_seconds",
    "Latency of outbound market-data requests.",
    labelnames=("target",),
    buckets=(0.05, 0.1, 0.2, 0.3, 0.5, 0.75, 1.0, 1.5, 2.0, 3.0, 5.0),
)


def _enabled(settings: Settings | None) -> bool:
    """Honor the settings the caller was built with; the global ones otherwise."""

    return (settings or get_settings()).metrics_enabled


def record_cycle(
    duration: float,
    outcome: str,
    records: int | None = None,
    settings: Settings | None = None,
) -> None:
    if not _enabled(settings):
        return
    _CYCLE_DURATION.observe(max(duration, 0.0))
    _CYCLES.labels(outcome=outcome).inc()
    if records is not None:
        _SNAPSHOT_RECORDS.set(records)


def record_error(kind: str, settings: Settings | None = None) -> None:
    if not _enabled(settings):
        return
    _ERRORS.labels(kind=kind).inc()


def record_relay(status: int, settings: Settings | None = None) -> None:
    if not _enabled(settings):
        return
    _RELAY_REQUESTS.labels(status=str(status)).inc()


@contextmanager
def record_fetch_latency(target: str, settings: Settings | None = None):
    if not _enabled(settings):
        yield
        return
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        _FETCH_LATENCY.labels(target=target).observe(max(elapsed, 0.0))
