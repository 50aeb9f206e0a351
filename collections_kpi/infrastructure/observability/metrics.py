"""Prometheus metrics for monitoring analytics load and scorecard outcomes"""

from typing import Sequence

from prometheus_client import Counter, Histogram

from collections_kpi.domain.models import CollectorPerformance

# Analytics metrics
computation_counter = Counter(
    "collections_kpi_computation_total",
    "Analytics computations served",
    ["operation"],  # kpis | collectors | customers | customer_profiles | trends
)

computation_duration_histogram = Histogram(
    "collections_kpi_computation_seconds",
    "Time spent normalizing and computing analytics",
    ["operation"],
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

invoice_batch_histogram = Histogram(
    "collections_kpi_invoice_batch_size",
    "Invoices per analytics request after period filtering",
    buckets=[0, 10, 100, 1_000, 10_000, 100_000],
)

# Scorecard metrics
collector_rating_counter = Counter(
    "collections_kpi_collector_rating_total",
    "Collector ratings issued",
    ["rating"],  # Outstanding | Excellent | Good | Poor
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_computation(operation: str, invoice_count: int, duration_seconds: float) -> None:
    """Record one analytics computation"""
    computation_counter.labels(operation=operation).inc()
    computation_duration_histogram.labels(operation=operation).observe(duration_seconds)
    invoice_batch_histogram.observe(invoice_count)


def record_scorecards(performances: Sequence[CollectorPerformance]) -> None:
    """Record rating distribution for issued scorecards"""
    for perf in performances:
        collector_rating_counter.labels(rating=perf.rating).inc()
