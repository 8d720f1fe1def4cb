"""Prometheus metrics definitions for the enrichment client.

Defines counters, gauges, and histograms for monitoring:
- Cache performance
- Upstream registry requests, retries and fallbacks
- Batch run outcomes

Usage:
    from carbon_enrichment.observability.metrics import (
        CACHE_OPERATIONS,
        REQUEST_DURATION,
    )

    # Increment counter
    CACHE_OPERATIONS.labels(operation="get", result="hit").inc()

    # Track histogram
    with REQUEST_DURATION.labels(client="material_registry").time():
        await executor.execute(descriptor)

Metrics text is printed by ``carbon-enrich run --metrics``.
"""

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Custom registry to avoid conflicts with default registry
REGISTRY = CollectorRegistry(auto_describe=True)

# =============================================================================
# COUNTERS - Monotonically increasing values
# =============================================================================

CACHE_OPERATIONS = Counter(
    name="carbon_enrich_cache_operations_total",
    documentation="Total cache operations",
    labelnames=["operation", "result"],  # get/put/delete/evict, hit/miss/stored/removed/lru
    registry=REGISTRY,
)

REGISTRY_REQUESTS = Counter(
    name="carbon_enrich_registry_requests_total",
    documentation="Logical upstream requests by outcome",
    labelnames=["client", "outcome"],  # cache, live, client_error, exhausted, invalid
    registry=REGISTRY,
)

RETRY_ATTEMPTS = Counter(
    name="carbon_enrich_retry_attempts_total",
    documentation="Retries scheduled after transient failures",
    labelnames=["reason"],  # ServerError, RequestTimeoutError, TransientError
    registry=REGISTRY,
)

FALLBACK_USED = Counter(
    name="carbon_enrich_fallback_used_total",
    documentation="Reference lookups answered from shipped fallback data",
    labelnames=["dataset"],
    registry=REGISTRY,
)

BATCH_QUERIES = Counter(
    name="carbon_enrich_batch_queries_total",
    documentation="Batch queries by outcome",
    labelnames=["outcome"],  # enriched, failed, cancelled
    registry=REGISTRY,
)

# =============================================================================
# GAUGES - Values that can go up and down
# =============================================================================

CACHE_SIZE = Gauge(
    name="carbon_enrich_cache_entries",
    documentation="Number of entries in the response cache",
    registry=REGISTRY,
)

# =============================================================================
# HISTOGRAMS - Distribution of values
# =============================================================================

REQUEST_DURATION = Histogram(
    name="carbon_enrich_request_duration_seconds",
    documentation="Logical request duration including retries",
    labelnames=["client"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1, 2, 5, 10, 30, 60, 120, float("inf")),
    registry=REGISTRY,
)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_metrics_text() -> bytes:
    """Generate Prometheus metrics in text format.

    Returns:
        UTF-8 encoded metrics in Prometheus exposition format.
    """
    return generate_latest(REGISTRY)
