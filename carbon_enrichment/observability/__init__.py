"""Observability for the enrichment client.

Provides:
- Correlation ID context management for batch-run tracing
- Structured logging with context propagation
- Prometheus metrics for cache, registry and batch activity

Usage:
    from carbon_enrichment.observability import (
        correlation_id_context,
        configure_logging,
        CACHE_OPERATIONS,
    )
"""

from carbon_enrichment.observability.context import (
    get_correlation_id,
    correlation_id_context,
)
from carbon_enrichment.observability.logging import (
    configure_logging,
    add_correlation_id_processor,
)
from carbon_enrichment.observability.metrics import (
    # Counters
    CACHE_OPERATIONS,
    REGISTRY_REQUESTS,
    RETRY_ATTEMPTS,
    FALLBACK_USED,
    BATCH_QUERIES,
    # Gauges
    CACHE_SIZE,
    # Histograms
    REQUEST_DURATION,
    # Utilities
    get_metrics_text,
)

__all__ = [
    # Context
    "get_correlation_id",
    "correlation_id_context",
    # Logging
    "configure_logging",
    "add_correlation_id_processor",
    # Counters
    "CACHE_OPERATIONS",
    "REGISTRY_REQUESTS",
    "RETRY_ATTEMPTS",
    "FALLBACK_USED",
    "BATCH_QUERIES",
    # Gauges
    "CACHE_SIZE",
    # Histograms
    "REQUEST_DURATION",
    # Utilities
    "get_metrics_text",
]
